"""Linear-color image buffer and sample merging.

An Image is a width x height grid of linear RGB colors stored in a NumPy
float64 array of shape (height, width, 3). Pixels are addressed as (i, j) with
i the column (0 = left) and j the row (0 = bottom), matching the renderer's
(u, v) convention; internally pixel (i, j) lives at array[j, i].

Example:
    >>> from pathtracer.core.image import Image, merge_samples
    >>> a = Image(4, 2)
    >>> a[0, 0] = (1.0, 0.5, 0.25)
    >>> merged = merge_samples([a, Image(4, 2)])
    >>> merged[0, 0]
    (0.5, 0.25, 0.125)
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

# Largest 8-bit value fraction used when quantizing, so 1.0 maps to 255
_MAX_QUANTIZED = 0.999


class Image:
    """A grid of linear RGB colors, created black."""

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
        self._pixels = np.zeros((height, width, 3), dtype=np.float64)

    @classmethod
    def from_array(cls, pixels: npt.ArrayLike) -> "Image":
        """Wrap a (height, width, 3) array of linear colors, row 0 at the bottom.

        The data is copied.
        """
        array = np.asarray(pixels, dtype=np.float64)
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(f"Expected an array of shape (height, width, 3), got {array.shape}")
        image = cls(array.shape[1], array.shape[0])
        image._pixels[...] = array
        return image

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def pixels(self) -> npt.NDArray[np.float64]:
        """The underlying (height, width, 3) array, row 0 at the bottom."""
        return self._pixels

    def __getitem__(self, index: tuple[int, int]) -> tuple[float, float, float]:
        i, j = index
        r, g, b = self._pixels[j, i]
        return (float(r), float(g), float(b))

    def __setitem__(self, index: tuple[int, int], color: Sequence[float]) -> None:
        i, j = index
        self._pixels[j, i] = color

    def copy(self) -> "Image":
        return Image.from_array(self._pixels)

    def _quantize(self, gamma_correct: bool) -> npt.NDArray[np.int64]:
        values = self._pixels
        if gamma_correct:
            values = np.sqrt(np.maximum(values, 0.0))
        return (256.0 * np.clip(values, 0.0, _MAX_QUANTIZED)).astype(np.int64)

    def to_ppm_rows(self, gamma_correct: bool = True) -> list[str]:
        """Format pixels as PPM body lines "r g b".

        Rows are emitted from the top of the image (row height - 1) down to
        row 0, columns left to right. Each channel c maps to
        int(256 * clamp(c', 0, 0.999)), where c' = sqrt(c) when gamma_correct
        is set and c' = c otherwise.
        """
        quantized = self._quantize(gamma_correct)
        return [
            f"{r} {g} {b}"
            for row in quantized[::-1]
            for r, g, b in row
        ]

    def to_uint8(self, gamma_correct: bool = True) -> npt.NDArray[np.uint8]:
        """Quantize to an 8-bit (height, width, 3) array with the top row first."""
        return self._quantize(gamma_correct)[::-1].astype(np.uint8)

    def __repr__(self) -> str:
        return f"Image(width={self.width}, height={self.height})"


def merge_samples(images: Sequence[Image]) -> Image:
    """Average independently rendered images pixel by pixel.

    The images are summed and the sum is divided by their count.

    Raises:
        ValueError: If no images are given or their dimensions differ.
    """
    if len(images) == 0:
        raise ValueError("Cannot merge an empty list of images")

    width, height = images[0].width, images[0].height
    total = np.zeros((height, width, 3), dtype=np.float64)
    for image in images:
        if image.width != width or image.height != height:
            raise ValueError(
                f"Image dimensions differ: expected {width}x{height}, "
                f"got {image.width}x{image.height}"
            )
        total += image.pixels

    return Image.from_array(total / len(images))
