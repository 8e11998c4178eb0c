"""Image export utilities for rendered images.

Supported formats:
    - PPM (plain-text P3, gamma 2 via square root)
    - PNG (8-bit via Pillow, same quantization as PPM)

Example:
    >>> from pathtracer.preview.export import save_ppm
    >>> image = sampler.image
    >>> save_ppm(image, "out.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.core.image import Image

logger = logging.getLogger(__name__)


def ppm_lines(image: Image, gamma_correct: bool = True) -> list[str]:
    """Return the lines of a plain PPM file: "P3", "W H", "255", then pixels."""
    return ["P3", f"{image.width} {image.height}", "255", *image.to_ppm_rows(gamma_correct)]


def save_ppm(image: Image, filepath: str | Path, gamma_correct: bool = True) -> None:
    """Save an image as a plain-text PPM file.

    Lines are joined with newlines, without a trailing newline. File system
    errors propagate unchanged.
    """
    Path(filepath).write_text("\n".join(ppm_lines(image, gamma_correct)))
    logger.info("Wrote %s", filepath)


def save_png(image: Image, filepath: str | Path, gamma_correct: bool = True) -> None:
    """Save an image as an 8-bit PNG file with the top row first."""
    pil_image = PILImage.fromarray(image.to_uint8(gamma_correct))
    pil_image.save(filepath)
    logger.info("Wrote %s", filepath)


def save_image(image: Image, filepath: str | Path) -> None:
    """Save an image as PNG or PPM, chosen by file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        save_ppm(image, filepath)
    elif suffix == ".png":
        save_png(image, filepath)
    else:
        raise ValueError(f"Unsupported image format {suffix!r}; use .ppm or .png")


def compute_rmse(
    image_a: Image | npt.NDArray[np.floating],
    image_b: Image | npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image or array.
        image_b: Second image or array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    a = image_a.pixels if isinstance(image_a, Image) else np.asarray(image_a)
    b = image_b.pixels if isinstance(image_b, Image) else np.asarray(image_b)
    if a.shape != b.shape:
        raise ValueError(f"Image shapes must match: {a.shape} vs {b.shape}")

    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
