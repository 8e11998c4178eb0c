"""Multi-pass renderer that merges independent super-samples.

SuperSampler renders the same scene several times, each pass an independent
Image with samples_per_pixel rays per pixel, and averages the passes with
merge_samples(). The merged image converges like a single render with
passes * samples_per_pixel samples, but can be inspected after every pass.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.core.progressive import SuperSampler
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> sampler = SuperSampler(camera, scene, 400, 225, samples_per_pixel=8)
    >>> sampler.render(8)
    >>> image = sampler.image
"""

import logging
from collections.abc import Callable, Generator

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.core.image import Image, merge_samples
from pathtracer.core.integrator import render, validate_render_args
from pathtracer.scene.scene_list import SceneList

logger = logging.getLogger(__name__)

# Callback receives (completed_passes, total_passes)
ProgressCallback = Callable[[int, int], None]


class SuperSampler:
    """Renders and merges independent passes of one scene.

    Attributes:
        camera: The camera to render from.
        scene: The scene to render.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Rays averaged per pixel in each pass.
        max_depth: Maximum number of bounces per path.
    """

    def __init__(
        self,
        camera: ThinLensCamera,
        scene: SceneList,
        width: int,
        height: int,
        samples_per_pixel: int = 8,
        max_depth: int = 50,
    ) -> None:
        """Initialize the sampler.

        Raises:
            ValueError: If a size or count is out of range.
        """
        validate_render_args(width, height, samples_per_pixel, max_depth)
        self.camera = camera
        self.scene = scene
        self.width = width
        self.height = height
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self._passes: list[Image] = []

    @property
    def pass_count(self) -> int:
        """Number of passes rendered so far."""
        return len(self._passes)

    @property
    def passes(self) -> list[Image]:
        """The individual pass images (a copy of the list)."""
        return list(self._passes)

    @property
    def total_samples(self) -> int:
        """Samples per pixel accumulated across all passes."""
        return self.pass_count * self.samples_per_pixel

    def reset(self) -> None:
        """Discard all rendered passes."""
        self._passes.clear()

    def render_pass(self) -> Image:
        """Render one more pass and keep it.

        Returns:
            The new pass image.
        """
        image = render(
            self.camera,
            self.scene,
            self.width,
            self.height,
            self.samples_per_pixel,
            self.max_depth,
        )
        self._passes.append(image)
        return image

    def render(self, passes: int, callback: ProgressCallback | None = None) -> None:
        """Render several passes, calling callback after each one.

        Passes accumulate across calls until reset() is called.

        Args:
            passes: Number of passes to add.
            callback: Optional function receiving (completed, total) where
                both count only the passes of this call.

        Example:
            >>> def progress(done, total):
            ...     print(f"Running {done} of {total} samples.")
            >>> sampler.render(8, callback=progress)
        """
        for done, total in self.render_progressive(passes):
            if callback is not None:
                callback(done, total)

    def render_progressive(self, passes: int) -> Generator[tuple[int, int], None, None]:
        """Render several passes, yielding (completed, total) after each one.

        This is a generator-based alternative to render() with callbacks.
        """
        if passes < 1:
            raise ValueError(f"passes = {passes} must be at least 1")

        for done in range(1, passes + 1):
            self.render_pass()
            logger.debug("Finished pass %d of %d", done, passes)
            yield (done, passes)

    @property
    def image(self) -> Image:
        """The mean of all passes rendered so far.

        Raises:
            RuntimeError: If no pass has been rendered yet.
        """
        if not self._passes:
            raise RuntimeError("No passes rendered yet. Call render() first.")
        logger.info("Merging %d passes (%d spp total)", self.pass_count, self.total_samples)
        return merge_samples(self._passes)

    def __repr__(self) -> str:
        return (
            f"SuperSampler(width={self.width}, height={self.height}, "
            f"spp={self.samples_per_pixel}, passes={self.pass_count})"
        )
