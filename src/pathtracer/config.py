"""Runtime configuration: Taichi backend initialisation and render settings.

Taichi fields are declared at module import time throughout the package, so
``init_taichi()`` must be called before importing the camera, scene, material
or integrator modules.

Example:
    >>> from pathtracer.config import RenderSettings, init_taichi
    >>> settings = RenderSettings(width=200, samples_per_pixel=4, passes=2)
    >>> init_taichi(arch=settings.arch, seed=settings.seed)
    >>> from pathtracer.core.integrator import render  # safe to import now
"""

from dataclasses import asdict, dataclass
from typing import Any

import taichi as ti

# Supported backend names for init_taichi()
_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
}

# Defaults of the reference "final scene" render
DEFAULT_WIDTH = 400
DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_SAMPLES_PER_PIXEL = 8
DEFAULT_PASSES = 8
DEFAULT_MAX_DEPTH = 50


def init_taichi(arch: str = "cpu", seed: int = 0, debug: bool = False) -> None:
    """Initialise the Taichi runtime for 64-bit rendering.

    Args:
        arch: Backend name: "cpu", "gpu", "cuda" or "vulkan".
        seed: Seed for Taichi's per-thread random number generators.
        debug: Enable Taichi's debug mode (bounds checking in kernels).

    Raises:
        ValueError: If the backend name is unknown.
    """
    key = arch.lower()
    if key not in _ARCHES:
        raise ValueError(f"Unknown Taichi arch '{arch}'. Expected one of: {', '.join(_ARCHES)}")

    ti.init(
        arch=_ARCHES[key],
        default_fp=ti.f64,
        random_seed=seed,
        debug=debug,
    )


@dataclass
class RenderSettings:
    """Settings for a complete multi-pass render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels. Derived from width / aspect_ratio
            when left as None.
        aspect_ratio: Width divided by height, also used for the camera.
        samples_per_pixel: Jittered rays averaged per pixel in one pass.
        passes: Number of independent full-image passes merged at the end.
        max_depth: Maximum number of bounces per path.
        seed: Random seed for the Taichi runtime and scene construction.
        arch: Taichi backend name.
    """

    width: int = DEFAULT_WIDTH
    height: int | None = None
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    passes: int = DEFAULT_PASSES
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = 0
    arch: str = "cpu"

    def __post_init__(self) -> None:
        if self.height is None and self.aspect_ratio > 0:
            self.height = int(self.width / self.aspect_ratio)

    @property
    def total_samples(self) -> int:
        """Effective samples per pixel across all passes."""
        return self.samples_per_pixel * self.passes

    def validate(self) -> None:
        """Check the settings for values the renderer cannot handle.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.width < 2 or self.height is None or self.height < 2:
            raise ValueError(
                f"Image must be at least 2x2 pixels, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.passes < 1:
            raise ValueError(f"passes must be >= 1, got {self.passes}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.arch.lower() not in _ARCHES:
            raise ValueError(f"Unknown Taichi arch '{self.arch}'")

    def to_dict(self) -> dict[str, Any]:
        """Export the settings to a dictionary (for JSON serialization)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Build settings from a dictionary, ignoring unknown keys.

        Raises:
            ValueError: If the resulting settings are invalid.
        """
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        settings = cls(**known)
        settings.validate()
        return settings
