"""Preview module for image output.

Components:
    export: PPM and PNG writers and image comparison

Example:
    >>> from pathtracer.preview import save_image
    >>> save_image(sampler.image, "out.ppm")
"""

from pathtracer.preview.export import compute_rmse, ppm_lines, save_image, save_png, save_ppm

__all__ = [
    "ppm_lines",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
