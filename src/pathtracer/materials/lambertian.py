"""Lambertian (ideal diffuse) material.

The scattered direction is the surface normal plus a uniformly distributed
unit vector, which yields a cosine-weighted distribution over the hemisphere
around the normal. With that sampling the BRDF and cosine terms cancel and the
attenuation is simply the albedo. Diffuse surfaces never absorb a ray outright.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.materials.lambertian import Lambertian, scatter_lambertian
    >>> red = Lambertian(albedo=(0.8, 0.1, 0.1))
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import taichi as ti

from pathtracer.core.ray import near_zero, random_unit_vector, vec3
from pathtracer.materials.registry import Color, Material, MaterialType, validate_color


@dataclass(frozen=True)
class Lambertian(Material):
    """Lambertian (ideal diffuse) material.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: Color

    material_type: ClassVar[MaterialType] = MaterialType.LAMBERTIAN

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_color("Albedo", self.albedo))

    def table_row(self) -> tuple[Color, float, float]:
        return self.albedo, 0.0, 1.0

    def to_dict(self) -> dict[str, Any]:
        return {"type": "lambertian", "albedo": list(self.albedo)}


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a scattered direction for a Lambertian surface.

    If the random unit vector almost cancels the normal, the scattered
    direction falls back to the bare normal.

    Args:
        albedo: The diffuse reflectance color.
        normal: The unit surface normal at the hit point, facing the ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is always 1.
    """
    scattered_direction = normal + random_unit_vector()
    if near_zero(scattered_direction):
        scattered_direction = normal
    return scattered_direction, albedo, 1
