"""Dielectric (glass/water) material.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when the refraction ratio times sin(theta)
      exceeds 1
    - Schlick's approximation for the Fresnel reflectance, used as the
      probability of reflecting instead of refracting

Glass does not tint light in this model: the attenuation is always white and
the ray always scatters.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.materials.dielectric import Dielectric, scatter_dielectric
    >>> glass = Dielectric(refractive_index=1.5)
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, reflect, reflectance, refract, vec3
from pathtracer.materials.registry import Color, Material, MaterialType


@dataclass(frozen=True)
class Dielectric(Material):
    """Dielectric (glass/water) material.

    Attributes:
        refractive_index: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refractive_index: float = 1.5

    material_type: ClassVar[MaterialType] = MaterialType.DIELECTRIC

    def __post_init__(self) -> None:
        if self.refractive_index <= 0.0:
            raise ValueError(
                f"Index of refraction = {self.refractive_index} must be positive."
            )
        object.__setattr__(self, "refractive_index", float(self.refractive_index))

    def table_row(self) -> tuple[Color, float, float]:
        return (1.0, 1.0, 1.0), 0.0, self.refractive_index

    def to_dict(self) -> dict[str, Any]:
        return {"type": "dielectric", "refractive_index": self.refractive_index}


@ti.func
def refraction_ratio(ior: ti.f64, front_face: ti.i32) -> ti.f64:
    """Index ratio at the interface: 1/ior entering the medium, ior leaving it."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def cannot_refract(ior: ti.f64, incident_direction: vec3, normal: vec3, front_face: ti.i32) -> ti.i32:
    """Return 1 if Snell's law has no solution (total internal reflection)."""
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))
    return refraction_ratio(ior, front_face) * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it leaves it.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        attenuation is white and did_scatter is always 1.
    """
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    ratio = refraction_ratio(ior, front_face)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    must_reflect = cannot_refract(ior, unit_direction, normal, front_face)
    if must_reflect == 1 or reflectance(cos_theta, ratio) > ti.random(ti.f64):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, vec3(1.0, 1.0, 1.0), 1
