"""Materials module: scattering policies for surfaces.

Components:
    registry: Material base class, MaterialType tag and the kernel-side
        material table
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance

Each material provides a Taichi scatter function returning
(scattered_direction, attenuation, did_scatter); did_scatter == 0 means the
ray was absorbed.
"""

from .dielectric import Dielectric, cannot_refract, refraction_ratio, scatter_dielectric
from .lambertian import Lambertian, scatter_lambertian
from .metal import Metal, scatter_metal
from .registry import (
    MAX_MATERIALS,
    Material,
    MaterialType,
    clear_materials,
    get_material_count,
    load_materials,
)

__all__ = [
    "Material",
    "MaterialType",
    "MAX_MATERIALS",
    "clear_materials",
    "load_materials",
    "get_material_count",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "refraction_ratio",
    "cannot_refract",
]
