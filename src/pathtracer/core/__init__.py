"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and random sampling
    integrator: Path-tracing kernel and the render() entry point
    image: Linear-color image buffer and merge_samples()
    progressive: SuperSampler, the multi-pass driver

All compute-intensive operations use Taichi kernels.
"""

from .image import Image, merge_samples
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    ray_at,
    reflect,
    reflectance,
    refract,
    uniform,
    vec3,
)

# Note: integrator and progressive are NOT imported here, as they declare
# Taichi fields. Import them directly from pathtracer.core.integrator or
# pathtracer.core.progressive after init_taichi().

__all__ = [
    "Image",
    "merge_samples",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "reflectance",
    "near_zero",
    "uniform",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
