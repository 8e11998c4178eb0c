"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a HitRecord
whose hit field tells whether a root was accepted.
"""

from .sphere import HitRecord, SphereShape, face_normal, hit_sphere, make_miss_record

__all__ = [
    "SphereShape",
    "HitRecord",
    "face_normal",
    "hit_sphere",
    "make_miss_record",
]
