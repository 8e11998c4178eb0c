"""Scene module for scene description and ray-scene queries.

Components:
    intersection: Kernel-side sphere storage and nearest-hit search
    scene_list: SceneList, the host-side list of spheres with materials
    random_spheres: The random spheres demo scene

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for sphere data
    - Materials stored once and referenced by material ID
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    load_spheres,
    query_nearest_hit,
)
from .random_spheres import create_random_spheres_scene
from .scene_list import Hit, SceneList, Sphere, material_from_dict

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "MAX_SPHERES",
    "clear_scene",
    "load_spheres",
    "get_sphere_count",
    "intersect_scene",
    "query_nearest_hit",
    # Scene list module
    "SceneList",
    "Sphere",
    "Hit",
    "material_from_dict",
    # Random spheres module
    "create_random_spheres_scene",
]
