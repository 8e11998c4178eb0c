"""Scene-level ray intersection against all uploaded spheres.

Spheres live in structure-of-arrays Taichi fields, each with the ID of its
material in the material table. ``intersect_scene`` scans them linearly and
keeps the nearest accepted hit, shrinking t_max as it goes, so the result does
not depend on sphere order.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.scene.intersection import load_spheres, query_nearest_hit
    >>> load_spheres([(0.0, 0.0, -1.0)], [0.5], [0])
    1
    >>> query_nearest_hit((0, 0, 0), (0, 0, -1), 0.001, float("inf"))["t"]
    0.5
"""

from collections.abc import Sequence
from typing import Any

import numpy as np
import taichi as ti

from pathtracer.core.ray import vec3
from pathtracer.geometry.sphere import HitRecord, SphereShape, hit_sphere


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if any sphere was hit, 0 otherwise.
        t: Ray parameter of the nearest intersection.
        point: The intersection point.
        normal: Unit normal facing against the incoming ray.
        front_face: 1 if the ray struck the outward-facing side.
        material_id: Index into the material table, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Result slots for single-ray queries issued from Python
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f64, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero; field data is overwritten on next load.
    """
    num_spheres[None] = 0


def load_spheres(
    centers: Sequence[Sequence[float]],
    radii: Sequence[float],
    material_ids: Sequence[int],
) -> int:
    """Replace the uploaded spheres with the given ones.

    Args:
        centers: Sphere centers as (x, y, z).
        radii: Sphere radii.
        material_ids: Material table index for each sphere.

    Returns:
        The number of spheres loaded.

    Raises:
        ValueError: If the three sequences differ in length.
        RuntimeError: If more than MAX_SPHERES spheres are given.
    """
    count = len(centers)
    if len(radii) != count or len(material_ids) != count:
        raise ValueError(
            f"Sphere data length mismatch: {count} centers, {len(radii)} radii, "
            f"{len(material_ids)} material ids"
        )
    if count > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    center_data = np.zeros((MAX_SPHERES, 3), dtype=np.float64)
    radius_data = np.zeros(MAX_SPHERES, dtype=np.float64)
    material_data = np.full(MAX_SPHERES, -1, dtype=np.int32)
    if count:
        center_data[:count] = np.asarray(centers, dtype=np.float64)
        radius_data[:count] = np.asarray(radii, dtype=np.float64)
        material_data[:count] = np.asarray(material_ids, dtype=np.int32)

    sphere_centers.from_numpy(center_data)
    sphere_radii.from_numpy(radius_data)
    sphere_material_ids.from_numpy(material_data)
    num_spheres[None] = count
    return count


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
) -> SceneHitRecord:
    """Find the nearest sphere hit along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        t_min: Exclusive lower bound on accepted ray parameters.
        t_max: Inclusive upper bound on accepted ray parameters.

    Returns:
        The nearest hit, or a miss record (hit == 0).
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = SphereShape(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i])

    return result


@ti.kernel
def _query_kernel(origin: vec3, direction: vec3, t_min: ti.f64, t_max: ti.f64):
    rec = intersect_scene(origin, direction, t_min, t_max)
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_front_face[None] = rec.front_face
    _query_material_id[None] = rec.material_id


def query_nearest_hit(
    origin: Sequence[float],
    direction: Sequence[float],
    t_min: float,
    t_max: float,
) -> dict[str, Any] | None:
    """Intersect a single ray with the uploaded scene from Python.

    Intended for tests and picking; rendering uses intersect_scene directly.

    Returns:
        A dictionary with t, point, normal, front_face and material_id, or
        None if the ray misses every sphere.
    """
    _query_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        t_min,
        t_max,
    )
    if _query_hit[None] == 0:
        return None

    point = _query_point[None]
    normal = _query_normal[None]
    return {
        "t": float(_query_t[None]),
        "point": (float(point[0]), float(point[1]), float(point[2])),
        "normal": (float(normal[0]), float(normal[1]), float(normal[2])),
        "front_face": bool(_query_front_face[None]),
        "material_id": int(_query_material_id[None]),
    }
