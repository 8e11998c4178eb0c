"""Sphere primitive with ray-sphere intersection.

The intersection solves the half-b form of the ray-sphere quadratic

    a*t^2 + 2*h*t + c = 0

with a = |direction|^2, h = (origin - center) . direction and
c = |origin - center|^2 - radius^2. The nearer root is tried first and only
accepted inside (t_min, t_max]; otherwise the farther root is tried under the
same bound. A ray starting inside the sphere therefore reports the exit point.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.geometry.sphere import SphereShape, hit_sphere
    >>> sphere = SphereShape(center=vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import vec3


@ti.dataclass
class SphereShape:
    """Kernel-side sphere geometry.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss. The other
            fields are only meaningful when hit == 1.
        t: Ray parameter of the intersection.
        point: The intersection point.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the ray struck the outward-facing side, 0 if it hit
            the surface from inside.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient an outward normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit normal pointing out of the primitive.

    Returns:
        A tuple (normal, front_face) where normal opposes ray_direction and
        front_face is 1 if outward_normal already did.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return normal, front_face


@ti.func
def make_miss_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: SphereShape,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).
        sphere: The sphere to test.
        t_min: Exclusive lower bound on accepted ray parameters.
        t_max: Inclusive upper bound on accepted ray parameters.

    Returns:
        A HitRecord; check its hit field to see whether a root was accepted.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = tm.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = (root > t_min) and (root <= t_max)
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = (root > t_min) and (root <= t_max)

        if valid:
            point = ray_origin + root * ray_direction
            outward_normal = (point - sphere.center) / sphere.radius
            normal, front_face = face_normal(ray_direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
            )

    return result
