"""Ray data structure and vector utilities for Monte Carlo path tracing.

This module provides the Ray dataclass, 64-bit vector helpers and the random
sampling primitives used by the camera and materials. All functions are
Taichi functions and must be called from within kernels.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# 64-bit 3D vector used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)

# Magnitude below which a vector counts as degenerate
NEAR_ZERO_EPSILON = 1e-8

# Retry cap for rejection sampling. Each draw is accepted with probability
# above 0.5, so the loop exits after about two draws and the cap is reached
# with probability below 0.5**100.
MAX_REJECTION_ATTEMPTS = 100


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Not necessarily unit
            length; intersection code handles arbitrary lengths.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point origin + t * direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Callers must not pass a zero vector: the result is undefined (NaN).
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if the vector's magnitude is below NEAR_ZERO_EPSILON."""
    return tm.length(v) < NEAR_ZERO_EPSILON


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect v about the unit normal n: v - 2(v.n)n."""
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f64) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The result is split into the part perpendicular to the normal, which is
    scaled by the index ratio, and the parallel part, reconstructed from the
    unit-length constraint. The radicand is clamped at zero so floating-point
    overshoot near grazing angles cannot produce NaN.

    Args:
        uv: The incoming unit direction.
        n: The unit surface normal, on the same side as the incoming ray.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction. Callers are responsible for checking total
        internal reflection beforehand.
    """
    cos_theta = tm.min(-tm.dot(uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -tm.sqrt(tm.max(0.0, 1.0 - tm.dot(r_out_perp, r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f64, ref_idx: ti.f64) -> ti.f64:
    """Schlick's approximation of Fresnel reflectance.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        ref_idx: Refraction ratio at the interface.

    Returns:
        The probability of reflection in [0, 1].
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def uniform(min_value: ti.f64, max_value: ti.f64) -> ti.f64:
    """Uniform random scalar in [min_value, max_value)."""
    return min_value + (max_value - min_value) * ti.random(ti.f64)


@ti.func
def random_vec3(min_value: ti.f64, max_value: ti.f64) -> vec3:
    """Vector with each component uniform in [min_value, max_value)."""
    return vec3(
        uniform(min_value, max_value),
        uniform(min_value, max_value),
        uniform(min_value, max_value),
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniformly distributed point strictly inside the unit sphere.

    Draws points from the enclosing cube until one falls inside the sphere.
    """
    p = vec3(0.0, 0.0, 0.0)
    ti.loop_config(serialize=True)
    for _ in range(MAX_REJECTION_ATTEMPTS):
        p = random_vec3(-1.0, 1.0)
        if length_squared(p) < 1.0:
            break
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Uniformly distributed direction on the unit sphere.

    Normalizes a unit-sphere sample; samples too close to the center to be
    normalized reliably are redrawn.
    """
    p = vec3(0.0, 0.0, 1.0)
    ti.loop_config(serialize=True)
    for _ in range(MAX_REJECTION_ATTEMPTS):
        candidate = random_in_unit_sphere()
        if length_squared(candidate) > NEAR_ZERO_EPSILON:
            p = normalize(candidate)
            break
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Uniformly distributed point (x, y, 0) inside the unit disk.

    Used for thin-lens depth of field. Rejection sampling keeps the density
    uniform over the disk's area.
    """
    p = vec3(0.0, 0.0, 0.0)
    ti.loop_config(serialize=True)
    for _ in range(MAX_REJECTION_ATTEMPTS):
        p = vec3(uniform(-1.0, 1.0), uniform(-1.0, 1.0), 0.0)
        if length_squared(p) < 1.0:
            break
    return p
