"""Thin-lens camera model with depth of field.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed on the plane of perfect focus, focus_dist along -w.
Primary rays start at a random point on a lens disk of radius aperture / 2
around the camera origin and pass through the viewport point for (s, t), so
everything on the focus plane is sharp and the rest is blurred. With a zero
aperture the model reduces to a pinhole camera.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> basis = setup_camera(camera)
    >>> # Inside a kernel: ray = get_ray(s, t)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray, random_in_unit_disk

Vector = tuple[float, float, float]

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera.
        focus_dist: Distance from the camera to the plane of perfect focus.
    """

    lookfrom: Vector
    lookat: Vector
    vup: Vector = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_dist: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Vertical field of view = {self.vfov} must be in (0, 180) degrees")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio = {self.aspect_ratio} must be positive")
        if self.aperture < 0.0:
            raise ValueError(f"Aperture = {self.aperture} must not be negative")
        if self.focus_dist <= 0.0:
            raise ValueError(f"Focus distance = {self.focus_dist} must be positive")

        view = np.subtract(self.lookfrom, self.lookat, dtype=np.float64)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(self.vup, view / np.linalg.norm(view))) < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")


@dataclass(frozen=True)
class CameraBasis:
    """Derived camera frame and viewport, computed once per camera.

    Attributes:
        origin: Camera position (center of the lens).
        u: Unit vector pointing right.
        v: Unit vector pointing up.
        w: Unit vector pointing backward (opposite the view direction).
        horizontal: Full viewport width vector on the focus plane.
        vertical: Full viewport height vector on the focus plane.
        lower_left: Lower-left corner of the viewport.
        lens_radius: Half the aperture.
    """

    origin: Vector
    u: Vector
    v: Vector
    w: Vector
    horizontal: Vector
    vertical: Vector
    lower_left: Vector
    lens_radius: float


def _as_tuple(array: np.ndarray) -> Vector:
    return (float(array[0]), float(array[1]), float(array[2]))


def compute_camera_basis(camera: ThinLensCamera) -> CameraBasis:
    """Compute the camera frame and viewport geometry on the host."""
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    # Viewport dimensions at unit distance
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    return CameraBasis(
        origin=_as_tuple(lookfrom),
        u=_as_tuple(u),
        v=_as_tuple(v),
        w=_as_tuple(w),
        horizontal=_as_tuple(horizontal),
        vertical=_as_tuple(vertical),
        lower_left=_as_tuple(lower_left),
        lens_radius=camera.aperture / 2.0,
    )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f64, shape=())
_lens_radius = ti.field(dtype=ti.f64, shape=())


def setup_camera(camera: ThinLensCamera) -> CameraBasis:
    """Compute the camera basis and make it visible to kernels.

    Must be called from Python before rendering with get_ray().

    Returns:
        The computed CameraBasis.
    """
    basis = compute_camera_basis(camera)
    _camera_origin[None] = basis.origin
    _camera_u[None] = basis.u
    _camera_v[None] = basis.v
    _camera_w[None] = basis.w
    _viewport_horizontal[None] = basis.horizontal
    _viewport_vertical[None] = basis.vertical
    _lower_left_corner[None] = basis.lower_left
    _lens_radius[None] = basis.lens_radius
    return basis


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f64, t: ti.f64) -> Ray:
    """Generate a primary ray through normalized image coordinates (s, t).

    s = 0 is the left edge and t = 0 the bottom edge of the image. The ray
    origin is jittered across the lens disk; its direction is not normalized.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - origin
    )
    return make_ray(origin, direction)


def get_camera_info() -> dict[str, tuple[float, ...] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left and
        lens_radius as read back from the kernel-side fields.
    """
    info: dict[str, tuple[float, ...] | float] = {}
    for name, field in (
        ("origin", _camera_origin),
        ("u", _camera_u),
        ("v", _camera_v),
        ("w", _camera_w),
        ("horizontal", _viewport_horizontal),
        ("vertical", _viewport_vertical),
        ("lower_left", _lower_left_corner),
    ):
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    info["lens_radius"] = float(_lens_radius[None])
    return info
