"""Path tracing integrator for Monte Carlo light transport.

This module implements the rendering kernel: camera rays are traced through
the scene, bounce off surfaces according to their material, and pick up the
sky color when they escape. The light carried by a path is the sky color
times the product of all attenuations along it; a path that is absorbed or
runs out of bounces contributes black.

Each pixel averages samples_per_pixel jittered rays. A render produces one
independent Image; several renders can be combined with merge_samples().

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.core.integrator import render
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> image = render(camera, scene, 400, 225, samples_per_pixel=8, max_depth=50)
"""

import logging
import math
import time
from collections.abc import Sequence

import numpy as np
import taichi as ti

from pathtracer.camera.thin_lens import ThinLensCamera, get_ray, setup_camera
from pathtracer.core.image import Image
from pathtracer.core.ray import normalize, vec3
from pathtracer.materials.dielectric import scatter_dielectric
from pathtracer.materials.lambertian import scatter_lambertian
from pathtracer.materials.metal import scatter_metal
from pathtracer.materials.registry import (
    MaterialType,
    get_material_albedo,
    get_material_fuzz,
    get_material_ior,
    get_material_type,
)
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.scene_list import SceneList

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Hits closer than this are ignored so scattered rays do not re-hit their origin
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints, blended by the ray's vertical direction
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))


# =============================================================================
# Background and Material Dispatch
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene."""
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scattering function of the material's type.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian(
            get_material_albedo(material_id), normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal(
            get_material_albedo(material_id),
            get_material_fuzz(material_id),
            incident_direction,
            normal,
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            get_material_ior(material_id), incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Follows the path for at most max_depth bounces, multiplying a running
    throughput by each surface's attenuation. The path ends with the sky
    color when it escapes, and with black when it is absorbed or the bounce
    budget is exhausted (so max_depth <= 0 always yields black).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Serial so the loop may break even when it is a kernel's outermost loop
    ti.loop_config(serialize=True)
    for _ in range(max_depth):
        rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

        if rec.hit == 0:
            color = throughput * sky_color(ray_direction)
            break

        scattered_direction, attenuation, did_scatter = scatter_material(
            rec.material_id, ray_direction, rec.normal, rec.front_face
        )
        if did_scatter == 0:
            break

        throughput *= attenuation
        ray_origin = rec.point
        ray_direction = scattered_direction

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass(width: ti.i32, height: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32):
    for i, j in ti.ndrange(width, height):
        color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            u = (ti.cast(i, ti.f64) + ti.random(ti.f64)) / ti.cast(width - 1, ti.f64)
            v = (ti.cast(j, ti.f64) + ti.random(ti.f64)) / ti.cast(height - 1, ti.f64)
            ray = get_ray(u, v)
            color += ray_color(ray.origin, ray.direction, max_depth)
        _color_buffer[i, j] = color / ti.cast(samples_per_pixel, ti.f64)


@ti.kernel
def _trace_single(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    return ray_color(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    max_depth: int,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray through the uploaded scene.

    This is a Python-callable function for testing. Upload a scene first
    with SceneList.upload(); for images use render().

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _trace_single(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def validate_render_args(width: int, height: int, samples_per_pixel: int, max_depth: int) -> None:
    """Raise ValueError unless the arguments describe a renderable image."""
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be at least 1")
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must not be negative")


def render(
    camera: ThinLensCamera,
    scene: SceneList,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
) -> Image:
    """Render one image of the scene as seen by the camera.

    Every pixel (i, j) averages samples_per_pixel rays through
    u = (i + xi) / (width - 1), v = (j + xi) / (height - 1) with fresh
    uniform jitter xi per sample and per axis. Pixels are traced in parallel.

    Args:
        camera: The camera to render from.
        scene: The spheres to render.
        width: Image width in pixels (at least 2).
        height: Image height in pixels (at least 2).
        samples_per_pixel: Rays averaged per pixel (at least 1).
        max_depth: Maximum number of bounces per path (0 renders black).

    Returns:
        A new Image with row 0 at the bottom.

    Raises:
        ValueError: If a size or count is out of range.
    """
    validate_render_args(width, height, samples_per_pixel, max_depth)

    start = time.perf_counter()
    setup_camera(camera)
    scene.upload()
    _render_pass(width, height, samples_per_pixel, max_depth)

    # Buffer is indexed (i, j); Image stores (row j, column i)
    pixels = _color_buffer.to_numpy()[:width, :height, :]
    image = Image.from_array(np.transpose(pixels, (1, 0, 2)))

    logger.info(
        "Rendered %dx%d at %d spp in %.2fs",
        width,
        height,
        samples_per_pixel,
        time.perf_counter() - start,
    )
    return image
