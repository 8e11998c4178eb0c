"""Random spheres scene configuration.

A ground plane made of one huge grey sphere, a grid of small randomly
colored spheres scattered on it, and three large feature spheres:

- Glass sphere in the middle
- Brown diffuse sphere on the left
- Polished metal sphere on the right

Small spheres are 80% diffuse with albedo = random * random, 15% metal with
albedo in [0.5, 1) and fuzz in [0, 0.3), and 5% glass. Spheres that would
overlap the metal sphere are skipped.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> scene, camera = create_random_spheres_scene(seed=42)
    >>> len(scene) > 4
    True
"""

import math

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.materials.registry import Material
from pathtracer.scene.scene_list import SceneList

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

SMALL_SPHERE_RADIUS = 0.2
# Small spheres closer than this to the clearing point are skipped
CLEARING_POINT = (4.0, 0.2, 0.0)
CLEARING_RADIUS = 0.9

LARGE_SPHERE_RADIUS = 1.0
GLASS_IOR = 1.5
GLASS_SPHERE_CENTER = (0.0, 1.0, 0.0)
DIFFUSE_SPHERE_CENTER = (-4.0, 1.0, 0.0)
DIFFUSE_SPHERE_ALBEDO = (0.4, 0.2, 0.1)
METAL_SPHERE_CENTER = (4.0, 1.0, 0.0)
METAL_SPHERE_ALBEDO = (0.7, 0.6, 0.5)

# Camera
LOOKFROM = (13.0, 2.0, 3.0)
LOOKAT = (0.0, 0.0, 0.0)
VFOV = 40.0
APERTURE = 0.1


def _random_material(rng: np.random.Generator, choose_mat: float) -> Material:
    if choose_mat < 0.8:
        albedo = rng.random(3) * rng.random(3)
        return Lambertian(tuple(albedo))
    if choose_mat < 0.95:
        albedo = rng.uniform(0.5, 1.0, 3)
        return Metal(tuple(albedo), fuzz=rng.uniform(0.0, 0.3))
    return Dielectric(GLASS_IOR)


def create_random_spheres_scene(
    seed: int | None = None,
    grid: int = 3,
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneList, ThinLensCamera]:
    """Create the random spheres scene and its camera.

    Args:
        seed: Seed for the scene layout. The same seed gives the same scene;
            None draws a fresh layout.
        grid: Small spheres are placed on the cells a, b in [-grid, grid).
        aspect_ratio: Aspect ratio of the camera.

    Returns:
        A tuple of (SceneList, ThinLensCamera). The camera looks from
        (13, 2, 3) at the origin and focuses on it.
    """
    rng = np.random.default_rng(seed)
    scene = SceneList()

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, Lambertian(GROUND_ALBEDO))

    clearing = np.array(CLEARING_POINT)
    for a in range(-grid, grid):
        for b in range(-grid, grid):
            choose_mat = rng.random()
            center = np.array(
                [a + 0.9 * rng.random(), SMALL_SPHERE_RADIUS, b + 0.9 * rng.random()]
            )
            if np.linalg.norm(center - clearing) > CLEARING_RADIUS:
                scene.add_sphere(tuple(center), SMALL_SPHERE_RADIUS, _random_material(rng, choose_mat))

    scene.add_sphere(GLASS_SPHERE_CENTER, LARGE_SPHERE_RADIUS, Dielectric(GLASS_IOR))
    scene.add_sphere(DIFFUSE_SPHERE_CENTER, LARGE_SPHERE_RADIUS, Lambertian(DIFFUSE_SPHERE_ALBEDO))
    scene.add_sphere(METAL_SPHERE_CENTER, LARGE_SPHERE_RADIUS, Metal(METAL_SPHERE_ALBEDO, fuzz=0.0))

    camera = ThinLensCamera(
        lookfrom=LOOKFROM,
        lookat=LOOKAT,
        vup=(0.0, 1.0, 0.0),
        vfov=VFOV,
        aspect_ratio=aspect_ratio,
        aperture=APERTURE,
        focus_dist=math.dist(LOOKFROM, LOOKAT),
    )
    return scene, camera
