"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field declared by already-imported modules.
    """
    from pathtracer.config import init_taichi

    init_taichi(arch="cpu", seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the uploaded spheres and materials around each test."""
    # Import here to ensure Taichi is initialized first
    from pathtracer.materials.registry import clear_materials
    from pathtracer.scene.intersection import clear_scene

    clear_scene()
    clear_materials()

    yield

    clear_scene()
    clear_materials()


@pytest.fixture
def simple_scene():
    """A grey diffuse ground sphere and a red diffuse sphere at (0, 0, -1)."""
    from pathtracer.materials import Lambertian
    from pathtracer.scene.scene_list import SceneList

    scene = SceneList()
    scene.add_sphere((0.0, -100.5, -1.0), 100.0, Lambertian((0.5, 0.5, 0.5)))
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian((0.7, 0.3, 0.3)))
    return scene


@pytest.fixture
def simple_camera():
    """A pinhole camera at the origin looking down -z with a 2:1 aspect."""
    from pathtracer.camera.thin_lens import ThinLensCamera

    return ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=2.0,
    )
