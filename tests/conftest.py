"""Pytest configuration for phongtrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear every registry before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized
    from phongtrace.lighting.lights import clear_lights
    from phongtrace.materials.phong import clear_phong_materials
    from phongtrace.materials.texture import clear_textures
    from phongtrace.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_phong_materials()
        clear_textures()
        clear_lights()

    _clear_all()

    yield

    _clear_all()
