"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    from src.pathtracer.core.runtime import init_runtime

    init_runtime("cpu")
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data and reseed random streams around each test.

    This ensures tests are isolated from each other. A zero xorshift state
    never advances, so streams are always seeded before a test runs.
    """
    # Import here so Taichi is initialized before fields are declared
    from src.pathtracer.core.rng import seed_streams
    from src.pathtracer.materials.material import clear_materials
    from src.pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        seed_streams(0)

    _clear_all()

    yield

    _clear_all()
