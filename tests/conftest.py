"""Pytest configuration for ray tracer tests.

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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def ivory():
    """The demo scene's ivory material."""
    from src.whitted.scene.demo import IVORY

    return IVORY


@pytest.fixture
def mirror():
    """A pure mirror: no local shading, full reflection."""
    from src.whitted.scene.config import Material

    return Material(albedo=(0.0, 0.0, 1.0, 0.0), diffuse_color=(1.0, 1.0, 1.0))
