"""Pytest configuration for raylight tests.

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


@pytest.fixture
def make_scene():
    """Factory for small scenes with sensible defaults.

    Example:
        >>> scene = make_scene(objects=[...], lights=[...], background=(0, 0, 1))
    """
    from raylight.camera.canonical import Camera
    from raylight.scene.description import Scene

    def _make_scene(objects=(), lights=(), background=(0.0, 0.0, 0.0), width=4, height=4, fov=90.0):
        return Scene(
            camera=Camera(fov=fov),
            width=width,
            height=height,
            background=background,
            objects=tuple(objects),
            lights=tuple(lights),
        )

    return _make_scene


@pytest.fixture
def matte():
    """Factory for non-reflective materials."""
    from raylight.scene.description import Material

    def _matte(color=(1.0, 1.0, 1.0)):
        return Material(color=color, reflectivity=0.0)

    return _matte
