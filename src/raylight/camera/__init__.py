"""Camera module for primary ray generation.

Components:
    canonical: Fixed pinhole camera at the origin looking down -Z with a
        configurable vertical field of view
"""

from .canonical import Camera, fov_adjustment, primary_ray

__all__ = [
    "Camera",
    "fov_adjustment",
    "primary_ray",
]
