"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    shading: Whitted-style shading with recursive reflection
    renderer: Render configuration, pixel buffer and the parallel pixel loop

Only the ray utilities are re-exported here; import the shading engine and
the renderer from their modules (raylight.core.renderer also backs the
top-level raylight.render).

All compute-intensive operations use Taichi kernels, so the pixel loop runs
across CPU threads or GPU lanes.
"""

from .ray import (
    ZERO_LENGTH_SQUARED,
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    normalize,
    offset_point,
    ray_at,
    reflect,
)

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "length",
    "length_squared",
    "dot",
    "cross",
    "normalize",
    "reflect",
    "offset_point",
    "ZERO_LENGTH_SQUARED",
]
