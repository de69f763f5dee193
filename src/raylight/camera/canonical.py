"""Canonical pinhole camera for primary ray generation.

The camera is fixed: it sits at the world origin, looks down -Z and has +Y
as its up direction. Only the vertical field of view is configurable, so a
pixel maps straight to a world-space direction without any view transform.

For pixel (px, py) in a width x height image (py = 0 is the top row):

    x = ((px + 0.5) / width * 2 - 1) * aspect_ratio * tan(fov / 2)
    y = (1 - (py + 0.5) / height * 2) * tan(fov / 2)
    direction = normalize(x, y, -1)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raylight.camera.canonical import Camera, fov_adjustment, primary_ray
    >>> camera = Camera(fov=60.0)
    >>> scale = fov_adjustment(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     for py, px in ti.ndrange(480, 640):
    ...         ray = primary_ray(px, py, 640, 480, scale)
"""

import math
from dataclasses import dataclass

import taichi as ti

from raylight.core.ray import Ray, make_ray, normalize, vec3


@dataclass(frozen=True)
class Camera:
    """Configuration for the canonical pinhole camera.

    Attributes:
        fov: Vertical field of view in degrees, strictly between 0 and 180.
    """

    fov: float = 90.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.fov) or not 0.0 < self.fov < 180.0:
            raise ValueError(f"Camera fov must be finite and in (0, 180) degrees, got {self.fov}")


def fov_adjustment(camera: Camera) -> float:
    """Compute tan(fov / 2), the half-height of the image plane at z = -1."""
    return math.tan(math.radians(camera.fov) / 2.0)


@ti.func
def primary_ray(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    fov_scale: ti.f32,
) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        fov_scale: tan(fov / 2), see fov_adjustment().

    Returns:
        A Ray from the camera origin with a unit direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    aspect_ratio = w / h

    dir_x = ((ti.cast(pixel_x, ti.f32) + 0.5) / w * 2.0 - 1.0) * aspect_ratio * fov_scale
    dir_y = (1.0 - (ti.cast(pixel_y, ti.f32) + 0.5) / h * 2.0) * fov_scale

    # Camera sits at the origin looking down -Z
    origin = vec3(0.0, 0.0, 0.0)
    direction = normalize(vec3(dir_x, dir_y, -1.0))

    return make_ray(origin, direction)
