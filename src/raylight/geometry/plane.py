"""Infinite plane primitive with ray-plane intersection.

A plane is defined by any point on it and its normal. The intersection is
the classic parametric test:

    t = dot(point - ray_origin, normal) / dot(ray_direction, normal)

Planes are two-sided: the returned normal always faces the incoming ray, so
a plane can be lit and reflect from either side.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raylight.geometry.plane import Plane, hit_plane
    >>> # Floor at y=0
    >>> floor = Plane(point=ti.math.vec3(0, 0, 0), normal=ti.math.vec3(0, 1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from raylight.core.ray import normalize
from raylight.geometry.sphere import HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays with |dot(direction, normal)| below this are considered parallel
PARALLEL_EPSILON = 1e-8


@ti.dataclass
class Plane:
    """An infinite plane through a point with a given normal.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The plane normal (vec3). Need not be normalized; a zero-length
            normal makes the plane degenerate and it never hits.
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test intersection against.
        t_min: Lower bound (exclusive) for a valid hit distance.
        t_max: Upper bound (exclusive) for a valid hit distance.

    Returns:
        A HitRecord. The ray misses when it is parallel to the plane, when
        the hit lies outside (t_min, t_max), or when the plane normal is
        degenerate.
    """
    normal = normalize(plane.normal)
    denom = tm.dot(normal, ray_direction)

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    # A zero normal gives denom == 0 and falls through as parallel
    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray_origin, normal) / denom

        if t > t_min and t < t_max:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

            hit_normal = normal
            if denom > 0.0:
                # Ray travels along the normal: it sees the back side
                hit_normal = -normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
    )


@ti.func
def make_plane(point: vec3, normal: vec3) -> Plane:
    """Create a plane from a point and a normal."""
    return Plane(point=point, normal=normal)
