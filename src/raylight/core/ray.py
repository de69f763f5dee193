"""Rays and the small vector toolkit shared by every stage of the tracer.

Everything here is a ``@ti.func`` and gets inlined into whichever kernel
calls it. Vectors are plain ``taichi.math.vec3`` values; arithmetic on them
never mutates an operand.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> ray = Ray(origin=ti.math.vec3(0.0), direction=ti.math.vec3(0.0, 0.0, -1.0))
    >>> # inside a kernel: ray_at(ray, 5.0) == vec3(0, 0, -5)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# normalize() maps anything with a smaller squared length to the zero vector
ZERO_LENGTH_SQUARED = 1e-20


@ti.dataclass
class Ray:
    """Half-line starting at ``origin`` and heading along ``direction``.

    Attributes:
        origin: Start point (vec3).
        direction: Heading (vec3). Primary, shadow and reflection rays are
            built with unit directions, but nothing here requires it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Return origin + t * direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Helpers
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale ``v`` to unit length.

    ``tm.normalize`` divides by zero on a null vector and yields NaN. Here a
    null (or vanishingly short) input comes back as the zero vector, which
    the intersection code then treats as a ray that hits nothing.

    Args:
        v: Any vector.

    Returns:
        ``v / |v|``, or vec3(0) when ``|v|^2 <= ZERO_LENGTH_SQUARED``.
    """
    len_sq = tm.dot(v, v)
    unit = vec3(0.0)
    if len_sq > ZERO_LENGTH_SQUARED:
        unit = v * (1.0 / ti.sqrt(len_sq))
    return unit


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror ``incident`` about the plane whose unit normal is ``normal``.

    R = D - 2 (D . N) N. The sign of ``normal`` does not matter.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def offset_point(point: vec3, normal: vec3, epsilon: ti.f32) -> vec3:
    """Nudge a surface point ``epsilon`` along ``normal``.

    Shadow and reflection rays leave from the nudged point so they cannot
    re-hit the surface they start on.
    """
    return point + epsilon * normal
