"""Sphere primitive and the hit record shared by all primitives.

Intersection solves the ray/sphere quadratic with the cancellation-free
form (compute one root through q, the other as c / q) so grazing rays stay
accurate in f32.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raylight.geometry.sphere import Sphere, hit_sphere
    >>> unit = Sphere(center=ti.math.vec3(0.0, 0.0, -5.0), radius=1.0)
    >>> # hit_sphere(origin, direction, unit, 1e-4, 1e10) inside a kernel
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """Center and radius. A radius <= 0 describes a sphere nothing can hit."""

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of intersecting one ray with one primitive.

    Attributes:
        hit: 1 when an intersection inside the requested interval exists.
        t: Ray parameter of the intersection.
        point: World-space intersection point.
        normal: Unit normal at ``point``, flipped to face the incoming ray.

    Everything but ``hit`` is meaningless when ``hit == 0``.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_hit_record() -> HitRecord:
    return HitRecord(hit=0, t=0.0, point=vec3(0.0), normal=vec3(0.0))


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    return Sphere(center=center, radius=radius)


@ti.func
def _quadratic_roots(a: ti.f32, half_b: ti.f32, c: ti.f32, root_disc: ti.f32):
    """Roots of a t^2 + 2 half_b t + c = 0, returned as (near, far)."""
    q = -half_b - ti.select(half_b < 0.0, -root_disc, root_disc)
    near = 0.0
    far = 0.0
    if ti.abs(q) > 1e-10:
        near = q / a
        far = c / q
    else:
        # half_b and the discriminant are both ~0
        near = (-half_b - root_disc) / a
        far = (-half_b + root_disc) / a
    if near > far:
        swap = near
        near = far
        far = swap
    return near, far


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere over the open interval (t_min, t_max).

    With oc = origin - center the hit condition |oc + t D|^2 = r^2 becomes

        (D . D) t^2 + 2 (D . oc) t + (oc . oc - r^2) = 0

    The nearer root is used when it lies in the interval, otherwise the
    farther one (a ray starting inside the sphere exits through it).

    Args:
        ray_origin: Ray start point.
        ray_direction: Ray heading; need not be unit length.
        sphere: The sphere to test.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A HitRecord. Non-positive radii, zero-length directions and NaN
        discriminants all report a miss.
    """
    record = make_miss_hit_record()

    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    disc = half_b * half_b - a * c

    if sphere.radius > 0.0 and a > 0.0 and disc >= 0.0:
        near, far = _quadratic_roots(a, half_b, c, ti.sqrt(disc))

        t = near
        if t <= t_min or t >= t_max:
            t = far

        if t > t_min and t < t_max:
            point = ray_origin + t * ray_direction
            outward = (point - sphere.center) / sphere.radius
            record.hit = 1
            record.t = t
            record.point = point
            record.normal = outward
            if tm.dot(ray_direction, outward) > 0.0:
                # Ray starts inside and leaves through the back face
                record.normal = -outward

    return record
