"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection and the shared
        HitRecord structure
    plane: Infinite two-sided plane with ray-plane intersection

All intersection routines are Taichi functions (@ti.func). Both return a
HitRecord whose normal is oriented against the incoming ray, and both treat
degenerate shapes (zero radius, zero-length normal) as a miss.
"""

from .plane import PARALLEL_EPSILON, Plane, hit_plane, make_plane
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_hit_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_hit_record",
    "Plane",
    "hit_plane",
    "make_plane",
    "PARALLEL_EPSILON",
]
