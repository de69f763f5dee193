"""Lighting module: diffuse shading from point and directional lights.

Each light is tested with a shadow ray; unoccluded lights contribute
Lambertian diffuse light and the total is clamped to [0, 1].
"""

from .lights import (
    DIRECTIONAL_LIGHT_DISTANCE,
    Falloff,
    compute_diffuse,
    diffuse_from_light,
    light_direction,
    light_distance,
    light_intensity,
)

__all__ = [
    "Falloff",
    "compute_diffuse",
    "diffuse_from_light",
    "light_direction",
    "light_distance",
    "light_intensity",
    "DIRECTIONAL_LIGHT_DISTANCE",
]
