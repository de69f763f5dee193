"""Point and directional light evaluation with shadow rays.

For a surface point with normal N and diffuse color C, each light
contributes

    C * light_color * intensity * max(0, dot(N, L))

where L is the unit vector toward the light, unless a shadow ray from the
point toward the light hits an object closer than the light. Contributions
from all lights add up and the sum is clamped to [0, 1] per channel.

Point lights have no falloff by default (a "simple lamp": intensity is
constant over distance). Falloff.INVERSE_SQUARE divides by 4 * pi * d^2
instead, spreading the intensity over the sphere of radius d. Directional
lights never attenuate.

All functions take the SceneData instance as a template argument and are
meant to be called from within Taichi kernels.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from raylight.core.ray import normalize, offset_point
from raylight.scene.description import LightKind

# Type alias for 3D vectors
vec3 = tm.vec3

# Shadow rays toward a directional light are cast this far
DIRECTIONAL_LIGHT_DISTANCE = 1e10

# Below this squared distance a point light sits on the surface and is ignored
MIN_LIGHT_DISTANCE_SQUARED = 1e-12


class Falloff(IntEnum):
    """Point light attenuation law."""

    NONE = 0
    INVERSE_SQUARE = 1


@ti.func
def light_direction(scene: ti.template(), index: ti.i32, point: vec3) -> vec3:
    """Unit vector from a surface point toward a light.

    Returns the zero vector for a point light located exactly at the point or
    a directional light with a zero direction.
    """
    result = vec3(0.0, 0.0, 0.0)
    if scene.light_kinds[index] == int(LightKind.POINT):
        result = normalize(scene.light_vectors[index] - point)
    else:
        result = normalize(-scene.light_vectors[index])
    return result


@ti.func
def light_distance(scene: ti.template(), index: ti.i32, point: vec3) -> ti.f32:
    """Distance from a surface point to a light.

    Directional lights are infinitely far away; DIRECTIONAL_LIGHT_DISTANCE
    stands in for infinity.
    """
    result = DIRECTIONAL_LIGHT_DISTANCE
    if scene.light_kinds[index] == int(LightKind.POINT):
        result = tm.length(scene.light_vectors[index] - point)
    return result


@ti.func
def light_intensity(scene: ti.template(), index: ti.i32, point: vec3, falloff: ti.i32) -> ti.f32:
    """Intensity of a light as seen from a surface point.

    Args:
        scene: The SceneData holding the lights.
        index: Light index.
        point: The surface point.
        falloff: A Falloff value selecting the point light attenuation.

    Returns:
        The intensity after attenuation.
    """
    intensity = scene.light_intensities[index]
    if scene.light_kinds[index] == int(LightKind.POINT) and falloff == int(Falloff.INVERSE_SQUARE):
        to_light = scene.light_vectors[index] - point
        distance_sq = tm.dot(to_light, to_light)
        if distance_sq > MIN_LIGHT_DISTANCE_SQUARED:
            intensity = intensity / (4.0 * tm.pi * distance_sq)
        else:
            intensity = 0.0
    return intensity


@ti.func
def diffuse_from_light(
    scene: ti.template(),
    index: ti.i32,
    point: vec3,
    normal: vec3,
    color: vec3,
    epsilon: ti.f32,
    falloff: ti.i32,
) -> vec3:
    """Diffuse contribution of one light at a surface point.

    A shadow ray starts at the point pushed epsilon along the normal and
    runs toward the light. Any object hit within (epsilon, light distance)
    blocks the light completely.

    Args:
        scene: The SceneData holding objects and lights.
        index: Light index.
        point: The surface point.
        normal: Unit surface normal facing the viewer.
        color: Diffuse material color.
        epsilon: Self-intersection offset.
        falloff: A Falloff value.

    Returns:
        The RGB contribution (unclamped).
    """
    to_light = light_direction(scene, index, point)
    cos_theta = tm.dot(normal, to_light)

    contribution = vec3(0.0, 0.0, 0.0)

    # Back-facing lights contribute nothing, no shadow ray needed
    if cos_theta > 0.0:
        shadow_origin = offset_point(point, normal, epsilon)
        distance = light_distance(scene, index, point)
        if scene.is_occluded(shadow_origin, to_light, epsilon, distance) == 0:
            intensity = light_intensity(scene, index, point, falloff)
            contribution = color * scene.light_colors[index] * intensity * cos_theta

    return contribution


@ti.func
def compute_diffuse(
    scene: ti.template(),
    point: vec3,
    normal: vec3,
    color: vec3,
    epsilon: ti.f32,
    falloff: ti.i32,
) -> vec3:
    """Sum the diffuse contributions of all lights and clamp to [0, 1].

    Returns:
        The lit surface color.
    """
    total = vec3(0.0, 0.0, 0.0)
    for i in range(scene.light_count[None]):
        total += diffuse_from_light(scene, i, point, normal, color, epsilon, falloff)
    return tm.clamp(total, 0.0, 1.0)
