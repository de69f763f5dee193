"""Whitted-style shading with recursive mirror reflection.

The color seen along a ray is defined recursively:

    shade(ray, depth) =
        background                                  if the ray hits nothing
        base                                        if reflectivity == 0
                                                    or depth == max_depth
        base * (1 - r) + shade(reflected, depth + 1) * r   otherwise

where base is the diffuse lighting at the hit point (see
raylight.lighting.lights) and r is the material reflectivity. The reflected
ray starts at the hit point pushed epsilon along the normal and travels along
reflect(direction, normal).

Taichi functions cannot recurse, so shade() unrolls the recursion into a loop
that carries the product of reflectivities seen so far as a blend weight. The
loop runs at most max_depth + 1 times, which bounds the work per ray even for
two mirrors facing each other.
"""

import taichi as ti
import taichi.math as tm

from raylight.core.ray import normalize, offset_point, reflect
from raylight.lighting.lights import compute_diffuse

# Type alias for 3D vectors
vec3 = tm.vec3

# Upper bound for primary and reflected ray distances
T_MAX = 1e10


@ti.func
def sanitize_color(color: vec3) -> vec3:
    """Replace NaN/Inf channels with 0 and clamp to [0, 1]."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return tm.clamp(result, 0.0, 1.0)


@ti.func
def shade(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    max_depth: ti.i32,
    epsilon: ti.f32,
    falloff: ti.i32,
):
    """Compute the color seen along a ray.

    Args:
        scene: The SceneData to trace against.
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        max_depth: Number of reflection bounces allowed after the first hit.
        epsilon: Minimum hit distance and secondary ray offset.
        falloff: A Falloff value for point lights.

    Returns:
        A tuple (color, segments): the clamped RGB color and the number of
        scene queries made, which is at most max_depth + 1.
    """
    color = vec3(0.0, 0.0, 0.0)
    weight = 1.0
    segments = 0

    origin = ray_origin
    direction = ray_direction

    # Active flag for path continuation
    active = 1

    for depth in range(max_depth + 1):
        if active == 1:
            segments += 1
            rec = scene.find_nearest(origin, direction, epsilon, T_MAX)

            if rec.hit == 0:
                # Miss: terminal state
                color += weight * scene.background[None]
                active = 0
            else:
                material_color = scene.object_color(rec.object_index)
                reflectivity = scene.object_reflectivity(rec.object_index)
                base = compute_diffuse(scene, rec.point, rec.normal, material_color, epsilon, falloff)

                if reflectivity > 0.0 and depth < max_depth:
                    color += weight * (1.0 - reflectivity) * base
                    weight *= reflectivity
                    origin = offset_point(rec.point, rec.normal, epsilon)
                    direction = normalize(reflect(direction, rec.normal))
                else:
                    # No reflection or depth budget spent: terminal state
                    color += weight * base
                    active = 0

    return sanitize_color(color), segments
