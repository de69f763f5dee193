"""Tests for light evaluation and shadow rays.

Tests cover:
- Unoccluded diffuse contribution (color * light * intensity * cos)
- Full occlusion by an object between point and light
- Objects behind the light casting no shadow
- Back-facing lights
- Directional lights
- Inverse-square falloff
- Clamping of the summed contribution
"""

import math

import pytest
import taichi as ti

from raylight.lighting.lights import Falloff
from raylight.scene.description import (
    DirectionalLight,
    Material,
    PlaneShape,
    PointLight,
    SceneObject,
    SphereShape,
)

FLOOR = SceneObject(PlaneShape((0, 0, 0), (0, 1, 0)), Material((0.5, 0.5, 0.5)))


def _diffuse(scene, point, normal, color, falloff=Falloff.NONE, epsilon=1e-4):
    """Evaluate compute_diffuse at one surface point."""
    from raylight.lighting.lights import compute_diffuse
    from raylight.scene.intersection import SceneData

    data = SceneData(scene)
    inputs = ti.Vector.field(3, dtype=ti.f32, shape=3)
    result = ti.Vector.field(3, dtype=ti.f32, shape=())
    inputs[0] = list(point)
    inputs[1] = list(normal)
    inputs[2] = list(color)

    @ti.kernel
    def test_kernel(scene_data: ti.template(), eps: ti.f32, law: ti.i32):
        # Single-iteration outer loop keeps the light and object loops serial
        for _ in range(1):
            result[None] = compute_diffuse(scene_data, inputs[0], inputs[1], inputs[2], eps, law)

    test_kernel(data, epsilon, int(falloff))
    r = result[None]
    return (float(r[0]), float(r[1]), float(r[2]))


class TestPointLights:
    """Tests for point light shading."""

    def test_unoccluded_light(self, make_scene):
        """Test contribution is color * intensity * cos(theta)."""
        # to_light = (3, 4, 0) / 5, so cos(theta) = 0.8
        scene = make_scene(
            objects=[FLOOR, SceneObject(SphereShape((0, 2, 0), 0.5), Material((1, 1, 1)))],
            lights=[PointLight((3, 4, 0))],
        )
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (0.5, 0.5, 0.5))

        assert color == pytest.approx((0.4, 0.4, 0.4), abs=1e-5)

    def test_fully_occluded_light_contributes_zero(self, make_scene):
        """Test an object between point and light blocks it completely."""
        scene = make_scene(
            objects=[FLOOR, SceneObject(SphereShape((0, 2, 0), 0.5), Material((1, 1, 1)))],
            lights=[PointLight((0, 4, 0))],
        )
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (0.5, 0.5, 0.5))

        assert color == (0.0, 0.0, 0.0)

    def test_object_behind_light_does_not_occlude(self, make_scene):
        """Test shadow rays stop at the light."""
        scene = make_scene(
            objects=[FLOOR, SceneObject(SphereShape((0, 6, 0), 0.5), Material((1, 1, 1)))],
            lights=[PointLight((0, 4, 0))],
        )
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (0.5, 0.5, 0.5))

        assert color == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)

    def test_light_below_surface_contributes_zero(self, make_scene):
        """Test a light behind the surface does not light it."""
        scene = make_scene(objects=[FLOOR], lights=[PointLight((0, -4, 0))])
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1))

        assert color == (0.0, 0.0, 0.0)

    def test_light_color_and_intensity(self, make_scene):
        """Test light color multiplies per channel and intensity scales."""
        scene = make_scene(
            objects=[FLOOR],
            lights=[PointLight((0, 4, 0), color=(1.0, 0.5, 0.0), intensity=0.5)],
        )
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1))

        assert color == pytest.approx((0.5, 0.25, 0.0), abs=1e-5)

    def test_inverse_square_falloff(self, make_scene):
        """Test inverse-square falloff divides by 4 * pi * d^2."""
        scene = make_scene(objects=[FLOOR], lights=[PointLight((0, 4, 0), intensity=1.0)])
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1), falloff=Falloff.INVERSE_SQUARE)

        expected = 1.0 / (4.0 * math.pi * 16.0)
        assert color == pytest.approx((expected, expected, expected), rel=1e-4)

    def test_no_lights_is_black(self, make_scene):
        """Test a scene without lights shades everything black."""
        scene = make_scene(objects=[FLOOR])
        assert _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1)) == (0.0, 0.0, 0.0)


class TestDirectionalLights:
    """Tests for directional light shading."""

    def test_straight_down(self, make_scene):
        """Test a light shining straight down fully lights a floor."""
        scene = make_scene(objects=[FLOOR], lights=[DirectionalLight((0, -1, 0))])
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (0.2, 0.4, 0.6))

        assert color == pytest.approx((0.2, 0.4, 0.6), abs=1e-5)

    def test_unnormalized_direction(self, make_scene):
        """Test the light direction is normalized before use."""
        scene = make_scene(objects=[FLOOR], lights=[DirectionalLight((0, -5, -5))])
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1))

        cos_theta = 1.0 / math.sqrt(2.0)
        assert color == pytest.approx((cos_theta,) * 3, abs=1e-5)

    def test_any_object_toward_light_occludes(self, make_scene):
        """Test directional shadows have unlimited reach."""
        scene = make_scene(
            objects=[FLOOR, SceneObject(SphereShape((0, 1000, 0), 1.0), Material((1, 1, 1)))],
            lights=[DirectionalLight((0, -1, 0))],
        )
        assert _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1)) == (0.0, 0.0, 0.0)

    def test_falloff_does_not_apply(self, make_scene):
        """Test inverse-square falloff leaves directional lights untouched."""
        scene = make_scene(objects=[FLOOR], lights=[DirectionalLight((0, -1, 0))])
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1), falloff=Falloff.INVERSE_SQUARE)

        assert color == pytest.approx((1.0, 1.0, 1.0), abs=1e-5)


class TestMultipleLights:
    """Tests for summing and clamping contributions."""

    def test_contributions_add(self, make_scene):
        """Test two lights add their contributions."""
        scene = make_scene(
            objects=[FLOOR],
            lights=[
                PointLight((0, 4, 0), intensity=0.25),
                DirectionalLight((0, -1, 0), intensity=0.25),
            ],
        )
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 1, 1))

        assert color == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)

    def test_sum_is_clamped(self, make_scene):
        """Test the total never exceeds 1 per channel."""
        scene = make_scene(
            objects=[FLOOR],
            lights=[PointLight((0, 4, 0)), DirectionalLight((0, -1, 0))],
        )
        color = _diffuse(scene, (0, 0, 0), (0, 1, 0), (1, 0.5, 0))

        assert color == pytest.approx((1.0, 1.0, 0.0), abs=1e-6)
