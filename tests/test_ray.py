"""Unit tests for rays and vector helpers.

Tests cover:
- ray_at / make_ray evaluation
- dot, cross, length, reflect
- normalize on regular and degenerate vectors
- offset_point
"""

import pytest
import taichi as ti


def _as_tuple(v):
    return (float(v[0]), float(v[1]), float(v[2]))


def _unary(fn, v, scalar=False):
    """Evaluate a one-argument vector helper inside a kernel."""
    source = ti.Vector.field(3, dtype=ti.f32, shape=())
    result = ti.field(dtype=ti.f32, shape=()) if scalar else ti.Vector.field(3, dtype=ti.f32, shape=())
    source[None] = list(v)

    @ti.kernel
    def test_kernel():
        result[None] = fn(source[None])

    test_kernel()
    return float(result[None]) if scalar else _as_tuple(result[None])


def _binary(fn, a, b, scalar=False):
    """Evaluate a two-argument vector helper inside a kernel."""
    source = ti.Vector.field(3, dtype=ti.f32, shape=2)
    result = ti.field(dtype=ti.f32, shape=()) if scalar else ti.Vector.field(3, dtype=ti.f32, shape=())
    source[0] = list(a)
    source[1] = list(b)

    @ti.kernel
    def test_kernel():
        result[None] = fn(source[0], source[1])

    test_kernel()
    return float(result[None]) if scalar else _as_tuple(result[None])


class TestRay:
    """Tests for the Ray struct."""

    @pytest.mark.parametrize(
        "t, expected",
        [
            (0.0, (1.0, 2.0, 3.0)),
            (5.0, (1.0, 2.0, -2.0)),
            (-3.0, (1.0, 2.0, 6.0)),
        ],
    )
    def test_ray_at(self, t, expected):
        """Test ray_at walks t units along the direction, including backwards."""
        from raylight.core.ray import Ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(t: ti.f32):
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, t)

        test_kernel(t)
        assert _as_tuple(result[None]) == pytest.approx(expected, abs=1e-6)

    def test_make_ray(self):
        """Test make_ray keeps origin and direction."""
        from raylight.core.ray import make_ray, vec3

        origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 1.0, 1.0), vec3(0.0, 0.0, 1.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert _as_tuple(origin[None]) == (1.0, 1.0, 1.0)
        assert _as_tuple(direction[None]) == (0.0, 0.0, 1.0)


class TestVectorHelpers:
    """Tests for dot, cross, length and length_squared."""

    def test_length(self):
        from raylight.core.ray import length

        assert _unary(length, (3.0, 4.0, 0.0), scalar=True) == pytest.approx(5.0)

    def test_length_squared(self):
        from raylight.core.ray import length_squared

        assert _unary(length_squared, (3.0, 4.0, 0.0), scalar=True) == pytest.approx(25.0)

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ((1.0, 2.0, 3.0), (4.0, 5.0, 6.0), 32.0),
            ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0.0),
            ((0.0, 0.0, -1.0), (0.0, 0.0, 1.0), -1.0),
        ],
    )
    def test_dot(self, a, b, expected):
        from raylight.core.ray import dot

        assert _binary(dot, a, b, scalar=True) == pytest.approx(expected)

    def test_cross_is_right_handed(self):
        """Test x cross y gives z."""
        from raylight.core.ray import cross

        assert _binary(cross, (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == pytest.approx((0.0, 0.0, 1.0))


class TestReflect:
    """Tests for mirror reflection."""

    def test_reflect_exact(self):
        """Test reflect((1, -1, 0), (0, 1, 0)) == (1, 1, 0) exactly."""
        from raylight.core.ray import reflect

        assert _binary(reflect, (1.0, -1.0, 0.0), (0.0, 1.0, 0.0)) == (1.0, 1.0, 0.0)

    def test_reflect_head_on(self):
        """Test a ray hitting a surface head-on bounces straight back."""
        from raylight.core.ray import reflect

        r = _binary(reflect, (0.0, 0.0, -1.0), (0.0, 0.0, 1.0))
        assert r == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_reflect_ignores_normal_sign(self):
        """Test flipping the normal gives the same reflection."""
        from raylight.core.ray import reflect

        up = _binary(reflect, (0.6, -0.8, 0.0), (0.0, 1.0, 0.0))
        down = _binary(reflect, (0.6, -0.8, 0.0), (0.0, -1.0, 0.0))
        assert up == pytest.approx(down, abs=1e-6)
        assert up == pytest.approx((0.6, 0.8, 0.0), abs=1e-6)

    def test_reflect_tangent_is_unchanged(self):
        """Test a direction in the surface plane is left alone."""
        from raylight.core.ray import reflect

        r = _binary(reflect, (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert r == pytest.approx((1.0, 0.0, 0.0), abs=1e-6)


class TestNormalize:
    """Tests for normalize()."""

    def test_unit_length(self):
        from raylight.core.ray import normalize

        assert _unary(normalize, (3.0, 4.0, 0.0)) == pytest.approx((0.6, 0.8, 0.0), abs=1e-6)

    @pytest.mark.parametrize(
        "vector",
        [
            (0.0, 0.0, 0.0),
            (1e-15, 0.0, 0.0),
            (0.0, -1e-12, 1e-12),
        ],
    )
    def test_near_zero_vector_returns_zero(self, vector):
        """Test normalizing a (near) zero vector yields zero instead of NaN."""
        from raylight.core.ray import normalize

        assert _unary(normalize, vector) == (0.0, 0.0, 0.0)

    def test_small_but_valid_vector(self):
        """Test a short, non-degenerate vector still normalizes to unit length."""
        from raylight.core.ray import normalize

        assert _unary(normalize, (0.0, 1e-3, 0.0)) == pytest.approx((0.0, 1.0, 0.0), abs=1e-5)


class TestOffsetPoint:
    """Tests for offset_point."""

    def test_offset_along_normal(self):
        """Test the point moves epsilon along the normal."""
        from raylight.core.ray import offset_point, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = offset_point(vec3(1.0, 2.0, 3.0), vec3(0.0, 1.0, 0.0), 0.5)

        test_kernel()
        assert _as_tuple(result[None]) == pytest.approx((1.0, 2.5, 3.0), abs=1e-6)
