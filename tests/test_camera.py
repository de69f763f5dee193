"""Tests for the canonical camera.

Tests cover:
- Camera validation
- Field of view scale factor
- Primary ray origin, direction and pixel mapping
"""

import math

import pytest
import taichi as ti


def _primary_direction(px, py, width, height, fov):
    """Return (origin, direction) of the primary ray for one pixel."""
    from raylight.camera.canonical import Camera, fov_adjustment, primary_ray

    origin = ti.Vector.field(3, dtype=ti.f32, shape=())
    direction = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(x: ti.i32, y: ti.i32, w: ti.i32, h: ti.i32, scale: ti.f32):
        ray = primary_ray(x, y, w, h, scale)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(px, py, width, height, fov_adjustment(Camera(fov=fov)))
    o, d = origin[None], direction[None]
    return (float(o[0]), float(o[1]), float(o[2])), (float(d[0]), float(d[1]), float(d[2]))


def _expected(x, y):
    norm = math.sqrt(x * x + y * y + 1.0)
    return (x / norm, y / norm, -1.0 / norm)


class TestCameraConfig:
    """Tests for Camera validation."""

    def test_default_fov(self):
        """Test the default field of view is 90 degrees."""
        from raylight.camera.canonical import Camera

        assert Camera().fov == 90.0

    @pytest.mark.parametrize("fov", [0.0, -10.0, 180.0, 270.0, float("nan"), float("inf")])
    def test_invalid_fov_rejected(self, fov):
        """Test fov outside (0, 180) raises ValueError."""
        from raylight.camera.canonical import Camera

        with pytest.raises(ValueError):
            Camera(fov=fov)

    def test_fov_adjustment(self):
        """Test fov_adjustment is tan(fov / 2)."""
        from raylight.camera.canonical import Camera, fov_adjustment

        assert fov_adjustment(Camera(fov=90.0)) == pytest.approx(1.0)
        assert fov_adjustment(Camera(fov=60.0)) == pytest.approx(math.tan(math.radians(30.0)))


class TestPrimaryRay:
    """Tests for primary_ray."""

    def test_center_pixel_looks_down_negative_z(self):
        """Test the center of an odd-sized image maps to (0, 0, -1)."""
        origin, direction = _primary_direction(5, 5, 11, 11, 90.0)

        assert origin == (0.0, 0.0, 0.0)
        assert direction == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)

    def test_direction_is_unit_length(self):
        """Test every generated direction is normalized."""
        for px, py in [(0, 0), (3, 1), (7, 4)]:
            _, direction = _primary_direction(px, py, 8, 5, 75.0)
            assert math.hypot(*direction) == pytest.approx(1.0, abs=1e-6)

    def test_top_left_pixel(self):
        """Test row 0 is the top of the image and column 0 the left."""
        _, direction = _primary_direction(0, 0, 2, 2, 90.0)

        # Pixel centers at +-0.5 on the image plane at z = -1
        assert direction == pytest.approx(_expected(-0.5, 0.5), abs=1e-6)

    def test_aspect_ratio_stretches_x(self):
        """Test the horizontal extent is scaled by width / height."""
        _, direction = _primary_direction(3, 0, 4, 2, 90.0)

        # x = (3.5 / 4 * 2 - 1) * 2 = 1.5, y = 1 - 0.5 / 2 * 2 = 0.5
        assert direction == pytest.approx(_expected(1.5, 0.5), abs=1e-6)

    def test_narrow_fov_scales_directions(self):
        """Test a narrower field of view pulls rays toward the axis."""
        scale = math.tan(math.radians(30.0))
        _, direction = _primary_direction(0, 0, 2, 2, 60.0)

        assert direction == pytest.approx(_expected(-0.5 * scale, 0.5 * scale), abs=1e-6)
