"""Unit tests for the sky background and pixel encoding."""

import math

import taichi as ti


class TestBackground:
    """Tests for the sky gradient."""

    def test_straight_up_is_sky_blue(self):
        """Test a ray pointing up gets the zenith color."""
        from pathtracer.core.color import background_color
        from pathtracer.core.ray import make_ray, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 3.0, 0.0), 0.0)
            result[None] = background_color(ray)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.5) < 1e-12
        assert abs(r[1] - 0.7) < 1e-12
        assert abs(r[2] - 1.0) < 1e-12

    def test_straight_down_is_white(self):
        """Test a ray pointing down gets the horizon white."""
        from pathtracer.core.color import background_color
        from pathtracer.core.ray import make_ray, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, -1.0, 0.0), 0.0)
            result[None] = background_color(ray)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-12
        assert abs(r[1] - 1.0) < 1e-12
        assert abs(r[2] - 1.0) < 1e-12

    def test_horizontal_is_midpoint(self):
        """Test a horizontal ray blends the two colors equally."""
        from pathtracer.core.color import background_color
        from pathtracer.core.ray import make_ray, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), 0.0)
            result[None] = background_color(ray)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.75) < 1e-12
        assert abs(r[1] - 0.85) < 1e-12
        assert abs(r[2] - 1.0) < 1e-12


class TestEncodeColor:
    """Tests for gamma correction and quantization."""

    def _encode(self, rgb, samples):
        from pathtracer.core.color import encode_color
        from pathtracer.core.ray import vec3

        result = ti.Vector.field(3, dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(r: ti.f64, g: ti.f64, b: ti.f64, n: ti.i32):
            result[None] = encode_color(vec3(r, g, b), n)

        test_kernel(rgb[0], rgb[1], rgb[2], samples)
        c = result[None]
        return (int(c[0]), int(c[1]), int(c[2]))

    def test_black_and_white(self):
        """Test 0 encodes as 0 and 1 encodes as 255."""
        assert self._encode((0.0, 0.0, 0.0), 1) == (0, 0, 0)
        assert self._encode((1.0, 1.0, 1.0), 1) == (255, 255, 255)

    def test_gamma_two(self):
        """Test a quarter intensity encodes as floor(256 * 0.5)."""
        assert self._encode((0.25, 0.25, 0.25), 1) == (128, 128, 128)

    def test_averages_over_samples(self):
        """Test the sum is divided by the sample count."""
        assert self._encode((1.0, 2.0, 4.0), 4) == (128, 181, 255)

    def test_clamps_overbright(self):
        """Test channels above 1 clamp to 255."""
        assert self._encode((9.0, 100.0, 1.5), 1) == (255, 255, 255)

    def test_nan_encodes_as_zero(self):
        """Test NaN channels encode as 0."""
        assert self._encode((math.nan, 0.25, math.nan), 1) == (0, 128, 0)
