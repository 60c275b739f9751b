"""Unit tests for the ray module.

Tests cover:
- Ray construction and ray_at
- Vector utility functions (dot, cross, normalize, reflect, refract)
- Schlick reflectance and the near-zero test
- Random sampling helpers
"""

import math

import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from pathtracer.core.ray import make_ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -1.0), 0.0)
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        assert tuple(result[None].to_numpy()) == (1.0, 2.0, 3.0)

    def test_ray_at_scales_unnormalized_direction(self):
        """Test ray_at uses the direction as given, without normalizing."""
        from pathtracer.core.ray import make_ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 1.0, 0.0), vec3(2.0, 0.0, 0.0), 0.5)
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-12
        assert abs(r[1] - 1.0) < 1e-12
        assert abs(r[2]) < 1e-12

    def test_ray_keeps_time(self):
        """Test the ray carries its time."""
        from pathtracer.core.ray import make_ray, vec3

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0), 0.25)
            result[None] = ray.time

        test_kernel()
        assert result[None] == 0.25


class TestVectorUtilities:
    """Tests for vector algebra helpers."""

    def test_dot_and_cross(self):
        """Test dot and cross of basis vectors."""
        from pathtracer.core.ray import cross, dot, vec3

        d = ti.field(dtype=ti.f64, shape=())
        c = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            d[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            c[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert d[None] == 12.0
        assert tuple(c[None].to_numpy()) == (0.0, 0.0, 1.0)

    def test_normalize(self):
        """Test normalize returns a unit vector in the same direction."""
        from pathtracer.core.ray import length, normalize, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())
        norm = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            n = normalize(vec3(3.0, 0.0, 4.0))
            result[None] = n
            norm[None] = length(n)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.6) < 1e-12
        assert abs(r[2] - 0.8) < 1e-12
        assert abs(norm[None] - 1.0) < 1e-12

    def test_normalize_zero_vector_is_nan(self):
        """Test that normalizing a zero vector propagates NaN."""
        from pathtracer.core.ray import normalize, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 0.0, 0.0))

        test_kernel()
        assert all(math.isnan(x) for x in result[None].to_numpy())

    def test_reflect(self):
        """Test mirror reflection about a normal."""
        from pathtracer.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert tuple(result[None].to_numpy()) == (1.0, 1.0, 0.0)

    def test_refract_ratio_one_passes_straight(self):
        """Test that refraction with equal indices keeps the direction."""
        from pathtracer.core.ray import normalize, refract, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            d = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(d, vec3(0.0, 1.0, 0.0), 1.0)

        test_kernel()
        r = result[None]
        s = math.sqrt(0.5)
        assert abs(r[0] - s) < 1e-12
        assert abs(r[1] + s) < 1e-12
        assert abs(r[2]) < 1e-12

    def test_refract_obeys_snell(self):
        """Test that sin(theta_t) = eta * sin(theta_i)."""
        from pathtracer.core.ray import normalize, refract, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            d = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(d, vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - math.sqrt(0.5) / 1.5) < 1e-12
        assert r[1] < 0.0
        assert abs(r[0] ** 2 + r[1] ** 2 + r[2] ** 2 - 1.0) < 1e-12

    def test_schlick_normal_incidence(self):
        """Test Schlick reflectance at normal incidence equals r0."""
        from pathtracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = schlick_reflectance(1.0, 1.5)
            result[1] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert abs(result[0] - 0.04) < 1e-12
        assert abs(result[1] - 1.0) < 1e-12

    def test_near_zero(self):
        """Test the near-zero threshold of 1e-8 on every component."""
        from pathtracer.core.ray import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = near_zero(vec3(1e-9, -1e-9, 0.0))
            result[1] = near_zero(vec3(1e-9, 1e-7, 0.0))
            result[2] = near_zero(vec3(0.0, 0.0, 0.0))

        test_kernel()
        assert result[0] == 1
        assert result[1] == 0
        assert result[2] == 1


class TestRandomSampling:
    """Tests for random sampling helpers."""

    def test_random_in_unit_sphere(self):
        """Test samples lie strictly inside the unit ball."""
        from pathtracer.core.ray import length_squared, random_in_unit_sphere
        from pathtracer.core.rng import seed_stream

        n = 1024
        result = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_stream(ti.u32(7), i)
                p, rng = random_in_unit_sphere(rng)
                result[i] = length_squared(p)

        test_kernel()
        assert result.to_numpy().max() < 1.0

    def test_random_unit_vector(self):
        """Test samples have unit length."""
        from pathtracer.core.ray import length, random_unit_vector
        from pathtracer.core.rng import seed_stream

        n = 1024
        result = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_stream(ti.u32(8), i)
                p, rng = random_unit_vector(rng)
                result[i] = length(p)

        test_kernel()
        arr = result.to_numpy()
        assert abs(arr - 1.0).max() < 1e-9

    def test_random_in_unit_disk(self):
        """Test samples lie inside the unit disk with z = 0."""
        from pathtracer.core.ray import random_in_unit_disk
        from pathtracer.core.rng import seed_stream

        n = 1024
        result = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_stream(ti.u32(9), i)
                p, rng = random_in_unit_disk(rng)
                result[i] = p

        test_kernel()
        arr = result.to_numpy()
        assert ((arr[:, 0] ** 2 + arr[:, 1] ** 2) < 1.0).all()
        assert (arr[:, 2] == 0.0).all()
