"""Unit tests for the per-task random streams.

Tests cover:
- Range of uniform draws
- Determinism for a fixed seed and task
- Independence of streams for different seeds and tasks
"""

import taichi as ti


class TestRandomF64:
    """Tests for uniform draws."""

    def test_values_in_unit_interval(self):
        """Test that every draw lies in [0, 1)."""
        from pathtracer.core.rng import random_f64, seed_stream

        n = 4096
        values = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_stream(ti.u32(3), i)
                v, rng = random_f64(rng)
                values[i] = v

        test_kernel()
        arr = values.to_numpy()
        assert arr.min() >= 0.0
        assert arr.max() < 1.0

    def test_mean_near_half(self):
        """Test that a long run of draws averages to about 0.5."""
        from pathtracer.core.rng import random_f64, seed_stream

        n = 20000
        values = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                rng = seed_stream(ti.u32(11), 0)
                for i in range(n):
                    v, rng = random_f64(rng)
                    values[i] = v

        test_kernel()
        assert abs(values.to_numpy().mean() - 0.5) < 0.02

    def test_random_range_bounds(self):
        """Test that random_range stays inside [low, high)."""
        from pathtracer.core.rng import random_range, seed_stream

        n = 2048
        values = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_stream(ti.u32(5), i)
                v, rng = random_range(rng, -2.0, 3.0)
                values[i] = v

        test_kernel()
        arr = values.to_numpy()
        assert arr.min() >= -2.0
        assert arr.max() < 3.0


class TestSeedStream:
    """Tests for stream derivation."""

    def test_same_seed_same_sequence(self):
        """Test that a stream replays identically from the same seed."""
        from pathtracer.core.rng import random_f64, seed_stream

        first = ti.field(dtype=ti.f64, shape=8)
        second = ti.field(dtype=ti.f64, shape=8)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                a = seed_stream(ti.u32(99), 17)
                b = seed_stream(ti.u32(99), 17)
                for i in range(8):
                    va, a = random_f64(a)
                    vb, b = random_f64(b)
                    first[i] = va
                    second[i] = vb

        test_kernel()
        assert (first.to_numpy() == second.to_numpy()).all()

    def test_different_tasks_differ(self):
        """Test that neighbouring tasks get different first draws."""
        from pathtracer.core.rng import random_f64, seed_stream

        n = 256
        values = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_stream(ti.u32(1), i)
                v, rng = random_f64(rng)
                values[i] = v

        test_kernel()
        # Allow the odd collision of 24-bit values
        assert len(set(values.to_numpy().tolist())) > n - 4

    def test_different_seeds_differ(self):
        """Test that the same task under two seeds draws differently."""
        from pathtracer.core.rng import random_f64, seed_stream

        values = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            a = seed_stream(ti.u32(1), 0)
            b = seed_stream(ti.u32(2), 0)
            va, a = random_f64(a)
            vb, b = random_f64(b)
            values[0] = va
            values[1] = vb

        test_kernel()
        assert values[0] != values[1]
