"""Tests for the preset scenes."""

import math

import numpy as np


class TestRandomScene:
    """Tests for the random spheres showcase."""

    def test_object_count(self):
        """Test the scene holds the 22x22 grid plus four big spheres."""
        from pathtracer.scene.presets import create_random_scene

        scene, _ = create_random_scene(seed=1, use_bvh=False)
        assert len(scene.world) == 22 * 22 + 4

    def test_seeded_layout_is_reproducible(self):
        """Test two scenes from the same seed place the same spheres."""
        from pathtracer.scene.presets import create_random_scene

        first, _ = create_random_scene(seed=7, use_bvh=False)
        second, _ = create_random_scene(seed=7, use_bvh=False)

        assert [s.center for s in first.world] == [s.center for s in second.world]
        assert [s.material for s in first.world] == [s.material for s in second.world]

    def test_small_spheres_stay_in_their_cell(self):
        """Test every small sphere sits on the ground within its grid cell."""
        from pathtracer.scene.presets import SMALL_RADIUS, create_random_scene

        scene, _ = create_random_scene(seed=2, use_bvh=False)
        small = [s for s in scene.world if s.radius == SMALL_RADIUS]

        assert len(small) == 22 * 22
        for index, sphere in enumerate(small):
            a, b = index // 22 - 11, index % 22 - 11
            assert a <= sphere.center[0] < a + 0.9
            assert b <= sphere.center[2] < b + 0.9
            assert sphere.center[1] == SMALL_RADIUS

    def test_only_diffuse_spheres_move(self):
        """Test moving spheres are diffuse and rise slower than 0.5 per unit time."""
        from pathtracer.materials.lambertian import Lambertian
        from pathtracer.scene.presets import create_random_scene

        scene, _ = create_random_scene(seed=3, use_bvh=False)
        moving = [s for s in scene.world if s.is_moving]

        assert moving
        for sphere in moving:
            assert isinstance(sphere.material, Lambertian)
            assert sphere.velocity[0] == 0.0 and sphere.velocity[2] == 0.0
            assert 0.0 <= sphere.velocity[1] < 0.5

    def test_bvh_root(self):
        """Test use_bvh makes a BVH node the render root."""
        from pathtracer.geometry.bvh import BvhNode
        from pathtracer.scene.presets import create_random_scene

        scene, _ = create_random_scene(rng=np.random.default_rng(0))
        assert isinstance(scene.root, BvhNode)
        assert not scene.is_committed


class TestFourSpheresScene:
    """Tests for the four spheres scene."""

    def test_spheres(self):
        """Test the ground and the three big spheres."""
        from pathtracer.scene.presets import create_four_spheres_scene

        scene, _ = create_four_spheres_scene()
        radii = sorted(s.radius for s in scene.world)

        assert radii == [1.0, 1.0, 1.0, 1000.0]


class TestPresetCamera:
    """Tests for the preset camera."""

    def test_camera_parameters(self):
        """Test the camera looks at the origin in focus."""
        from pathtracer.scene.presets import create_camera

        camera = create_camera(image_height=90, aspect_ratio=2.0)

        assert camera.image_width == 180
        assert camera.vfov == 20.0
        assert camera.lens_radius == 0.05
        assert math.isclose(camera.focus_dist, math.sqrt(13.0**2 + 2.0**2 + 3.0**2))
        assert camera.shutter == (0.0, 1.0)
