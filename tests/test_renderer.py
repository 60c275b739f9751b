"""Tests for the band-by-band renderer.

Tests cover:
- Progress reporting through the generator and the callback
- Image layout (top row first) and dtype
- Independence of the image from the band size
- Agreement between full renders and single-pixel renders
"""

import numpy as np
import pytest


def _setup_scene(width=16, height=12):
    from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera
    from pathtracer.materials.lambertian import Lambertian
    from pathtracer.materials.metal import Metal
    from pathtracer.scene.manager import SceneManager

    scene = SceneManager()
    scene.add_sphere((0.0, -100.5, -1.0), 100.0, Lambertian((0.5, 0.5, 0.5)))
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, Metal((0.8, 0.6, 0.2), 0.1))
    scene.commit()

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=60.0,
        aspect_ratio=width / height,
        image_height=height,
    )
    setup_camera(camera)
    return scene, camera


class TestProgress:
    """Tests for progress reporting."""

    def test_generator_reports_each_band(self):
        """Test one progress tuple per band, ending at the full pixel count."""
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        _setup_scene(16, 12)
        renderer = Renderer(16, 12)
        settings = RenderSettings(samples_per_pixel=1, max_depth=4, rows_per_batch=5)
        progress = list(renderer.render_progressive(settings))

        assert progress == [(80, 192), (160, 192), (192, 192)]
        assert renderer.pixels_done == 192

    def test_callback_receives_final_total(self):
        """Test the callback's last call reports all pixels done."""
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        _setup_scene(16, 12)
        renderer = Renderer(16, 12)
        calls = []

        def callback(done, total):
            calls.append((done, total))

        renderer.render(RenderSettings(samples_per_pixel=1, max_depth=4), callback)

        assert calls[-1] == (192, 192)
        assert all(a[0] < b[0] for a, b in zip(calls, calls[1:]))

    def test_invalid_size(self):
        """Test oversized renderers are rejected."""
        from pathtracer.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(4096, 10)


class TestImage:
    """Tests for the rendered image."""

    def test_shape_and_dtype(self):
        """Test the image is (height, width, 3) uint8."""
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        _setup_scene(16, 12)
        renderer = Renderer(16, 12)
        renderer.render(RenderSettings(samples_per_pixel=2, max_depth=4))
        image = renderer.get_pixels()

        assert image.shape == (12, 16, 3)
        assert image.dtype == np.uint8

    def test_top_row_is_sky(self):
        """Test row 0 of the image is the top of the view (sky, not ground)."""
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        _setup_scene(16, 12)
        renderer = Renderer(16, 12)
        renderer.render(RenderSettings(samples_per_pixel=4, max_depth=8))
        image = renderer.get_pixels().astype(int)

        # Sky is blue-tinted and bright; the gray ground below is darker
        assert image[0, :, 2].mean() > image[-1, :, 2].mean()
        assert (image[0, :, 2] >= image[0, :, 0]).all()

    def test_band_size_does_not_change_image(self):
        """Test images rendered with different band sizes are identical."""
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        _setup_scene(16, 12)
        renderer = Renderer(16, 12)
        renderer.render(RenderSettings(samples_per_pixel=3, max_depth=6, seed=9, rows_per_batch=1))
        one_row = renderer.get_pixels()
        renderer.render(RenderSettings(samples_per_pixel=3, max_depth=6, seed=9, rows_per_batch=7))
        seven_rows = renderer.get_pixels()

        assert np.array_equal(one_row, seven_rows)

    def test_full_render_matches_single_pixel(self):
        """Test render_sample reproduces the pixel stored by a full render."""
        from pathtracer.config import RenderSettings
        from pathtracer.core.integrator import render_sample
        from pathtracer.core.renderer import Renderer

        _setup_scene(16, 12)
        renderer = Renderer(16, 12)
        renderer.render(RenderSettings(samples_per_pixel=3, max_depth=6, seed=5))
        image = renderer.get_pixels()

        # Pixel (i=7, j=2) counts rows from the bottom
        expected = tuple(int(c) for c in image[12 - 1 - 2, 7])
        assert render_sample(7, 2, samples_per_pixel=3, max_depth=6, seed=5) == expected

    def test_iter_pixels_row_major(self):
        """Test iter_pixels walks rows from the top-left."""
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        _setup_scene(16, 12)
        renderer = Renderer(16, 12)
        renderer.render(RenderSettings(samples_per_pixel=1, max_depth=2))
        image = renderer.get_pixels()
        pixels = list(renderer.iter_pixels())

        assert len(pixels) == 192
        assert pixels[0] == tuple(int(c) for c in image[0, 0])
        assert pixels[17] == tuple(int(c) for c in image[1, 1])

    def test_repr(self):
        """Test the repr names the size."""
        from pathtracer.core.renderer import Renderer

        assert "width=16" in repr(Renderer(16, 12))
