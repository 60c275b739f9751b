"""Band-by-band renderer with progress reporting.

The renderer launches the render kernel once per band of rows, top band
first, and reports how many pixels are finished after each band. Pixels
within a band are rendered in parallel; each owns its random stream, so
the image does not depend on the band size or on thread scheduling.

Example:
    >>> from pathtracer.config import RenderSettings
    >>> from pathtracer.core.renderer import Renderer
    >>> scene.commit()
    >>> setup_camera(camera)
    >>> renderer = Renderer(camera.image_width, camera.image_height)
    >>> renderer.render(RenderSettings(samples_per_pixel=32), callback=print)
    >>> renderer.save("out.png")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Iterator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from pathtracer.config import RenderSettings
from pathtracer.core.integrator import (
    get_pixel_buffer,
    get_pixels_done,
    render_rows,
    setup_render_target,
)
from pathtracer.preview.export import save_image

logger = logging.getLogger(__name__)

# Callback receives (pixels_done, total_pixels)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the uploaded scene through the uploaded camera.

    The renderer owns the dimensions of the global pixel buffer; creating a
    second renderer resets it.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).

        Raises:
            ValueError: If a dimension is below 1 or above the maximum.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def total_pixels(self) -> int:
        """Number of pixels in the image."""
        return self._width * self._height

    @property
    def pixels_done(self) -> int:
        """Number of pixels finished in the current render."""
        return get_pixels_done()

    def render(
        self,
        settings: RenderSettings | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the full image.

        Args:
            settings: Render parameters; defaults if omitted.
            callback: Optional callback called after each band.
                Receives (pixels_done, total_pixels).

        Raises:
            RuntimeError: If no scene or camera is uploaded.
        """
        for done, total in self.render_progressive(settings):
            if callback is not None:
                callback(done, total)

    def render_progressive(
        self,
        settings: RenderSettings | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the full image, yielding progress after each band.

        Args:
            settings: Render parameters; defaults if omitted.

        Yields:
            Tuple of (pixels_done, total_pixels). The last tuple has
            pixels_done == total_pixels.

        Raises:
            RuntimeError: If no scene or camera is uploaded.
        """
        if settings is None:
            settings = RenderSettings()

        # Clears the pixel buffer and the progress counter
        setup_render_target(self._width, self._height)

        total = self.total_pixels
        logger.debug(
            "Rendering %dx%d at %d spp, depth %d, seed %d",
            self._width,
            self._height,
            settings.samples_per_pixel,
            settings.max_depth,
            settings.seed,
        )

        # Bands run from the top row down; j = 0 is the bottom row
        band_top = self._height
        while band_top > 0:
            band_bottom = max(band_top - settings.rows_per_batch, 0)
            render_rows(
                band_bottom,
                band_top,
                settings.samples_per_pixel,
                settings.max_depth,
                settings.seed,
            )
            band_top = band_bottom

            done = get_pixels_done()
            logger.debug("Rendered %d/%d pixels", done, total)
            yield (done, total)

    def get_pixels(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8,
            row 0 being the top row.
        """
        full_image = get_pixel_buffer().to_numpy()

        # Extract active region, (width, height, 3) with j = 0 at the bottom
        image = full_image[: self._width, : self._height, :]

        # Transpose to (height, width, 3) and flip so the top row comes first
        image = np.flipud(np.transpose(image, (1, 0, 2)))

        return np.ascontiguousarray(image).astype(np.uint8)

    def iter_pixels(self) -> Iterator[tuple[int, int, int]]:
        """Iterate (r, g, b) triples row-major from the top-left pixel."""
        for r, g, b in self.get_pixels().reshape(-1, 3).tolist():
            yield (r, g, b)

    def save(self, filepath: str | Path) -> None:
        """Save the rendered image; ``.ppm`` is written as text PPM."""
        save_image(self.get_pixels(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"pixels_done={self.pixels_done})"
        )
