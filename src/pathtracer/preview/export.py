"""Image export utilities for rendered images.

Images are (height, width, 3) uint8 arrays with row 0 the top row, as
returned by :meth:`pathtracer.core.renderer.Renderer.get_pixels`.

Supported formats:
    - Plain-text PPM (``P3``)
    - PNG and anything else Pillow can write

Example:
    >>> from pathtracer.preview.export import save_image
    >>> pixels = camera.render(scene, settings)
    >>> save_image(pixels, "random_spheres.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def _check_image(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {pixels.dtype}")


def format_ppm(pixels: npt.NDArray[np.uint8]) -> str:
    """Encode an image as plain-text PPM.

    The header is ``P3``, the width and height, and the maximum value 255,
    each on its own line. One ``r g b`` line follows per pixel, row-major
    from the top-left.

    Args:
        pixels: Image array of shape (H, W, 3) with dtype uint8.

    Returns:
        The PPM text, ending with a newline.

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    _check_image(pixels)
    height, width, _ = pixels.shape
    lines = ["P3", f"{width} {height}", "255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Write an image as a plain-text PPM file.

    Args:
        pixels: Image array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path.
    """
    Path(filepath).write_text(format_ppm(pixels), encoding="ascii")
    logger.info("Wrote %s", filepath)


def save_png(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image with Pillow (PNG or any format implied by the suffix).

    Args:
        pixels: Image array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path (should end in .png).
    """
    _check_image(pixels)
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels))
    pil_image.save(filepath)
    logger.info("Wrote %s", filepath)


def save_image(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image, choosing the writer from the file suffix.

    ``.ppm`` files are written as plain-text PPM; everything else goes
    through Pillow.
    """
    if Path(filepath).suffix.lower() == ".ppm":
        write_ppm(pixels, filepath)
    else:
        save_png(pixels, filepath)
