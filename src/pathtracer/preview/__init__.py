"""Preview module for image output.

Components:
    export: Plain-text PPM and Pillow-based PNG export

Example:
    >>> from pathtracer.preview import save_image
    >>> save_image(renderer.get_pixels(), "output.ppm")
"""

from pathtracer.preview.export import format_ppm, save_image, save_png, write_ppm

__all__ = [
    "format_ppm",
    "write_ppm",
    "save_png",
    "save_image",
]
