"""Camera module for primary ray generation.

Components:
    thin_lens: Look-at camera with a thin lens and a shutter interval

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image

Rays start on the lens disk (defocus blur) and carry a time drawn from the
shutter interval (motion blur).
"""

from .thin_lens import (
    ThinLensCamera,
    clear_camera,
    get_camera_info,
    get_ray,
    is_camera_ready,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "is_camera_ready",
    "clear_camera",
    "get_ray",
    "get_camera_info",
]
