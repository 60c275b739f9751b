"""Thin-lens camera model with depth of field and shutter-time sampling.

This module implements the camera that generates primary rays for rendering.
The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Defocus blur from a circular lens of configurable aperture
- Motion blur by stamping each ray with a time inside the shutter interval

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits at the focus distance, so points at that distance stay
sharp whatever the aperture.

Example:
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     image_height=240,
    ...     aperture=0.1,
    ...     focus_dist=13.34,
    ... )
    >>> setup_camera(camera)
    >>> # Inside a Taichi kernel:
    >>> # ray, rng = get_ray(s, t, rng)
"""

import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import make_ray, random_in_unit_disk
from pathtracer.core.rng import random_range

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ThinLensCamera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        image_height: Output image height in pixels.
        aperture: Lens diameter. 0 gives a pinhole camera with no defocus blur.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
        time0: Shutter open time.
        time1: Shutter close time.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    image_height: int
    aperture: float = 0.0
    focus_dist: float = 1.0
    time0: float = 0.0
    time1: float = 1.0

    def __post_init__(self) -> None:
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio = {self.aspect_ratio} is not positive.")
        if self.image_height < 1 or self.image_width < 1:
            raise ValueError(
                f"Image size {self.image_width}x{self.image_height} must be at least 1x1."
            )
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Vertical field of view = {self.vfov} must be in (0, 180).")
        if self.aperture < 0.0:
            raise ValueError(f"Aperture = {self.aperture} is negative.")
        if self.focus_dist <= 0.0:
            raise ValueError(f"Focus distance = {self.focus_dist} is not positive.")
        if self.time1 < self.time0:
            raise ValueError(f"Shutter interval [{self.time0}, {self.time1}) is reversed.")

    @property
    def image_width(self) -> int:
        """Output image width in pixels (truncated toward zero)."""
        return int(self.image_height * self.aspect_ratio)

    @property
    def lens_radius(self) -> float:
        """Radius of the lens disk."""
        return self.aperture / 2.0

    @property
    def shutter(self) -> tuple[float, float]:
        """The (open, close) shutter interval."""
        return (self.time0, self.time1)

    def render(
        self,
        scene,
        settings=None,
        callback: Callable[[int, int], None] | None = None,
    ) -> np.ndarray:
        """Render a scene through this camera.

        Commits the scene unless the arena already holds it unchanged,
        uploads this camera and runs the renderer.

        Args:
            scene: The SceneManager holding the scene.
            settings: RenderSettings; library defaults if omitted.
            callback: Optional progress callback (pixels_done, total_pixels).

        Returns:
            The image as a (height, width, 3) uint8 array, top row first.
        """
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        if not scene.is_committed:
            scene.commit()
        setup_camera(self)

        renderer = Renderer(self.image_width, self.image_height)
        renderer.render(settings if settings is not None else RenderSettings(), callback)
        return renderer.get_pixels()


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Viewport vectors at the focus distance
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f64, shape=())  # Lower-left of viewport

# Lens and shutter
_lens_radius = ti.field(dtype=ti.f64, shape=())
_time0 = ti.field(dtype=ti.f64, shape=())
_time1 = ti.field(dtype=ti.f64, shape=())

_camera_ready = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Upload camera state derived from its configuration.

    Computes the camera's orthonormal basis (u, v, w) and the viewport
    geometry at the focus distance. This must be called before rendering.

    Args:
        camera: Camera configuration.
    """
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.lens_radius
    _time0[None] = camera.time0
    _time1[None] = camera.time1
    _camera_ready[None] = 1


def is_camera_ready() -> bool:
    """True once setup_camera() has been called."""
    return bool(_camera_ready[None])


def clear_camera() -> None:
    """Forget the uploaded camera; rendering fails until setup_camera() runs again."""
    _camera_ready[None] = 0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f64, t: ti.f64, rng: ti.u32):
    """Generate a primary ray through viewport coordinates (s, t).

    The origin is jittered across the lens disk and the ray aims at the
    viewport point, so only geometry at the focus distance stays sharp. The
    ray's time is drawn uniformly from the shutter interval.

    Args:
        s: Horizontal coordinate (0 = left edge, 1 = right edge).
        t: Vertical coordinate (0 = bottom edge, 1 = top edge).
        rng: The caller's generator state.

    Returns:
        A tuple of (ray, rng).
    """
    rd, rng = random_in_unit_disk(rng)
    rd = _lens_radius[None] * rd
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    time, rng = random_range(rng, _time0[None], _time1[None])

    origin = _camera_origin[None]
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - origin
        - offset
    )
    return make_ray(origin + offset, direction, time), rng


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, field in fields.items():
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
