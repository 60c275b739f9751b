"""Path tracing integrator and the per-pixel render kernel.

This module implements the depth-bounded radiance estimate and the kernel
that fills the pixel buffer.

A ray's radiance is found by bouncing it through the scene: on each hit the
surface material either absorbs the ray (black) or scatters it with an
attenuation; an escaped ray returns the sky gradient; an exhausted bounce
budget returns black. The estimate is

    attenuation_1 * attenuation_2 * ... * attenuation_n * sky(ray_n)

which the kernel computes with a loop carrying the running product, since
Taichi functions cannot recurse. There is no Russian roulette.

Each pixel owns a private random stream seeded from the render seed and the
pixel index, so a given seed renders the same image on every run.

Example:
    >>> from pathtracer.core.integrator import render_rows, setup_render_target
    >>> setup_render_target(320, 180)
    >>> render_rows(0, 180, samples_per_pixel=16, max_depth=8, seed=1)
"""

import math

import taichi as ti

from pathtracer.camera.thin_lens import get_ray, is_camera_ready
from pathtracer.core.color import background_color, encode_color, ivec3
from pathtracer.core.ray import Ray, make_ray, vec3
from pathtracer.core.rng import random_f64, seed_stream
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.dielectric import get_dielectric_ior, scatter_dielectric
from pathtracer.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from pathtracer.materials.material import MaterialKind
from pathtracer.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from pathtracer.scene.intersection import has_scene_root, intersect_scene
from pathtracer.scene.manager import get_material_type, get_material_type_index

# =============================================================================
# Rendering Constants
# =============================================================================

# Hits closer than this to the ray origin are ignored (shadow acne)
T_MIN = 0.001
T_MAX = math.inf

_LAMBERTIAN = int(MaterialKind.LAMBERTIAN)
_METAL = int(MaterialKind.METAL)
_DIELECTRIC = int(MaterialKind.DIELECTRIC)

# =============================================================================
# Render Target (Pixel Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Encoded 8-bit pixels, indexed [i, j] with j = 0 the bottom row
_pixels = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Pixels finished since the last clear (progress only)
_pixels_done = ti.field(dtype=ti.i32, shape=())

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the pixel buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is below 1 or above the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 1x1")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Zero the pixel buffer and the progress counter."""
    _pixels.fill(0)
    _pixels_done[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def get_pixels_done() -> int:
    """Number of pixels finished since the render target was cleared."""
    return int(_pixels_done[None])


def get_pixel_buffer() -> "ti.MatrixField":
    """The full preallocated pixel field.

    Use get_image_dimensions() to find the active region.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    return _pixels


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def check_ready() -> None:
    """Raise unless a scene, a camera and a render target are all uploaded.

    Raises:
        RuntimeError: Naming the first missing piece.
    """
    if not has_scene_root():
        raise RuntimeError("No scene uploaded. Call SceneManager.commit() first.")
    if not is_camera_ready():
        raise RuntimeError("No camera set up. Call setup_camera() first.")
    _check_render_target_initialized()


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(ray_in: Ray, rec: HitRecord, rng: ti.u32):
    """Dispatch to the scatter function of the hit surface's material.

    Args:
        ray_in: The incoming ray.
        rec: The hit record of the surface.
        rng: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, rng).
        did_scatter is 0 for absorbed rays, including every ray that hits
        a surface without a material.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == _LAMBERTIAN:
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, did_scatter, rng = scatter_lambertian(
            albedo, rec.normal, rng
        )

    elif mat_type == _METAL:
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter, rng = scatter_metal(
            albedo, fuzz, ray_in.direction, rec.normal, rng
        )

    elif mat_type == _DIELECTRIC:
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, did_scatter, rng = scatter_dielectric(
            ior, ray_in.direction, rec.normal, rec.front_face, rng
        )

    return scattered_direction, attenuation, did_scatter, rng


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, rng: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Bounce budget. A budget of 0 returns black.
        rng: The caller's generator state.

    Returns:
        A tuple of (color, rng).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    depth = max_depth

    # Taichi doesn't support break in ti.func loops
    active = 1
    while active == 1:
        if depth <= 0:
            active = 0
        else:
            rec = intersect_scene(current, T_MIN, T_MAX)
            if rec.hit == 0:
                color = throughput * background_color(current)
                active = 0
            else:
                direction, attenuation, did_scatter, rng = _scatter_material(current, rec, rng)
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    # The scattered ray starts exactly on the surface; T_MIN
                    # keeps it from re-hitting it
                    current = make_ray(rec.point, direction, current.time)
                    depth -= 1

    return color, rng


@ti.func
def render_pixel(
    i: ti.i32,
    j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> ivec3:
    """Render and encode one pixel.

    Pixel (i, j) samples viewport coordinates s = (i + u) / (width - 1) and
    t = (j + v) / (height - 1) with u, v uniform in [0, 1). A one-pixel
    wide or tall image divides by 1 instead of 0.

    Args:
        i: Column, 0 = left.
        j: Row, 0 = bottom.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of rays averaged.
        max_depth: Bounce budget per ray.
        seed: The render seed.

    Returns:
        The encoded 8-bit color.
    """
    # Stream index is the row-major position counted from the top-left
    rng = seed_stream(seed, (height - 1 - j) * width + i)

    s_scale = 1.0 / ti.cast(ti.max(width - 1, 1), ti.f64)
    t_scale = 1.0 / ti.cast(ti.max(height - 1, 1), ti.f64)

    pixel_sum = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        jitter_u, rng = random_f64(rng)
        jitter_v, rng = random_f64(rng)
        s = (ti.cast(i, ti.f64) + jitter_u) * s_scale
        t = (ti.cast(j, ti.f64) + jitter_v) * t_scale

        ray, rng = get_ray(s, t, rng)
        color, rng = ray_color(ray, max_depth, rng)
        pixel_sum += color

    return encode_color(pixel_sum, samples_per_pixel)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_begin: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    """Render rows [row_begin, row_end) in parallel, one task per pixel."""
    for i, j in ti.ndrange(width, (row_begin, row_end)):
        _pixels[i, j] = render_pixel(i, j, width, height, samples_per_pixel, max_depth, seed)
        ti.atomic_add(_pixels_done[None], 1)


@ti.kernel
def _render_single_pixel(
    i: ti.i32,
    j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
) -> ivec3:
    return render_pixel(i, j, width, height, samples_per_pixel, max_depth, seed)


@ti.kernel
def _trace_ray(
    origin: vec3,
    direction: vec3,
    time: ti.f64,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    rng = seed_stream(seed, 0)
    color, rng = ray_color(make_ray(origin, direction, time), max_depth, rng)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(
    row_begin: int,
    row_end: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int,
) -> None:
    """Render a band of rows into the pixel buffer.

    Args:
        row_begin: First row of the band (0 = bottom row).
        row_end: One past the last row of the band.
        samples_per_pixel: Number of rays averaged per pixel.
        max_depth: Bounce budget per ray.
        seed: The render seed.

    Raises:
        RuntimeError: If the scene, camera or render target is missing.
    """
    check_ready()
    width, height = get_image_dimensions()
    _render_rows(row_begin, row_end, width, height, samples_per_pixel, max_depth, seed)


def render_sample(
    pixel_i: int,
    pixel_j: int,
    samples_per_pixel: int = 1,
    max_depth: int = 16,
    seed: int = 0,
) -> tuple[int, int, int]:
    """Render one pixel without touching the pixel buffer.

    Gives the same value the full render stores for that pixel with the
    same settings.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        samples_per_pixel: Number of rays averaged.
        max_depth: Bounce budget per ray.
        seed: The render seed.

    Returns:
        Tuple of 8-bit (R, G, B) values.

    Raises:
        RuntimeError: If the scene, camera or render target is missing.
    """
    check_ready()
    width, height = get_image_dimensions()
    color = _render_single_pixel(
        pixel_i, pixel_j, width, height, samples_per_pixel, max_depth, seed
    )
    return (int(color[0]), int(color[1]), int(color[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    time: float = 0.0,
    max_depth: int = 16,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray through the uploaded scene.

    Raises:
        RuntimeError: If no scene is uploaded.
    """
    if not has_scene_root():
        raise RuntimeError("No scene uploaded. Call SceneManager.commit() first.")
    color = _trace_ray(vec3(*origin), vec3(*direction), time, max_depth, seed)
    return (float(color[0]), float(color[1]), float(color[2]))
