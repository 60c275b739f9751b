"""Sky background and pixel color encoding."""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, normalize, vec3

# Gradient endpoints for escaped rays (horizon white, zenith sky blue)
SKY_HORIZON = vec3(1.0, 1.0, 1.0)
SKY_ZENITH = vec3(0.5, 0.7, 1.0)

# Channel ceiling before 8-bit quantization
MAX_CHANNEL = 0.999

# 8-bit RGB triple
ivec3 = ti.types.vector(3, ti.i32)


@ti.func
def background_color(ray: Ray) -> vec3:
    """Radiance of a ray that escapes the scene.

    Linearly blends white and sky blue by the normalized direction's
    vertical component, remapped from [-1, 1] to [0, 1].
    """
    unit_direction = normalize(ray.direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON + t * SKY_ZENITH


@ti.func
def encode_color(pixel_sum: vec3, samples_per_pixel: ti.i32) -> ivec3:
    """Turn a summed radiance estimate into an 8-bit RGB triple.

    Averages over the sample count, applies gamma 2 (square root), clamps
    to [0, 0.999] and quantizes with floor(256 * channel). NaN channels
    (from degenerate geometry) encode as 0.

    Args:
        pixel_sum: Sum of samples_per_pixel radiance samples.
        samples_per_pixel: Number of samples in the sum.

    Returns:
        Integer channels in [0, 255].
    """
    scale = 1.0 / ti.cast(samples_per_pixel, ti.f64)
    corrected = ti.sqrt(pixel_sum * scale)
    for c in ti.static(range(3)):
        if tm.isnan(corrected[c]):
            corrected[c] = 0.0
    corrected = tm.clamp(corrected, 0.0, MAX_CHANNEL)
    return ti.cast(ti.floor(256.0 * corrected), ti.i32)
