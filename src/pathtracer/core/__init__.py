"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    rng: Counter-based random streams, one per pixel
    ray: Ray data structure and vector utilities
    color: Sky background and pixel encoding
    integrator: Path tracing of single rays and pixels
    renderer: Band-by-band rendering loop with progress reporting

All compute-intensive operations use Taichi kernels and run in parallel
over pixels.
"""

from .color import MAX_CHANNEL, SKY_HORIZON, SKY_ZENITH, background_color, encode_color, ivec3
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .rng import pcg_hash, random_f64, random_range, seed_stream

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from pathtracer.core.integrator or pathtracer.core.renderer.

__all__ = [
    # Random streams
    "pcg_hash",
    "seed_stream",
    "random_f64",
    "random_range",
    # Rays and vectors
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    # Color
    "ivec3",
    "background_color",
    "encode_color",
    "SKY_HORIZON",
    "SKY_ZENITH",
    "MAX_CHANNEL",
]
