"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters incoming light around the surface normal.
The scattered direction is the normal plus a uniformly random unit vector,
which approximates a cosine-weighted lobe without any explicit pdf. The
attenuation is the albedo and the material never absorbs a ray outright.

Example:
    >>> from pathtracer.materials.lambertian import Lambertian
    >>> ground = Lambertian(albedo=(0.5, 0.5, 0.5))
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter, rng = scatter_lambertian(
    >>> #     albedo, normal, rng
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti

from pathtracer.core.ray import near_zero, random_unit_vector, vec3


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color as (R, G, B).
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, rng: ti.u32):
    """Sample a scattered direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The surface normal facing the incoming ray (unit length).
        rng: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, rng) where
        did_scatter is always 1. If the random vector nearly cancels the
        normal, the normal itself is used as the direction.
    """
    offset, rng = random_unit_vector(rng)
    scattered_direction = normal + offset

    # Catch degenerate scatter direction
    if near_zero(scattered_direction):
        scattered_direction = normal

    did_scatter = 1
    return scattered_direction, albedo, did_scatter, rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(material: Lambertian) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        material: The material to store.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = material.albedo
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]
