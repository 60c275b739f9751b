"""Metal (specular reflective) material implementation.

A metal reflects the incoming direction about the surface normal,
    R = I - 2(I . N)N,
and then perturbs the reflection by a random point in the unit ball scaled
by the fuzz parameter. Fuzz 0 is a perfect mirror.

A fuzzed reflection can end up pointing into the surface; such rays are
absorbed rather than resampled, so rough metals at grazing angles lose a
little energy.

Example:
    >>> from pathtracer.materials.metal import Metal
    >>> brushed_gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter, rng = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, rng
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti

from pathtracer.core.ray import dot, normalize, random_in_unit_sphere, reflect, vec3


@dataclass(frozen=True)
class Metal:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color as (R, G, B).
        fuzz: Magnitude of the random perturbation of the reflected ray.
            0 = perfect mirror. Must be non-negative.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        if self.fuzz < 0.0:
            raise ValueError(f"Fuzz = {self.fuzz} is negative. Fuzz must be >= 0.")


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The perturbation magnitude. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (unit length).
        rng: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, rng) where
        did_scatter is 0 when the perturbed reflection points into the surface.
    """
    reflected = reflect(normalize(incident_direction), normal)

    perturbation, rng = random_in_unit_sphere(rng)
    scattered_direction = reflected + fuzz * perturbation

    did_scatter = 1
    if dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, albedo, did_scatter, rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 1024

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(material: Metal) -> int:
    """Add a metal material to the material registry.

    Args:
        material: The material to store.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = material.albedo
    metal_fuzzes[idx] = material.fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f64:
    """Get the fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]
