"""Dielectric (glass/water) material implementation.

This module implements clear dielectrics, which both reflect and refract.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

For each scattering event a single uniform draw chooses between reflection
and refraction with the Schlick reflectance as the reflection probability.
Clear glass does not absorb, so the attenuation is always white.

Example:
    >>> from pathtracer.materials.dielectric import Dielectric
    >>> glass = Dielectric(refractive_index=1.5)
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter, rng = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, rng
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import (
    dot,
    normalize,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from pathtracer.core.rng import random_f64


@dataclass(frozen=True)
class Dielectric:
    """Dielectric (glass/water) material properties.

    Attributes:
        refractive_index: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refractive_index: float = 1.5

    def __post_init__(self) -> None:
        if self.refractive_index <= 0.0:
            raise ValueError(
                f"Index of refraction = {self.refractive_index} is not positive."
            )


@ti.func
def scatter_dielectric(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    rng: ti.u32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (unit length).
        front_face: 1 if the ray hits the outside of the surface,
            0 if it travels inside the material.
        rng: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, rng) where
        attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    # Entering: air -> material (1 / ior); leaving: material -> air (ior)
    refraction_ratio = 1.0 / ior
    if front_face == 0:
        refraction_ratio = ior

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    cannot_refract = refraction_ratio * sin_theta > 1.0

    # Draw unconditionally so the stream advances the same way on every path
    choice, rng = random_f64(rng)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or choice < schlick_reflectance(cos_theta, refraction_ratio):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    did_scatter = 1
    return scattered_direction, attenuation, did_scatter, rng


@ti.func
def will_reflect(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Return 1 if total internal reflection occurs for this incidence."""
    refraction_ratio = 1.0 / ior
    if front_face == 0:
        refraction_ratio = ior

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    result = 0
    if refraction_ratio * sin_theta > 1.0:
        result = 1
    return result


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(material: Dielectric) -> int:
    """Add a dielectric material to the material registry.

    Args:
        material: The material to store.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = material.refractive_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f64:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]
