"""Ray data structure and vector utilities for Taichi kernels.

This module provides the Ray dataclass and the vector algebra used by every
stage of the path tracer. Vectors are 3-component 64-bit float vectors; the
same type stands in for points, directions and colors.

Degenerate inputs are not guarded: normalizing a zero-length vector divides
by zero and yields NaN components, exactly as IEEE-754 arithmetic dictates.

Random sampling helpers take the caller's generator state (see
:mod:`pathtracer.core.rng`) and return the advanced state with their result.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def probe() -> vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), 0.0)
    ...     return ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.rng import random_f64, random_range

# 3D vector of 64-bit floats; aliases for readability
vec3 = ti.types.vector(3, ti.f64)
point3 = vec3
color3 = vec3

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin, a direction and a time of cast.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Not necessarily unit length.
        time: The time at which the ray is cast, used to place moving geometry.
    """

    origin: vec3
    direction: vec3
    time: ti.f64


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3, time: ti.f64) -> Ray:
    """Create a ray from origin, direction and time of cast."""
    return Ray(origin=origin, direction=direction, time=time)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return v.x * v.x + v.y * v.y + v.z * v.z


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    A zero-length input produces NaN components.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be unit length).

    Returns:
        incident - 2 (incident . normal) normal.
    """
    return incident - 2.0 * dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta_ratio: ti.f64) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    The refracted direction is split into a component perpendicular to the
    normal and one parallel to it. The cosine of the incident angle is
    clamped to 1 so rounding never makes the perpendicular part too long.

    Args:
        incident: The incoming direction (unit length).
        normal: The surface normal facing the incoming ray (unit length).
        eta_ratio: Ratio of refractive indices (incident side / transmitted side).

    Returns:
        The refracted direction. Callers are responsible for detecting total
        internal reflection before calling this.
    """
    cos_theta = tm.min(dot(-incident, normal), 1.0)
    r_out_perp = eta_ratio * (incident + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f64, eta_ratio: ti.f64) -> ti.f64:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incident direction and normal.
        eta_ratio: Ratio of refractive indices.

    Returns:
        The approximate reflectance r0 + (1 - r0)(1 - cosine)^5.
    """
    r0 = (1.0 - eta_ratio) / (1.0 + eta_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is below 1e-8 in magnitude."""
    result = 0
    if (
        ti.abs(v.x) < NEAR_ZERO_EPSILON
        and ti.abs(v.y) < NEAR_ZERO_EPSILON
        and ti.abs(v.z) < NEAR_ZERO_EPSILON
    ):
        result = 1
    return result


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3(rng: ti.u32, low: ti.f64, high: ti.f64):
    """Draw a vector with each component uniform in [low, high).

    Returns:
        A tuple of (vector, next_rng).
    """
    x, rng = random_range(rng, low, high)
    y, rng = random_range(rng, low, high)
    z, rng = random_range(rng, low, high)
    return vec3(x, y, z), rng


@ti.func
def random_in_unit_sphere(rng: ti.u32):
    """Draw a point uniformly inside the unit ball.

    Rejection-samples the [-1, 1)^3 cube until the point lies strictly
    inside the ball.

    Returns:
        A tuple of (point, next_rng) with length(point) < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    while found == 0:
        p, rng = random_vec3(rng, -1.0, 1.0)
        if length_squared(p) < 1.0:
            found = 1
    return p, rng


@ti.func
def random_unit_vector(rng: ti.u32):
    """Draw a unit vector by normalizing a point from the unit ball.

    Returns:
        A tuple of (unit_vector, next_rng).
    """
    p, rng = random_in_unit_sphere(rng)
    return normalize(p), rng


@ti.func
def random_in_unit_disk(rng: ti.u32):
    """Draw a point uniformly inside the unit disk in the xy-plane.

    Used for thin-lens depth of field.

    Returns:
        A tuple of (point, next_rng) with z = 0 and x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    while found == 0:
        x, rng = random_range(rng, -1.0, 1.0)
        y, rng = random_range(rng, -1.0, 1.0)
        p = vec3(x, y, 0.0)
        if x * x + y * y < 1.0:
            found = 1
    return p, rng
