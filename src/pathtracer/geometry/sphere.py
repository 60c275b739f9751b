"""Sphere primitive with robust ray-sphere intersection.

This module provides the host-side Sphere description used while a scene is
assembled, and the kernel-side SphereData struct with the intersection
function used during rendering.

A sphere may move linearly over time: its center at time t is
center0 + t * velocity. A static sphere simply has a zero velocity.

The intersection solves the half-b quadratic a*t^2 + 2*h*t + c = 0, with
h = dot(oc, direction), using the stable q = -(h + sign(h) * sqrt(h^2 - a*c))
form so the smaller root does not lose precision when h^2 is close to a*c.

Example:
    >>> from pathtracer.geometry.sphere import Sphere
    >>> from pathtracer.materials.lambertian import Lambertian
    >>> ball = Sphere((0.0, 0.0, -1.0), 0.5, Lambertian((0.1, 0.2, 0.5)))
    >>> moving = Sphere(
    ...     (2.0, 0.2, 0.0), 0.2, Lambertian((0.3, 0.3, 0.3)),
    ...     velocity=(0.0, 0.4, 0.0),
    ... )
    >>> moving.center_at(0.5)
    (2.0, 0.4, 0.0)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import taichi as ti

from pathtracer.core.ray import Ray, dot, ray_at, vec3
from pathtracer.geometry.aabb import Aabb, surrounding_box

if TYPE_CHECKING:
    from pathtracer.materials.material import Material


@dataclass(eq=False)
class Sphere:
    """A sphere defined by center point, radius and material.

    Spheres compare by identity so the same instance can be shared between
    a list and a BVH and still be stored once when the scene is uploaded.

    Attributes:
        center: The center of the sphere at time 0.
        radius: The radius of the sphere. Must be positive.
        material: The material assigned to the surface.
        velocity: Displacement of the center per unit of time.
    """

    center: tuple[float, float, float]
    radius: float
    material: "Material"
    velocity: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Radius = {self.radius} is not positive.")

    @property
    def is_moving(self) -> bool:
        """True if the sphere has a non-zero velocity."""
        return any(component != 0.0 for component in self.velocity)

    def center_at(self, time: float) -> tuple[float, float, float]:
        """Return the center of the sphere at the given time."""
        return (
            self.center[0] + time * self.velocity[0],
            self.center[1] + time * self.velocity[1],
            self.center[2] + time * self.velocity[2],
        )

    def bounding_box(self, time_frame: tuple[float, float]) -> Aabb:
        """Box enclosing the sphere over the whole time interval.

        Args:
            time_frame: The (start, end) times of the interval.

        Returns:
            The union of the boxes at the start and end of the interval.
        """
        r = self.radius
        boxes = []
        for time in time_frame:
            c = self.center_at(time)
            boxes.append(
                Aabb(
                    (c[0] - r, c[1] - r, c[2] - r),
                    (c[0] + r, c[1] + r, c[2] + r),
                )
            )
        return surrounding_box(boxes[0], boxes[1])


@ti.dataclass
class SphereData:
    """Kernel-side sphere record.

    Attributes:
        center0: Center at time 0.
        velocity: Displacement of the center per unit of time.
        radius: The radius of the sphere.
        material_id: Unified material id of the surface.
    """

    center0: vec3
    velocity: vec3
    radius: ti.f64
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, oriented
            against the incoming ray. Only valid if hit == 1.
        front_face: Whether the ray hit the outside (1) or the inside (0).
            Only valid if hit == 1.
        material_id: Unified material id of the surface that was hit,
            -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def sphere_center(sphere: SphereData, time: ti.f64) -> vec3:
    """Center of a possibly moving sphere at the given time."""
    return sphere.center0 + time * sphere.velocity


@ti.func
def _solve_quadratic_robust(h: ti.f64, a: ti.f64, c: ti.f64, sqrt_d: ti.f64):
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent or degenerate ray
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray: Ray,
    sphere: SphereData,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The intersection is found by solving
        |origin + t * direction - center(time)|^2 = radius^2,
    i.e. a*t^2 + 2*h*t + c = 0 with
        a = dot(direction, direction)
        h = dot(direction, origin - center)
        c = |origin - center|^2 - radius^2

    The nearer root is taken if it lies in the open interval (t_min, t_max),
    otherwise the farther one, otherwise the ray misses.

    Args:
        ray: The ray to test. Its time places a moving sphere.
        sphere: The sphere to test intersection against.
        t_min: Lower bound (exclusive) of accepted t values.
        t_max: Upper bound (exclusive) of accepted t values.

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if intersection occurred.
    """
    center = sphere_center(sphere, ray.time)
    oc = ray.origin - center

    a = dot(ray.direction, ray.direction)
    h = dot(ray.direction, oc)
    c = dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    rec = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            rec.hit = 1
            rec.t = t
            rec.point = ray_at(ray, t)
            rec.material_id = sphere.material_id

            outward_normal = (rec.point - center) / sphere.radius
            if dot(ray.direction, outward_normal) < 0.0:
                rec.front_face = 1
                rec.normal = outward_normal
            else:
                # Ray is inside the sphere, hitting back face
                rec.front_face = 0
                rec.normal = -outward_normal

    return rec


@ti.func
def make_sphere(center: vec3, radius: ti.f64, material_id: ti.i32) -> SphereData:
    """Create a static kernel-side sphere."""
    return SphereData(
        center0=center,
        velocity=vec3(0.0, 0.0, 0.0),
        radius=radius,
        material_id=material_id,
    )
