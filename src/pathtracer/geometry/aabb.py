"""Axis-aligned bounding boxes.

Boxes are built on the host while the scene is assembled (every hittable
reports one through ``bounding_box``) and tested against rays inside
kernels with the slab method.

Example:
    >>> from pathtracer.geometry.aabb import Aabb, surrounding_box
    >>> a = Aabb((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))
    >>> b = Aabb((2.0, -1.0, 0.5), (3.0, 0.5, 2.0))
    >>> surrounding_box(a, b)
    Aabb(minimum=(0.0, -1.0, 0.0), maximum=(3.0, 1.0, 2.0))
"""

from dataclasses import dataclass

import taichi as ti

from pathtracer.core.ray import Ray, vec3


@dataclass(frozen=True)
class Aabb:
    """An axis-aligned box given by its minimum and maximum corners.

    The corners are expected to be ordered (minimum <= maximum on every
    axis); this is not checked.

    Attributes:
        minimum: The corner with the smallest coordinates.
        maximum: The corner with the largest coordinates.
    """

    minimum: tuple[float, float, float]
    maximum: tuple[float, float, float]

    def extent(self, axis: int) -> float:
        """Size of the box along one axis."""
        return self.maximum[axis] - self.minimum[axis]


def surrounding_box(box0: Aabb, box1: Aabb) -> Aabb:
    """Return the smallest box containing both inputs."""
    small = (
        min(box0.minimum[0], box1.minimum[0]),
        min(box0.minimum[1], box1.minimum[1]),
        min(box0.minimum[2], box1.minimum[2]),
    )
    big = (
        max(box0.maximum[0], box1.maximum[0]),
        max(box0.maximum[1], box1.maximum[1]),
        max(box0.maximum[2], box1.maximum[2]),
    )
    return Aabb(small, big)


@ti.func
def hit_aabb(
    ray: Ray,
    box_min: vec3,
    box_max: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
) -> ti.i32:
    """Slab test of a ray against an axis-aligned box.

    For each axis the ray's entry and exit parameters are computed from the
    reciprocal of the direction component. A zero component gives an
    infinite reciprocal; rays parallel to a slab are then accepted or
    rejected by the interval comparisons alone.

    Args:
        ray: The ray to test.
        box_min: The box's minimum corner.
        box_max: The box's maximum corner.
        t_min: Start of the accepted parameter interval.
        t_max: End of the accepted parameter interval.

    Returns:
        1 if the ray overlaps the box somewhere in (t_min, t_max), else 0.
    """
    hit = 1
    lo = t_min
    hi = t_max
    for a in ti.static(range(3)):
        if hit == 1:
            inv_d = 1.0 / ray.direction[a]
            t0 = (box_min[a] - ray.origin[a]) * inv_d
            t1 = (box_max[a] - ray.origin[a]) * inv_d
            if inv_d < 0.0:
                temp = t0
                t0 = t1
                t1 = temp
            lo = t0 if t0 > lo else lo
            hi = t1 if t1 < hi else hi
            if hi <= lo:
                hit = 0
    return hit
