"""Hittable geometry: the closed set of things a ray can hit.

Three kinds exist: spheres, unordered lists and BVH nodes. Lists and nodes
hold shared references to other hittables, so one sphere may appear in both
a flat list and a hierarchy.

Example:
    >>> from pathtracer.geometry.hittable import HittableList
    >>> world = HittableList()
    >>> world.add(Sphere((0.0, -1000.0, 0.0), 1000.0, Lambertian((0.5, 0.5, 0.5))))
    >>> len(world)
    1
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import IntEnum
from typing import Union

from pathtracer.geometry.aabb import Aabb, surrounding_box
from pathtracer.geometry.bvh import BvhNode
from pathtracer.geometry.sphere import Sphere


class GeometryKind(IntEnum):
    """Geometry tags packed into the low bits of a scene handle."""

    SPHERE = 0
    LIST = 1
    BVH_NODE = 2


class HittableList:
    """An ordered, append-only collection of hittables."""

    def __init__(self, objects: Iterable[Hittable] | None = None) -> None:
        self._objects: list[Hittable] = []
        if objects is not None:
            for obj in objects:
                self.add(obj)

    def add(self, obj: Hittable) -> None:
        """Append a hittable.

        Raises:
            TypeError: If obj is not a sphere, list or BVH node.
        """
        geometry_kind(obj)
        self._objects.append(obj)

    @property
    def objects(self) -> list[Hittable]:
        """The members, in insertion order."""
        return list(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self._objects)

    def bounding_box(self, time_frame: tuple[float, float]) -> Aabb | None:
        """Union of the members' boxes.

        Returns:
            None if the list is empty or any member has no box.
        """
        if not self._objects:
            return None

        output_box = None
        for obj in self._objects:
            box = obj.bounding_box(time_frame)
            if box is None:
                return None
            output_box = box if output_box is None else surrounding_box(output_box, box)
        return output_box


Hittable = Union[Sphere, HittableList, BvhNode]


def geometry_kind(obj: Hittable) -> GeometryKind:
    """Return the tag for a hittable.

    Raises:
        TypeError: If the object is not a supported geometry.
    """
    if isinstance(obj, Sphere):
        return GeometryKind.SPHERE
    if isinstance(obj, HittableList):
        return GeometryKind.LIST
    if isinstance(obj, BvhNode):
        return GeometryKind.BVH_NODE
    raise TypeError(f"Unsupported geometry type: {type(obj).__name__}")
