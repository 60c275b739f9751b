"""Bounding volume hierarchy over host-side geometry.

The hierarchy is built once on the host, before the scene is uploaded. Each
node stores two children and the union of their boxes. A subtree holding a
single primitive aliases that primitive as both children, so every node has
exactly two (possibly identical) children.

The split axis is drawn uniformly at random by default, which keeps the
build simple at the cost of tree quality. The ``"longest"`` strategy splits
along the axis with the largest extent instead and needs no generator.

Example:
    >>> import numpy as np
    >>> from pathtracer.geometry.bvh import build_bvh
    >>> root = build_bvh(world.objects, time_frame=(0.0, 1.0),
    ...                  rng=np.random.default_rng(7))
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from pathtracer.geometry.aabb import Aabb, surrounding_box

if TYPE_CHECKING:
    from pathtracer.geometry.hittable import Hittable

AXIS_STRATEGIES = ("random", "longest")


@dataclass(eq=False)
class BvhNode:
    """An interior node of the hierarchy.

    Attributes:
        left: The first child (a primitive, list or node).
        right: The second child. Same object as ``left`` for single-primitive
            subtrees.
        box: Union of the children's boxes over the build time interval.
    """

    left: Hittable
    right: Hittable
    box: Aabb

    def bounding_box(self, time_frame: tuple[float, float]) -> Aabb:
        """Return the box computed at build time."""
        return self.box


def _box_of(obj: Hittable, time_frame: tuple[float, float]) -> Aabb:
    box = obj.bounding_box(time_frame)
    if box is None:
        raise ValueError(f"No bounding box for {type(obj).__name__} in BVH construction")
    return box


def _choose_axis(
    objects: list,
    time_frame: tuple[float, float],
    rng: np.random.Generator | None,
    axis_strategy: str,
) -> int:
    if axis_strategy == "random":
        return int(rng.integers(0, 3))

    extent = _box_of(objects[0], time_frame)
    for obj in objects[1:]:
        extent = surrounding_box(extent, _box_of(obj, time_frame))
    return max(range(3), key=extent.extent)


def _build(
    objects: list,
    time_frame: tuple[float, float],
    rng: np.random.Generator | None,
    axis_strategy: str,
) -> BvhNode:
    axis = _choose_axis(objects, time_frame, rng, axis_strategy)

    if len(objects) == 1:
        only = objects[0]
        return BvhNode(left=only, right=only, box=_box_of(only, time_frame))

    objects.sort(key=lambda obj: _box_of(obj, time_frame).minimum[axis])
    mid = len(objects) // 2

    left = _build(objects[:mid], time_frame, rng, axis_strategy)
    right = _build(objects[mid:], time_frame, rng, axis_strategy)
    return BvhNode(left=left, right=right, box=surrounding_box(left.box, right.box))


def build_bvh(
    objects: Iterable[Hittable],
    time_frame: tuple[float, float] = (0.0, 1.0),
    rng: np.random.Generator | None = None,
    axis_strategy: str = "random",
) -> BvhNode:
    """Build a BVH over a collection of hittables.

    The input is copied before sorting, so the caller's sequence keeps its
    order. Primitives are shared, not copied.

    Args:
        objects: The hittables to organize. Must be non-empty.
        time_frame: The (start, end) interval the boxes must cover. The
            default matches the default camera shutter.
        rng: Generator for the random axis choice. A fresh unseeded
            generator is used if omitted.
        axis_strategy: ``"random"`` or ``"longest"``.

    Returns:
        The root node.

    Raises:
        ValueError: If objects is empty, a member has no bounding box, or
            the strategy is unknown.
    """
    if axis_strategy not in AXIS_STRATEGIES:
        raise ValueError(
            f"Unknown axis strategy {axis_strategy!r}, expected one of {AXIS_STRATEGIES}"
        )

    working = list(objects)
    if not working:
        raise ValueError("Cannot build a BVH from an empty list")

    if rng is None and axis_strategy == "random":
        rng = np.random.default_rng()

    return _build(working, time_frame, rng, axis_strategy)
