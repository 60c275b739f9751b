"""Scene arena and ray-scene intersection.

The host-side geometry tree (spheres, lists and BVH nodes) is flattened into
Taichi fields, one Structure-of-Arrays block per geometry kind. Every
reference between entries is a packed handle::

    handle = (index << 2) | kind

where kind is a :class:`~pathtracer.geometry.hittable.GeometryKind` value.
A primitive shared by several holders is stored once and each holder stores
the same handle.

Taichi functions cannot recurse, so :func:`intersect_scene` walks the tree
from the root with a fixed-size stack of handles. The closest hit distance
shrinks across the whole walk, so the result is the nearest hit in
(t_min, t_max) no matter the visiting order.

Example:
    >>> from pathtracer.scene.intersection import (
    ...     GeometryKind, add_list, add_sphere, clear_scene, make_handle, set_scene_root
    ... )
    >>> clear_scene()
    >>> s = add_sphere((0, 0, -1), (0, 0, 0), 0.5, material_id=0)
    >>> world = add_list([make_handle(s, GeometryKind.SPHERE)])
    >>> set_scene_root(make_handle(world, GeometryKind.LIST))
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.geometry.aabb import hit_aabb
from pathtracer.geometry.hittable import GeometryKind
from pathtracer.geometry.sphere import HitRecord, SphereData, hit_sphere, make_miss_record

# Maximum number of entries per arena block
MAX_SPHERES = 2048
MAX_LISTS = 256
MAX_LIST_MEMBERS = 4096
MAX_BVH_NODES = 4096

# Depth of the traversal stack in intersect_scene
STACK_SIZE = 32

# Low bits of a handle hold the geometry kind
HANDLE_KIND_BITS = 2
HANDLE_KIND_MASK = (1 << HANDLE_KIND_BITS) - 1

_SPHERE = int(GeometryKind.SPHERE)
_LIST = int(GeometryKind.LIST)
_BVH_NODE = int(GeometryKind.BVH_NODE)

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_velocities = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# List storage: each list is a contiguous range of member handles
list_starts = ti.field(dtype=ti.i32, shape=MAX_LISTS)
list_counts = ti.field(dtype=ti.i32, shape=MAX_LISTS)
list_members = ti.field(dtype=ti.i32, shape=MAX_LIST_MEMBERS)
num_lists = ti.field(dtype=ti.i32, shape=())
num_list_members = ti.field(dtype=ti.i32, shape=())

# BVH node storage
bvh_lefts = ti.field(dtype=ti.i32, shape=MAX_BVH_NODES)
bvh_rights = ti.field(dtype=ti.i32, shape=MAX_BVH_NODES)
bvh_box_mins = ti.Vector.field(3, dtype=ti.f64, shape=MAX_BVH_NODES)
bvh_box_maxs = ti.Vector.field(3, dtype=ti.f64, shape=MAX_BVH_NODES)
num_bvh_nodes = ti.field(dtype=ti.i32, shape=())

# Root of the traversal
scene_root = ti.field(dtype=ti.i32, shape=())
scene_has_root = ti.field(dtype=ti.i32, shape=())

# Bumped by every clear_scene(); an upload is current while the count is unchanged
_arena_generation = 0


def make_handle(index: int, kind: GeometryKind) -> int:
    """Pack an arena index and a geometry kind into a handle."""
    return (index << HANDLE_KIND_BITS) | int(kind)


def split_handle(handle: int) -> tuple[int, GeometryKind]:
    """Unpack a handle into (index, kind)."""
    return handle >> HANDLE_KIND_BITS, GeometryKind(handle & HANDLE_KIND_MASK)


def clear_scene() -> None:
    """Clear all geometry and the root from the arena.

    Resets the counts to zero. The actual field data is not cleared but will
    be overwritten when new entries are added.
    """
    global _arena_generation
    _arena_generation += 1

    num_spheres[None] = 0
    num_lists[None] = 0
    num_list_members[None] = 0
    num_bvh_nodes[None] = 0
    scene_root[None] = 0
    scene_has_root[None] = 0


def get_arena_generation() -> int:
    """Number of times the arena has been cleared."""
    return _arena_generation


def add_sphere(center, velocity, radius: float, material_id: int) -> int:
    """Add a sphere to the arena.

    Args:
        center: The center of the sphere at time 0.
        velocity: Displacement of the center per unit of time.
        radius: The radius of the sphere.
        material_id: Unified material id of the surface.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_velocities[idx] = velocity
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_list(member_handles: list[int]) -> int:
    """Add a list whose members are the given handles, in order.

    Returns:
        The index of the added list.

    Raises:
        RuntimeError: If the maximum number of lists or list members is exceeded.
    """
    idx = num_lists[None]
    if idx >= MAX_LISTS:
        raise RuntimeError(f"Maximum number of lists ({MAX_LISTS}) exceeded")

    start = num_list_members[None]
    if start + len(member_handles) > MAX_LIST_MEMBERS:
        raise RuntimeError(f"Maximum number of list members ({MAX_LIST_MEMBERS}) exceeded")

    for offset, handle in enumerate(member_handles):
        list_members[start + offset] = handle
    list_starts[idx] = start
    list_counts[idx] = len(member_handles)
    num_list_members[None] = start + len(member_handles)
    num_lists[None] = idx + 1
    return idx


def add_bvh_node(left_handle: int, right_handle: int, box_min, box_max) -> int:
    """Add a BVH node.

    Args:
        left_handle: Handle of the first child.
        right_handle: Handle of the second child. Equal to left_handle for
            single-primitive subtrees.
        box_min: Minimum corner of the node's box.
        box_max: Maximum corner of the node's box.

    Returns:
        The index of the added node.

    Raises:
        RuntimeError: If the maximum number of BVH nodes is exceeded.
    """
    idx = num_bvh_nodes[None]
    if idx >= MAX_BVH_NODES:
        raise RuntimeError(f"Maximum number of BVH nodes ({MAX_BVH_NODES}) exceeded")
    bvh_lefts[idx] = left_handle
    bvh_rights[idx] = right_handle
    bvh_box_mins[idx] = box_min
    bvh_box_maxs[idx] = box_max
    num_bvh_nodes[None] = idx + 1
    return idx


def set_scene_root(handle: int) -> None:
    """Make the entry behind handle the root of the traversal."""
    scene_root[None] = handle
    scene_has_root[None] = 1


def has_scene_root() -> bool:
    """True once a root has been set since the last clear_scene()."""
    return bool(scene_has_root[None])


def get_sphere_count() -> int:
    """Get the number of spheres in the arena."""
    return int(num_spheres[None])


def get_list_count() -> int:
    """Get the number of lists in the arena."""
    return int(num_lists[None])


def get_bvh_node_count() -> int:
    """Get the number of BVH nodes in the arena."""
    return int(num_bvh_nodes[None])


@ti.func
def _load_sphere(idx: ti.i32) -> SphereData:
    return SphereData(
        center0=sphere_centers[idx],
        velocity=sphere_velocities[idx],
        radius=sphere_radii[idx],
        material_id=sphere_material_ids[idx],
    )


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f64, t_max: ti.f64) -> HitRecord:
    """Find the nearest hit of a ray against the scene root.

    Spheres that are list members are tested as the list is visited; other
    list members and BVH children are pushed on the stack. A BVH node whose
    box the ray misses (within the current closest distance) is skipped
    along with its whole subtree.

    Args:
        ray: The ray to test.
        t_min: Lower bound (exclusive) of accepted t values.
        t_max: Upper bound (exclusive) of accepted t values.

    Returns:
        The nearest HitRecord, with hit == 0 if nothing was hit.
    """
    rec = make_miss_record()
    closest = t_max

    stack = ti.Vector.zero(ti.i32, STACK_SIZE)
    sp = 0
    if scene_has_root[None] == 1:
        stack[0] = scene_root[None]
        sp = 1

    while sp > 0:
        sp -= 1
        handle = stack[sp]
        kind = handle & HANDLE_KIND_MASK
        idx = handle >> HANDLE_KIND_BITS

        if kind == _SPHERE:
            temp = hit_sphere(ray, _load_sphere(idx), t_min, closest)
            if temp.hit == 1:
                rec = temp
                closest = temp.t

        elif kind == _LIST:
            start = list_starts[idx]
            count = list_counts[idx]
            for k in range(count):
                member = list_members[start + k]
                if (member & HANDLE_KIND_MASK) == _SPHERE:
                    temp = hit_sphere(ray, _load_sphere(member >> HANDLE_KIND_BITS), t_min, closest)
                    if temp.hit == 1:
                        rec = temp
                        closest = temp.t

            # Push the remaining members in reverse so they pop in list order
            back = count - 1
            while back >= 0:
                member = list_members[start + back]
                if (member & HANDLE_KIND_MASK) != _SPHERE:
                    stack[sp] = member
                    sp += 1
                back -= 1

        elif kind == _BVH_NODE:
            if hit_aabb(ray, bvh_box_mins[idx], bvh_box_maxs[idx], t_min, closest):
                left = bvh_lefts[idx]
                right = bvh_rights[idx]
                if right != left:
                    stack[sp] = right
                    sp += 1
                stack[sp] = left
                sp += 1

    return rec
