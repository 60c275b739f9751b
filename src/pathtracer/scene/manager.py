"""Unified scene manager for coordinating geometry and materials.

This module provides a high-level scene management API. Scenes are
assembled on the host from Sphere, HittableList and BvhNode objects carrying
material values; :meth:`SceneManager.commit` then flattens the tree into the
Taichi arena of :mod:`pathtracer.scene.intersection` and registers every
distinct material in its type-specific registry.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_kind, type_local_index)
- The world list and the optional BVH built over it

Example:
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere((0, -1000, 0), 1000, Lambertian((0.5, 0.5, 0.5)))
    >>> scene.add_sphere((0, 1, 0), 1.0, Dielectric(1.5))
    >>> scene.build_bvh(seed=7)
    >>> scene.commit()
    >>> # Use get_material_type(rec.material_id) in the integrator for dispatch
"""

import logging
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.geometry.bvh import BvhNode
from pathtracer.geometry.bvh import build_bvh as _build_bvh
from pathtracer.geometry.hittable import GeometryKind, Hittable, HittableList, geometry_kind
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.dielectric import add_dielectric_material, clear_dielectric_materials
from pathtracer.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from pathtracer.materials.material import Material, MaterialKind, material_kind
from pathtracer.materials.metal import add_metal_material, clear_metal_materials
from pathtracer.scene.intersection import (
    STACK_SIZE,
    add_bvh_node,
    add_list,
    add_sphere,
    clear_scene,
    get_arena_generation,
    get_bvh_node_count,
    get_list_count,
    get_sphere_count,
    make_handle,
    set_scene_root,
)

logger = logging.getLogger(__name__)

# Maximum number of materials across all types
MAX_MATERIALS = 4096

# material_types[i] stores the MaterialKind for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material kind for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material kind as an integer (see MaterialKind).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., lambertian_albedos[type_index]).

    Returns:
        The index into the type-specific material array.
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_kind: The kind of material.
        type_index: The index within the type-specific material array.
        material: The material value.
    """

    material_id: int
    material_kind: MaterialKind
    type_index: int
    material: Material


def stack_demand(root: Hittable) -> int:
    """Worst-case traversal stack depth needed to walk a geometry tree.

    Mirrors the push order of intersect_scene: spheres inside lists are
    tested in place, other list members are pushed in reverse order, and a
    BVH node pushes its right child below its left child (once if the two
    are the same object).

    Args:
        root: The root of the tree.

    Returns:
        The maximum number of stack slots in use at any time.
    """
    memo: dict[int, int] = {}

    def need(obj: Hittable) -> int:
        key = id(obj)
        if key in memo:
            return memo[key]

        kind = geometry_kind(obj)
        if kind == GeometryKind.SPHERE:
            result = 1
        elif kind == GeometryKind.LIST:
            pushed = [m for m in obj if not isinstance(m, Sphere)]
            result = 1
            for k, member in enumerate(pushed):
                result = max(result, len(pushed) - 1 - k + need(member))
        elif obj.left is obj.right:
            result = need(obj.left)
        else:
            result = max(1 + need(obj.left), need(obj.right))

        memo[key] = result
        return result

    return need(root)


class SceneManager:
    """Unified scene manager coordinating geometry and materials.

    Objects added through :meth:`add_sphere` or :meth:`add` go into the world
    list. :meth:`build_bvh` organizes the world into a hierarchy that becomes
    the render root; otherwise the world list itself is the root. Nothing is
    written to Taichi fields until :meth:`commit`.

    Only one scene can be committed at a time: committing clears whatever a
    previous commit uploaded.

    Attributes:
        world: The flat list of top-level objects.
        materials: MaterialInfo for every material registered by the last commit.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.world = HittableList()
        self.materials: list[MaterialInfo] = []
        self._bvh: BvhNode | None = None
        self._material_ids: dict[Material, int] = {}
        self._committed = False
        self._generation = -1

    @property
    def root(self) -> Hittable:
        """The object traversed at render time."""
        return self._bvh if self._bvh is not None else self.world

    @property
    def is_committed(self) -> bool:
        """True if the arena holds this scene as it is now.

        Turns False when the scene changes after commit(), and when another
        commit or clear_scene() replaces the arena contents.
        """
        return self._committed and self._generation == get_arena_generation()

    def clear(self) -> None:
        """Clear the entire scene (geometry, materials and Taichi fields)."""
        self.world = HittableList()
        self._bvh = None
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self._material_ids.clear()
        self._committed = False

    # =========================================================================
    # Geometry
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
        velocity: tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> Sphere:
        """Add a sphere to the world.

        Raises:
            ValueError: If the radius is not positive.
            TypeError: If material is not a supported material.
        """
        material_kind(material)
        sphere = Sphere(center=center, radius=radius, material=material, velocity=velocity)
        self.add(sphere)
        return sphere

    def add(self, obj: Hittable) -> None:
        """Add any hittable to the world."""
        self.world.add(obj)
        self._bvh = None
        self._committed = False

    def build_bvh(
        self,
        time_frame: tuple[float, float] = (0.0, 1.0),
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        axis_strategy: str = "random",
    ) -> BvhNode:
        """Organize the world into a BVH and make it the render root.

        Args:
            time_frame: The interval the node boxes must cover. Use the
                camera's shutter interval when the scene has moving spheres.
            rng: Generator for the random split axes.
            seed: Seed for a fresh generator when rng is omitted.
            axis_strategy: ``"random"`` or ``"longest"``.

        Returns:
            The root node.
        """
        if rng is None:
            rng = np.random.default_rng(seed)
        self._bvh = _build_bvh(
            self.world.objects, time_frame=time_frame, rng=rng, axis_strategy=axis_strategy
        )
        self._committed = False
        logger.debug("Built BVH over %d objects (%s axis)", len(self.world), axis_strategy)
        return self._bvh

    # =========================================================================
    # Materials
    # =========================================================================

    def register_material(self, material: Material) -> int:
        """Return the unified id for a material, registering it if new.

        Equal material values share one id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            TypeError: If material is not a supported material.
        """
        if material in self._material_ids:
            return self._material_ids[material]

        kind = material_kind(material)
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        if kind == MaterialKind.LAMBERTIAN:
            type_index = add_lambertian_material(material)
        elif kind == MaterialKind.METAL:
            type_index = add_metal_material(material)
        elif kind == MaterialKind.DIELECTRIC:
            type_index = add_dielectric_material(material)
        else:
            type_index = 0

        material_types[material_id] = int(kind)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_kind=kind,
                type_index=type_index,
                material=material,
            )
        )
        self._material_ids[material] = material_id
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of registered materials."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Upload
    # =========================================================================

    def commit(self) -> int:
        """Flatten the scene into the Taichi arena.

        Every object reachable from the root is stored once, however many
        holders share it.

        Returns:
            The handle of the root.

        Raises:
            ValueError: If the tree needs a deeper traversal stack than
                intersect_scene provides, or contains a cycle.
            RuntimeError: If an arena or registry capacity is exceeded.
        """
        root = self.root
        demand = stack_demand_checked(root)

        self._clear_all()
        handles: dict[int, int] = {}
        root_handle = self._upload(root, handles)
        set_scene_root(root_handle)
        self._committed = True
        self._generation = get_arena_generation()

        logger.info(
            "Uploaded scene: %d spheres, %d lists, %d BVH nodes, %d materials "
            "(traversal stack %d/%d)",
            get_sphere_count(),
            get_list_count(),
            get_bvh_node_count(),
            self.get_material_count(),
            demand,
            STACK_SIZE,
        )
        return root_handle

    def _upload(self, obj: Hittable, handles: dict[int, int]) -> int:
        key = id(obj)
        if key in handles:
            return handles[key]

        kind = geometry_kind(obj)
        if kind == GeometryKind.SPHERE:
            material_id = self.register_material(obj.material)
            index = add_sphere(obj.center, obj.velocity, obj.radius, material_id)
        elif kind == GeometryKind.LIST:
            members = [self._upload(member, handles) for member in obj]
            index = add_list(members)
        else:
            left = self._upload(obj.left, handles)
            right = left if obj.right is obj.left else self._upload(obj.right, handles)
            index = add_bvh_node(left, right, obj.box.minimum, obj.box.maximum)

        handle = make_handle(index, kind)
        handles[key] = handle
        return handle


def stack_demand_checked(root: Hittable) -> int:
    """Return stack_demand(root), raising if it exceeds the traversal stack.

    Raises:
        ValueError: If the demand is larger than STACK_SIZE or the tree
            contains a cycle.
    """
    try:
        demand = stack_demand(root)
    except RecursionError as err:
        raise ValueError("Scene graph is cyclic or too deep to upload") from err
    if demand > STACK_SIZE:
        raise ValueError(
            f"Scene needs a traversal stack of {demand} entries, "
            f"more than the supported {STACK_SIZE}"
        )
    return demand
