"""Scene module for scene upload and ray-scene queries.

Components:
    intersection: Scene arena in Taichi fields and closest-hit traversal
    manager: Scene manager owning objects, materials and the upload
    presets: Ready-made scenes with their camera

Scene data is organized for GPU access:
    - Structure-of-Arrays layout for spheres and BVH nodes
    - Lists stored as ranges of a shared member array
    - Objects referenced by tagged integer handles
"""

from .intersection import (
    MAX_BVH_NODES,
    MAX_LISTS,
    MAX_SPHERES,
    STACK_SIZE,
    add_bvh_node,
    add_list,
    add_sphere,
    clear_scene,
    get_arena_generation,
    get_bvh_node_count,
    get_list_count,
    get_sphere_count,
    intersect_scene,
    make_handle,
    split_handle,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    SceneManager,
    get_material_type,
    get_material_type_index,
    stack_demand,
)
from .presets import create_camera, create_four_spheres_scene, create_random_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "add_list",
    "add_bvh_node",
    "clear_scene",
    "get_arena_generation",
    "get_sphere_count",
    "get_list_count",
    "get_bvh_node_count",
    "intersect_scene",
    "make_handle",
    "split_handle",
    "MAX_SPHERES",
    "MAX_LISTS",
    "MAX_BVH_NODES",
    "STACK_SIZE",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "stack_demand",
    # Presets
    "create_camera",
    "create_random_scene",
    "create_four_spheres_scene",
]
