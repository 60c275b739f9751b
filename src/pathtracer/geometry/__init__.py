"""Geometry module for spheres and spatial acceleration.

Components:
    aabb: Axis-aligned bounding boxes and the slab test
    sphere: Static and moving spheres with ray-sphere intersection
    hittable: Object lists and the closed set of scene objects
    bvh: Bounding volume hierarchy construction

Objects are built on the host as plain Python values and uploaded to
Taichi fields by :class:`pathtracer.scene.manager.SceneManager`.
"""

from .aabb import Aabb, hit_aabb, surrounding_box
from .bvh import AXIS_STRATEGIES, BvhNode, build_bvh
from .hittable import GeometryKind, Hittable, HittableList, geometry_kind
from .sphere import HitRecord, Sphere, SphereData, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Aabb",
    "surrounding_box",
    "hit_aabb",
    "Sphere",
    "SphereData",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "GeometryKind",
    "Hittable",
    "HittableList",
    "geometry_kind",
    "BvhNode",
    "build_bvh",
    "AXIS_STRATEGIES",
]
