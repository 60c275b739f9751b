"""Import tests for the modules that declare Taichi functions and structs.

Taichi reads parameter annotations when a ``@ti.func`` or ``@ti.dataclass``
is declared, so these modules must keep real (not stringified) annotations.
"""

import importlib

import pytest

KERNEL_MODULES = [
    "pathtracer.core.rng",
    "pathtracer.core.ray",
    "pathtracer.core.color",
    "pathtracer.core.integrator",
    "pathtracer.geometry.aabb",
    "pathtracer.geometry.sphere",
    "pathtracer.materials.lambertian",
    "pathtracer.materials.metal",
    "pathtracer.materials.dielectric",
    "pathtracer.scene.intersection",
    "pathtracer.scene.manager",
    "pathtracer.camera.thin_lens",
]


class TestKernelModules:
    """Tests for modules holding Taichi declarations."""

    @pytest.mark.parametrize("name", KERNEL_MODULES)
    def test_imports(self, name):
        """Test the module imports once Taichi is initialized."""
        module = importlib.import_module(name)
        assert module.__name__ == name

    @pytest.mark.parametrize("name", KERNEL_MODULES)
    def test_annotations_not_postponed(self, name):
        """Test the module does not postpone annotation evaluation."""
        module = importlib.import_module(name)
        # ``from __future__ import annotations`` binds this name
        assert not hasattr(module, "annotations")

    def test_subpackages_import(self):
        """Test every subpackage imports with its re-exports."""
        from pathtracer.geometry import Aabb, BvhNode, HittableList, Sphere
        from pathtracer.scene import SceneManager, intersect_scene

        assert all(
            obj is not None
            for obj in (Aabb, BvhNode, HittableList, Sphere, SceneManager, intersect_scene)
        )
