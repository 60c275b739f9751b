"""Unit tests for hittable lists and geometry kinds."""

import pytest


def _sphere(center, radius, velocity=(0.0, 0.0, 0.0)):
    from pathtracer.geometry.sphere import Sphere
    from pathtracer.materials.lambertian import Lambertian

    return Sphere(center, radius, Lambertian((0.5, 0.5, 0.5)), velocity=velocity)


class TestHittableList:
    """Tests for HittableList."""

    def test_add_and_iterate_in_order(self):
        """Test members keep insertion order."""
        from pathtracer.geometry.hittable import HittableList

        a = _sphere((0.0, 0.0, 0.0), 1.0)
        b = _sphere((3.0, 0.0, 0.0), 1.0)
        world = HittableList()
        world.add(a)
        world.add(b)
        assert len(world) == 2
        assert list(world) == [a, b]

    def test_objects_is_a_copy(self):
        """Test mutating the returned list leaves the HittableList unchanged."""
        from pathtracer.geometry.hittable import HittableList

        world = HittableList([_sphere((0.0, 0.0, 0.0), 1.0)])
        objects = world.objects
        objects.clear()
        assert len(world) == 1

    def test_rejects_unknown_geometry(self):
        """Test adding something that is not a hittable raises TypeError."""
        from pathtracer.geometry.hittable import HittableList

        with pytest.raises(TypeError):
            HittableList().add("not a sphere")

    def test_bounding_box_of_two_spheres(self):
        """Test the list box is the union of the member boxes."""
        from pathtracer.geometry.hittable import HittableList

        world = HittableList([_sphere((0.0, 0.0, 0.0), 1.0), _sphere((0.0, 1.0, 0.0), 1.5)])
        box = world.bounding_box((0.0, 1.0))
        assert box.minimum == (-1.5, -1.0, -1.5)
        assert box.maximum == (1.5, 2.5, 1.5)

    def test_empty_list_has_no_box(self):
        """Test an empty list reports no bounding box."""
        from pathtracer.geometry.hittable import HittableList

        assert HittableList().bounding_box((0.0, 1.0)) is None

    def test_member_without_box_gives_no_box(self):
        """Test a list containing an empty list reports no box."""
        from pathtracer.geometry.hittable import HittableList

        world = HittableList([_sphere((0.0, 0.0, 0.0), 1.0), HittableList()])
        assert world.bounding_box((0.0, 1.0)) is None


class TestGeometryKind:
    """Tests for geometry tags."""

    def test_kinds(self):
        """Test each hittable maps to its tag."""
        from pathtracer.geometry.bvh import build_bvh
        from pathtracer.geometry.hittable import GeometryKind, HittableList, geometry_kind

        sphere = _sphere((0.0, 0.0, 0.0), 1.0)
        assert geometry_kind(sphere) == GeometryKind.SPHERE
        assert geometry_kind(HittableList()) == GeometryKind.LIST
        assert geometry_kind(build_bvh([sphere], axis_strategy="longest")) == GeometryKind.BVH_NODE

    def test_unknown_kind(self):
        """Test unsupported objects raise TypeError."""
        from pathtracer.geometry.hittable import geometry_kind

        with pytest.raises(TypeError):
            geometry_kind(42)
