"""Material kinds and the material union.

Every surface carries one of a closed set of material values. On upload the
scene manager maps each distinct value to a unified material id (see
:mod:`pathtracer.scene.manager`); kernels dispatch on the stored
``MaterialKind`` tag.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal


class MaterialKind(IntEnum):
    """Material type tags stored in the material type field."""

    NONE = 0
    LAMBERTIAN = 1
    METAL = 2
    DIELECTRIC = 3


@dataclass(frozen=True)
class NoMaterial:
    """A placeholder material that absorbs every ray."""


Material = Union[Lambertian, Metal, Dielectric, NoMaterial]


def material_kind(material: Material) -> MaterialKind:
    """Return the type tag for a material value.

    Raises:
        TypeError: If the value is not one of the supported materials.
    """
    if isinstance(material, Lambertian):
        return MaterialKind.LAMBERTIAN
    if isinstance(material, Metal):
        return MaterialKind.METAL
    if isinstance(material, Dielectric):
        return MaterialKind.DIELECTRIC
    if isinstance(material, NoMaterial):
        return MaterialKind.NONE
    raise TypeError(f"Unsupported material type: {type(material).__name__}")
