"""Material base class and the kernel-side material table.

Materials are described on the host by small immutable dataclasses (see the
lambertian, metal and dielectric modules). Before rendering, every distinct
material instance used by a scene is written once into a structure-of-arrays
table of Taichi fields; primitives refer to it by material ID. The table is a
tagged variant: ``material_types`` selects the scattering policy and the
remaining columns hold that policy's parameters.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.materials import Lambertian, Metal
    >>> from pathtracer.materials.registry import load_materials
    >>> load_materials([Lambertian((0.8, 0.3, 0.3)), Metal((0.8, 0.8, 0.8), 0.1)])
    2
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import IntEnum
from typing import Any, ClassVar

import numpy as np
import taichi as ti

from pathtracer.core.ray import vec3

Color = tuple[float, float, float]


class MaterialType(IntEnum):
    """Tag selecting the scattering policy of a material."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


class Material(ABC):
    """Host-side description of a surface's scattering policy.

    Subclasses are frozen dataclasses. They never hold kernel state, so one
    instance can be shared by any number of primitives.
    """

    material_type: ClassVar[MaterialType]

    @abstractmethod
    def table_row(self) -> tuple[Color, float, float]:
        """Return (albedo, fuzz, ior) for the kernel-side material table.

        Columns the variant does not use are filled with neutral values.
        """

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Export the material to a dictionary (for JSON serialization)."""


def validate_color(name: str, color: Sequence[float]) -> Color:
    """Check that a reflectance color has three components in [0, 1].

    Returns:
        The color as a tuple of floats.

    Raises:
        ValueError: If the color has the wrong length or a component is
            outside [0, 1].
    """
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_MATERIALS = 1024

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_iors = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Reset the material count to zero.

    Existing field data is left in place and overwritten by the next load.
    """
    num_materials[None] = 0


def load_materials(materials: Sequence[Material]) -> int:
    """Write materials into the kernel-side table, replacing its contents.

    The material at position k in the sequence gets material ID k.

    Args:
        materials: The distinct materials of a scene, in ID order.

    Returns:
        The number of materials loaded.

    Raises:
        RuntimeError: If more than MAX_MATERIALS materials are given.
    """
    count = len(materials)
    if count > MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    types = np.zeros(MAX_MATERIALS, dtype=np.int32)
    albedos = np.zeros((MAX_MATERIALS, 3), dtype=np.float64)
    fuzz = np.zeros(MAX_MATERIALS, dtype=np.float64)
    iors = np.ones(MAX_MATERIALS, dtype=np.float64)

    for idx, material in enumerate(materials):
        albedo, material_fuzz_value, ior = material.table_row()
        types[idx] = int(material.material_type)
        albedos[idx] = albedo
        fuzz[idx] = material_fuzz_value
        iors[idx] = ior

    material_types.from_numpy(types)
    material_albedos.from_numpy(albedos)
    material_fuzz.from_numpy(fuzz)
    material_iors.from_numpy(iors)
    num_materials[None] = count
    return count


def get_material_count() -> int:
    """Get the number of materials currently in the table."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the MaterialType tag for a material ID, or -1 if out of range."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_albedo(material_id: ti.i32) -> vec3:
    return material_albedos[material_id]


@ti.func
def get_material_fuzz(material_id: ti.i32) -> ti.f64:
    return material_fuzz[material_id]


@ti.func
def get_material_ior(material_id: ti.i32) -> ti.f64:
    return material_iors[material_id]
