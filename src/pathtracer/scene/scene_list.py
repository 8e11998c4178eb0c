"""Host-side scene description: an ordered list of spheres with materials.

SceneList is the Python view of a scene. It keeps Sphere objects in insertion
order and, on upload, writes them into the kernel-side sphere fields and the
material table. Materials are de-duplicated by identity, so a material
instance shared by many spheres occupies a single table row.

Example:
    >>> from pathtracer.config import init_taichi
    >>> init_taichi()
    >>> from pathtracer.materials import Lambertian, Metal
    >>> from pathtracer.scene.scene_list import SceneList
    >>> scene = SceneList()
    >>> ground = Lambertian((0.8, 0.8, 0.0))
    >>> scene.add_sphere((0, -100.5, -1), 100, ground)
    >>> scene.add_sphere((1, 0, -1), 0.5, Metal((0.8, 0.6, 0.2), fuzz=0.3))
    >>> hit = scene.intersect((0, 0, 0), (1, 0, -1))
"""

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.materials.registry import Material, load_materials
from pathtracer.scene.intersection import load_spheres, query_nearest_hit

logger = logging.getLogger(__name__)

Point = tuple[float, float, float]

# Ray parameter below which hits are ignored, to avoid self-intersection
DEFAULT_T_MIN = 0.001


@dataclass(frozen=True)
class Sphere:
    """A sphere with a surface material.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        material: The scattering policy of the surface. May be shared with
            other spheres.
    """

    center: Point
    radius: float
    material: Material

    def __post_init__(self) -> None:
        if len(self.center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {len(self.center)}")
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius = {self.radius} must be positive")
        if not isinstance(self.material, Material):
            raise ValueError(f"Sphere material must be a Material, got {type(self.material).__name__}")
        object.__setattr__(
            self, "center", (float(self.center[0]), float(self.center[1]), float(self.center[2]))
        )
        object.__setattr__(self, "radius", float(self.radius))


@dataclass(frozen=True)
class Hit:
    """Result of a host-side ray query.

    Attributes:
        t: Ray parameter of the nearest intersection.
        point: The intersection point.
        normal: Unit normal facing against the incoming ray.
        front_face: True if the ray struck the outside of the sphere.
        material: Material of the sphere that was hit.
    """

    t: float
    point: Point
    normal: Point
    front_face: bool
    material: Material


def material_from_dict(data: dict[str, Any]) -> Material:
    """Build a material from its to_dict() form.

    Raises:
        ValueError: If the material type is unknown.
    """
    kind = data.get("type")
    if kind == "lambertian":
        return Lambertian(tuple(data["albedo"]))
    if kind == "metal":
        return Metal(tuple(data["albedo"]), data.get("fuzz", 0.0))
    if kind == "dielectric":
        return Dielectric(data.get("refractive_index", 1.5))
    raise ValueError(f"Unknown material type: {kind!r}")


class SceneList:
    """Ordered collection of spheres forming a scene.

    Attributes:
        spheres: The spheres in insertion order.
    """

    def __init__(self, spheres: Sequence[Sphere] = ()) -> None:
        self.spheres: list[Sphere] = []
        for sphere in spheres:
            self.add(sphere)

    def add(self, sphere: Sphere) -> None:
        """Append a sphere to the scene."""
        if not isinstance(sphere, Sphere):
            raise ValueError(f"Expected a Sphere, got {type(sphere).__name__}")
        self.spheres.append(sphere)

    def add_sphere(self, center: Sequence[float], radius: float, material: Material) -> Sphere:
        """Create a sphere and append it to the scene.

        Returns:
            The new Sphere.
        """
        sphere = Sphere(tuple(center), radius, material)
        self.add(sphere)
        return sphere

    def clear(self) -> None:
        self.spheres.clear()

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[Sphere]:
        return iter(self.spheres)

    def __getitem__(self, index: int) -> Sphere:
        return self.spheres[index]

    def materials(self) -> list[Material]:
        """Distinct materials in order of first use.

        The position of a material in this list is its material ID after
        upload().
        """
        seen: dict[int, Material] = {}
        for sphere in self.spheres:
            seen.setdefault(id(sphere.material), sphere.material)
        return list(seen.values())

    def upload(self) -> None:
        """Write spheres and materials into the kernel-side fields.

        Replaces whatever scene was uploaded before.

        Raises:
            RuntimeError: If the scene exceeds the sphere or material capacity.
        """
        materials = self.materials()
        material_ids = {id(material): idx for idx, material in enumerate(materials)}

        load_materials(materials)
        load_spheres(
            [sphere.center for sphere in self.spheres],
            [sphere.radius for sphere in self.spheres],
            [material_ids[id(sphere.material)] for sphere in self.spheres],
        )
        logger.debug("Uploaded %d spheres with %d materials", len(self.spheres), len(materials))

    def intersect(
        self,
        origin: Sequence[float],
        direction: Sequence[float],
        t_min: float = DEFAULT_T_MIN,
        t_max: float = math.inf,
    ) -> Hit | None:
        """Find the nearest sphere hit by a ray with t in (t_min, t_max].

        Uploads the scene first, so the result always reflects the current
        contents of this list.

        Returns:
            The nearest Hit, or None if the ray misses every sphere.
        """
        self.upload()
        result = query_nearest_hit(origin, direction, t_min, t_max)
        if result is None:
            return None
        return Hit(
            t=result["t"],
            point=result["point"],
            normal=result["normal"],
            front_face=result["front_face"],
            material=self.materials()[result["material_id"]],
        )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Materials are listed once and referenced from spheres by index, which
        preserves sharing across a round trip.
        """
        materials = self.materials()
        material_ids = {id(material): idx for idx, material in enumerate(materials)}
        return {
            "materials": [material.to_dict() for material in materials],
            "spheres": [
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material": material_ids[id(sphere.material)],
                }
                for sphere in self.spheres
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneList":
        """Rebuild a scene from its to_dict() form.

        Raises:
            ValueError: If a material is malformed or a sphere refers to a
                material index that does not exist.
        """
        materials = [material_from_dict(entry) for entry in data.get("materials", [])]
        scene = cls()
        for entry in data.get("spheres", []):
            index = entry["material"]
            if not 0 <= index < len(materials):
                raise ValueError(f"Invalid material index: {index}")
            scene.add_sphere(entry["center"], entry["radius"], materials[index])
        return scene

    def __repr__(self) -> str:
        return f"SceneList(spheres={len(self.spheres)}, materials={len(self.materials())})"
