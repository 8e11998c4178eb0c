"""Unit tests for the host-side scene list and the material table.

Tests cover:
- Sphere validation
- Material de-duplication by identity on upload
- Scene serialization round trip
- Material table capacity and lookups
"""

import pytest
import taichi as ti


class TestSphere:
    """Tests for the Sphere dataclass."""

    def test_coerces_to_floats(self):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.scene_list import Sphere

        sphere = Sphere([1, 2, 3], 2, Lambertian((0.5, 0.5, 0.5)))
        assert sphere.center == (1.0, 2.0, 3.0)
        assert isinstance(sphere.radius, float)

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_radius_must_be_positive(self, radius):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.scene_list import Sphere

        with pytest.raises(ValueError, match="positive"):
            Sphere((0, 0, 0), radius, Lambertian((0.5, 0.5, 0.5)))

    def test_center_needs_three_components(self):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.scene_list import Sphere

        with pytest.raises(ValueError, match="3 components"):
            Sphere((0, 0), 1.0, Lambertian((0.5, 0.5, 0.5)))

    def test_material_type_checked(self):
        from pathtracer.scene.scene_list import Sphere

        with pytest.raises(ValueError, match="Material"):
            Sphere((0, 0, 0), 1.0, "glass")


class TestSceneList:
    """Tests for building and uploading a scene."""

    def test_add_and_iterate(self, simple_scene):
        assert len(simple_scene) == 2
        radii = [sphere.radius for sphere in simple_scene]
        assert radii == [100.0, 0.5]
        assert simple_scene[1].center == (0.0, 0.0, -1.0)

    def test_add_rejects_non_sphere(self):
        from pathtracer.scene.scene_list import SceneList

        with pytest.raises(ValueError, match="Sphere"):
            SceneList().add((0, 0, 0))

    def test_shared_material_listed_once(self):
        """Test a material shared by spheres is stored once, equal ones twice."""
        from pathtracer.materials import Lambertian
        from pathtracer.scene.scene_list import SceneList

        shared = Lambertian((0.5, 0.5, 0.5))
        twin = Lambertian((0.5, 0.5, 0.5))
        scene = SceneList()
        scene.add_sphere((0, 0, 0), 1.0, shared)
        scene.add_sphere((3, 0, 0), 1.0, twin)
        scene.add_sphere((6, 0, 0), 1.0, shared)

        materials = scene.materials()
        assert len(materials) == 2
        assert materials[0] is shared
        assert materials[1] is twin

    def test_upload_fills_tables(self, simple_scene):
        from pathtracer.materials.registry import get_material_count
        from pathtracer.scene.intersection import get_sphere_count

        simple_scene.upload()
        assert get_sphere_count() == 2
        assert get_material_count() == 2

    def test_upload_replaces_previous_scene(self, simple_scene):
        from pathtracer.materials import Metal
        from pathtracer.scene.intersection import get_sphere_count
        from pathtracer.scene.scene_list import SceneList

        simple_scene.upload()
        other = SceneList()
        other.add_sphere((0, 0, -1), 0.5, Metal((0.9, 0.9, 0.9)))
        other.upload()
        assert get_sphere_count() == 1

    def test_intersect_reports_hit_details(self, simple_scene):
        hit = simple_scene.intersect((0, 0, 0), (0, 0, -1))
        assert hit is not None
        assert hit.t == pytest.approx(0.5)
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0))
        assert hit.front_face is True
        assert hit.material is simple_scene[1].material

    def test_repr(self, simple_scene):
        assert repr(simple_scene) == "SceneList(spheres=2, materials=2)"


class TestSceneSerialization:
    """Tests for to_dict/from_dict."""

    def test_round_trip_preserves_sharing(self):
        from pathtracer.materials import Dielectric, Metal
        from pathtracer.scene.scene_list import SceneList

        glass = Dielectric(1.5)
        scene = SceneList()
        scene.add_sphere((0, 1, 0), 1.0, glass)
        scene.add_sphere((4, 1, 0), 1.0, Metal((0.7, 0.6, 0.5), 0.2))
        scene.add_sphere((0, 1, 3), 0.5, glass)

        data = scene.to_dict()
        assert len(data["materials"]) == 2
        assert [s["material"] for s in data["spheres"]] == [0, 1, 0]

        restored = SceneList.from_dict(data)
        assert len(restored) == 3
        assert restored[0].material is restored[2].material
        assert restored[1].material == Metal((0.7, 0.6, 0.5), 0.2)
        assert restored.to_dict() == data

    def test_invalid_material_index(self):
        from pathtracer.scene.scene_list import SceneList

        data = {
            "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            "spheres": [{"center": [0, 0, 0], "radius": 1.0, "material": 3}],
        }
        with pytest.raises(ValueError, match="Invalid material index"):
            SceneList.from_dict(data)

    def test_unknown_material_type(self):
        from pathtracer.scene.scene_list import material_from_dict

        with pytest.raises(ValueError, match="Unknown material type"):
            material_from_dict({"type": "emissive"})


class TestMaterialTable:
    """Tests for the kernel-side material table."""

    def test_load_materials_returns_count(self):
        from pathtracer.materials import Dielectric, Lambertian, Metal
        from pathtracer.materials.registry import get_material_count, load_materials

        count = load_materials([Lambertian((0.1, 0.2, 0.3)), Metal((0.5, 0.5, 0.5), 0.4), Dielectric(2.0)])
        assert count == 3
        assert get_material_count() == 3

    def test_capacity_exceeded(self):
        from pathtracer.materials import Lambertian
        from pathtracer.materials.registry import MAX_MATERIALS, load_materials

        materials = [Lambertian((0.5, 0.5, 0.5))] * (MAX_MATERIALS + 1)
        with pytest.raises(RuntimeError, match="Maximum number of materials"):
            load_materials(materials)

    def test_kernel_lookups(self):
        """Test the tagged columns read back per material ID."""
        from pathtracer.materials import Dielectric, Lambertian, Metal, MaterialType
        from pathtracer.materials.registry import (
            get_material_albedo,
            get_material_fuzz,
            get_material_ior,
            get_material_type,
            load_materials,
        )

        load_materials([Lambertian((0.1, 0.2, 0.3)), Metal((0.5, 0.5, 0.5), 0.4), Dielectric(2.0)])
        types = ti.field(dtype=ti.i32, shape=4)
        albedo = ti.Vector.field(3, dtype=ti.f64, shape=())
        fuzz = ti.field(dtype=ti.f64, shape=())
        ior = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            for k in range(4):
                types[k] = get_material_type(k)
            albedo[None] = get_material_albedo(0)
            fuzz[None] = get_material_fuzz(1)
            ior[None] = get_material_ior(2)

        test_kernel()
        assert types.to_numpy().tolist() == [
            MaterialType.LAMBERTIAN,
            MaterialType.METAL,
            MaterialType.DIELECTRIC,
            -1,
        ]
        assert tuple(albedo[None]) == pytest.approx((0.1, 0.2, 0.3))
        assert fuzz[None] == pytest.approx(0.4)
        assert ior[None] == pytest.approx(2.0)
