"""Unit tests for the Metal material module.

Tests cover:
- Perfect specular reflection (fuzz=0)
- Fuzzy reflection (fuzz>0)
- Ray absorption when scattered below surface
- Attenuation = albedo
- Fuzz validation
"""

import math

import pytest
import taichi as ti


def _scatter_once(albedo, fuzz, incident, normal):
    from pathtracer.core.ray import vec3
    from pathtracer.materials.metal import scatter_metal

    result_dir = ti.Vector.field(3, dtype=ti.f64, shape=())
    result_att = ti.Vector.field(3, dtype=ti.f64, shape=())
    result_scatter = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(a: vec3, f: ti.f64, i: vec3, n: vec3):
        direction, attenuation, did_scatter = scatter_metal(a, f, i, n)
        result_dir[None] = direction
        result_att[None] = attenuation
        result_scatter[None] = did_scatter

    test_kernel(vec3(*albedo), fuzz, vec3(*incident), vec3(*normal))
    return tuple(result_dir[None]), tuple(result_att[None]), result_scatter[None]


class TestPerfectReflection:
    """Tests for perfect specular reflection (fuzz=0)."""

    def test_perfect_reflection_normal_incidence(self):
        """Test reflection of ray hitting surface head-on."""
        direction, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert direction == pytest.approx((0.0, 1.0, 0.0))
        assert did_scatter == 1

    def test_incident_direction_is_normalized_first(self):
        """Test a long incident vector reflects to a unit direction."""
        direction, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (3.0, -3.0, 0.0), (0.0, 1.0, 0.0)
        )
        inv_sqrt2 = 1.0 / math.sqrt(2.0)
        assert direction == pytest.approx((inv_sqrt2, inv_sqrt2, 0.0))
        assert did_scatter == 1

    def test_attenuation_is_albedo(self):
        """Test the reflected color is the albedo."""
        _, attenuation, _ = _scatter_once(
            (0.8, 0.6, 0.4), 0.0, (1.0, -1.0, 1.0), (0.0, 1.0, 0.0)
        )
        assert attenuation == pytest.approx((0.8, 0.6, 0.4))


class TestFuzzyReflection:
    """Tests for fuzzy metal reflection (fuzz>0)."""

    N = 2048

    def test_fuzz_perturbation_bounded(self):
        """Test scattered directions lie within fuzz of the mirror direction."""
        from pathtracer.core.ray import vec3
        from pathtracer.materials.metal import scatter_metal

        max_offset = ti.field(dtype=ti.f64, shape=())
        distinct = ti.field(dtype=ti.i32, shape=())

        n = self.N

        @ti.kernel
        def test_kernel():
            for _k in range(n):
                d, _att, _s = scatter_metal(
                    vec3(1.0, 1.0, 1.0), 0.3, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                offset = (d - vec3(0.0, 1.0, 0.0)).norm()
                ti.atomic_max(max_offset[None], offset)
                if offset > 1e-6:
                    ti.atomic_add(distinct[None], 1)

        test_kernel()
        assert max_offset[None] < 0.3
        assert distinct[None] > self.N // 2

    def test_grazing_fuzz_can_absorb(self):
        """Test some fuzzy grazing reflections point into the surface and are absorbed."""
        from pathtracer.core.ray import normalize, vec3
        from pathtracer.materials.metal import scatter_metal

        absorbed = ti.field(dtype=ti.i32, shape=())
        violations = ti.field(dtype=ti.i32, shape=())
        n = self.N

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for _k in range(n):
                d, _att, s = scatter_metal(
                    vec3(1.0, 1.0, 1.0), 1.0, normalize(vec3(1.0, -0.05, 0.0)), normal
                )
                if s == 0:
                    ti.atomic_add(absorbed[None], 1)
                    if d.dot(normal) > 0.0:
                        ti.atomic_add(violations[None], 1)
                elif d.dot(normal) <= 0.0:
                    ti.atomic_add(violations[None], 1)

        test_kernel()
        assert absorbed[None] > 0
        assert violations[None] == 0


class TestMetalMaterial:
    """Tests for the host-side Metal dataclass."""

    def test_defaults_to_perfect_mirror(self):
        from pathtracer.materials import MaterialType, Metal

        metal = Metal((0.7, 0.6, 0.5))
        assert metal.fuzz == 0.0
        assert metal.material_type == MaterialType.METAL
        assert metal.table_row() == ((0.7, 0.6, 0.5), 0.0, 1.0)

    @pytest.mark.parametrize("fuzz", [-0.1, 1.1])
    def test_fuzz_validation(self, fuzz):
        """Test fuzz outside [0, 1] is rejected."""
        from pathtracer.materials import Metal

        with pytest.raises(ValueError, match="Fuzz"):
            Metal((0.5, 0.5, 0.5), fuzz=fuzz)

    def test_albedo_validation(self):
        from pathtracer.materials import Metal

        with pytest.raises(ValueError):
            Metal((0.5, 2.0, 0.5), fuzz=0.1)

    def test_to_dict(self):
        from pathtracer.materials import Metal

        assert Metal((0.8, 0.6, 0.2), fuzz=0.3).to_dict() == {
            "type": "metal",
            "albedo": [0.8, 0.6, 0.2],
            "fuzz": 0.3,
        }
