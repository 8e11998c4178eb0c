"""Unit tests for the Lambertian material module.

Tests cover:
- Scattered directions lie in the hemisphere around the normal
- Attenuation equals albedo, rays always scatter
- Cosine-weighted distribution of scattered directions
- Albedo validation and serialization
"""

import pytest
import taichi as ti


class TestLambertianScatter:
    """Tests for the Lambertian scatter function."""

    N = 4096

    def _scatter_samples(self, normal):
        from pathtracer.core.ray import vec3
        from pathtracer.materials.lambertian import scatter_lambertian

        directions = ti.Vector.field(3, dtype=ti.f64, shape=self.N)
        attenuations = ti.Vector.field(3, dtype=ti.f64, shape=self.N)
        scattered = ti.field(dtype=ti.i32, shape=self.N)

        @ti.kernel
        def test_kernel(n: vec3):
            for i in directions:
                d, att, s = scatter_lambertian(vec3(0.8, 0.6, 0.4), n)
                directions[i] = d
                attenuations[i] = att
                scattered[i] = s

        test_kernel(vec3(*normal))
        return directions.to_numpy(), attenuations.to_numpy(), scattered.to_numpy()

    def test_directions_in_hemisphere(self):
        """Test every scattered direction points away from the surface."""
        directions, _, _ = self._scatter_samples((0.0, 1.0, 0.0))
        assert (directions[:, 1] >= 0.0).all()

    def test_attenuation_is_albedo_and_always_scatters(self):
        """Test attenuation equals albedo and the ray is never absorbed."""
        _, attenuations, scattered = self._scatter_samples((0.0, 0.0, 1.0))
        assert (scattered == 1).all()
        assert attenuations == pytest.approx([[0.8, 0.6, 0.4]] * self.N)

    def test_cosine_weighted_distribution(self):
        """Test the mean cosine to the normal is 2/3, as for a cosine lobe."""
        directions, _, _ = self._scatter_samples((0.0, 1.0, 0.0))
        lengths = (directions**2).sum(axis=1) ** 0.5
        cosines = directions[:, 1] / lengths
        assert cosines.mean() == pytest.approx(2.0 / 3.0, abs=0.03)


class TestLambertianMaterial:
    """Tests for the host-side Lambertian dataclass."""

    def test_albedo_is_stored_as_floats(self):
        """Test albedo is normalized to a tuple of floats."""
        from pathtracer.materials import Lambertian, MaterialType

        material = Lambertian([1, 0, 0.5])
        assert material.albedo == (1.0, 0.0, 0.5)
        assert material.material_type == MaterialType.LAMBERTIAN
        assert material.table_row() == ((1.0, 0.0, 0.5), 0.0, 1.0)

    def test_albedo_validation_negative(self):
        """Test negative albedo components are rejected."""
        from pathtracer.materials import Lambertian

        with pytest.raises(ValueError, match="outside"):
            Lambertian((-0.1, 0.5, 0.5))

    def test_albedo_validation_greater_than_one(self):
        """Test albedo components above one are rejected."""
        from pathtracer.materials import Lambertian

        with pytest.raises(ValueError, match="energy conservation"):
            Lambertian((0.5, 1.5, 0.5))

    def test_albedo_wrong_length(self):
        """Test albedo must have three components."""
        from pathtracer.materials import Lambertian

        with pytest.raises(ValueError, match="3 components"):
            Lambertian((0.5, 0.5))

    def test_is_immutable(self):
        """Test materials cannot be modified after creation."""
        import dataclasses

        from pathtracer.materials import Lambertian

        material = Lambertian((0.5, 0.5, 0.5))
        with pytest.raises(dataclasses.FrozenInstanceError):
            material.albedo = (0.1, 0.1, 0.1)

    def test_to_dict(self):
        """Test export to a JSON-compatible dictionary."""
        from pathtracer.materials import Lambertian

        assert Lambertian((0.1, 0.2, 0.3)).to_dict() == {
            "type": "lambertian",
            "albedo": [0.1, 0.2, 0.3],
        }
