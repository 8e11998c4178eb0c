"""Tests for render settings and the command-line driver."""

import json

import pytest


class TestRenderSettings:
    """Tests for RenderSettings."""

    def test_defaults(self):
        from pathtracer.config import RenderSettings

        settings = RenderSettings()
        assert settings.width == 400
        assert settings.height == 225
        assert settings.samples_per_pixel == 8
        assert settings.passes == 8
        assert settings.max_depth == 50
        assert settings.total_samples == 64
        settings.validate()

    def test_explicit_height_kept(self):
        from pathtracer.config import RenderSettings

        assert RenderSettings(width=100, height=40).height == 40

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 1},
            {"width": 10, "height": 1},
            {"samples_per_pixel": 0},
            {"passes": 0},
            {"max_depth": -1},
            {"arch": "tpu"},
        ],
    )
    def test_validate_rejects(self, kwargs):
        from pathtracer.config import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs).validate()

    def test_from_dict_ignores_unknown_keys(self):
        from pathtracer.config import RenderSettings

        settings = RenderSettings.from_dict({"width": 200, "passes": 2, "title": "x"})
        assert settings.width == 200
        assert settings.height == 112
        assert settings.passes == 2

    def test_round_trip(self):
        from pathtracer.config import RenderSettings

        settings = RenderSettings(width=64, samples_per_pixel=2, seed=9)
        assert RenderSettings.from_dict(settings.to_dict()) == settings

    def test_init_taichi_unknown_arch(self):
        from pathtracer.config import init_taichi

        with pytest.raises(ValueError, match="Unknown Taichi arch"):
            init_taichi(arch="abacus")


class TestCommandLine:
    """Tests for argument parsing and settings loading in the render script."""

    def test_flags_override_defaults(self):
        from examples.render_spheres import load_settings, parse_args

        args = parse_args(["--width", "120", "--samples", "3", "--passes", "2", "--seed", "4"])
        settings = load_settings(args)
        assert settings.width == 120
        assert settings.height == 67
        assert settings.samples_per_pixel == 3
        assert settings.passes == 2
        assert settings.seed == 4
        assert args.output == "out.ppm"

    def test_config_file_with_overrides(self, tmp_path):
        from examples.render_spheres import load_settings, parse_args

        config = tmp_path / "render.json"
        config.write_text(json.dumps({"width": 300, "height": 100, "max_depth": 10}))

        settings = load_settings(parse_args(["--config", str(config)]))
        assert (settings.width, settings.height, settings.max_depth) == (300, 100, 10)

        settings = load_settings(parse_args(["--config", str(config), "--width", "160"]))
        assert settings.width == 160
        assert settings.height == 90

    def test_invalid_settings_exit_code(self):
        from examples.render_spheres import main

        assert main(["--samples", "0", "--quiet"]) == 2

    def test_render_spheres_writes_file(self, tmp_path):
        from examples.render_spheres import render_spheres
        from pathtracer.config import RenderSettings

        settings = RenderSettings(width=16, samples_per_pixel=1, passes=2, max_depth=3)
        path = render_spheres(settings, output_path=str(tmp_path / "spheres.ppm"), quiet=True)
        assert path.read_text().startswith("P3\n16 9\n255\n")
