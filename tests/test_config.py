"""
Unit tests for configuration loading and validation.
"""

import dataclasses

import pytest
from pathlib import Path

from galorb.config import (
    SceneParameters,
    GalaxyConfig,
    SunOrbitParameters,
    PlanetConfig,
    DEFAULT_PLANETS
)
from galorb import constants as const


CONFIG_PATH = Path(__file__).parent.parent / 'configs' / 'default_scene.yaml'


def write_yaml(tmp_path, text):
    path = tmp_path / 'scene.yaml'
    path.write_text(text)
    return str(path)


class TestDefaultConfig:
    """Test the shipped default scene configuration."""

    def test_load_default_config(self):
        params = SceneParameters.from_yaml(str(CONFIG_PATH))

        assert params.scene_name == "milky_way"
        assert params.galaxy.radius == 500.0
        assert params.galaxy.arms == 5
        assert params.galaxy.particle_count == 8000
        assert params.galaxy.color_inside == 0xffaa33
        assert params.galaxy.color_outside == 0x1b3984

    def test_sun_orbit_section(self):
        params = SceneParameters.from_yaml(str(CONFIG_PATH))

        assert params.sun_orbit == SunOrbitParameters()
        assert params.sun_orbit.R0_kpc == 8.178

    def test_default_planets(self):
        params = SceneParameters.from_yaml(str(CONFIG_PATH))

        assert len(params.planets) == 8
        assert [p.name for p in params.planets][:3] == ["Mercury", "Venus", "Earth"]
        assert params.planets[-1].distance == 36.0
        assert params.trail_length == 300

    def test_simulation_control(self):
        params = SceneParameters.from_yaml(str(CONFIG_PATH))

        assert params.scene_units_per_kpc == 60.0
        assert params.simulation_myr_per_second == 2.0
        assert params.galaxy_rotation_speed == 0.05
        assert params.frame_dt == pytest.approx(1.0 / 60.0)
        assert params.n_frames == 3600
        assert params.output_interval == 6

    def test_default_config_validates_cleanly(self):
        params = SceneParameters.from_yaml(str(CONFIG_PATH))
        assert params.validate() == []


class TestYamlParsing:
    """Test YAML edge cases."""

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            SceneParameters.from_yaml('/nonexistent/scene.yaml')

    def test_empty_file_uses_defaults(self, tmp_path):
        params = SceneParameters.from_yaml(write_yaml(tmp_path, ""))

        assert params.galaxy == GalaxyConfig()
        assert params.sun_orbit == SunOrbitParameters()
        assert params.planets == list(DEFAULT_PLANETS)

    def test_empty_sections_use_defaults(self, tmp_path):
        text = "galaxy:\nsun_orbit:\nsolar_system:\nsimulation_control:\n"
        params = SceneParameters.from_yaml(write_yaml(tmp_path, text))

        assert params.galaxy == GalaxyConfig()
        assert params.sun_orbit == SunOrbitParameters()
        assert params.planets == list(DEFAULT_PLANETS)
        assert params.frame_dt == SceneParameters().frame_dt

    def test_partial_galaxy_section(self, tmp_path):
        params = SceneParameters.from_yaml(write_yaml(tmp_path, "galaxy:\n  arms: 3\n  spin: 10\n"))

        assert params.galaxy.arms == 3
        assert params.galaxy.spin == 10.0
        assert params.galaxy.radius == 500.0

    def test_color_formats(self, tmp_path):
        text = (
            "galaxy:\n"
            "  color_inside: '#ff0000'\n"
            "  color_outside: 0x00ff00\n"
        )
        params = SceneParameters.from_yaml(write_yaml(tmp_path, text))

        assert params.galaxy.color_inside == 0xff0000
        assert params.galaxy.color_outside == 0x00ff00

    def test_invalid_color_raises(self, tmp_path):
        with pytest.raises(ValueError):
            SceneParameters.from_yaml(write_yaml(tmp_path, "galaxy:\n  color_inside: 'blue'\n"))

    def test_unknown_orbit_parameter_raises(self, tmp_path):
        with pytest.raises(ValueError, match="unknown"):
            SceneParameters.from_yaml(write_yaml(tmp_path, "sun_orbit:\n  R0: 8.0\n"))

    def test_custom_planets(self, tmp_path):
        text = (
            "solar_system:\n"
            "  planets:\n"
            "    - {name: Vulcan, distance: 2.0, size: 0.1, speed: 6.0, color: '0xff8800'}\n"
            "  trail_length: 50\n"
        )
        params = SceneParameters.from_yaml(write_yaml(tmp_path, text))

        assert params.planets == [PlanetConfig("Vulcan", 2.0, 0.1, 6.0, 0xff8800)]
        assert params.trail_length == 50

    def test_planet_missing_field_raises(self, tmp_path):
        text = "solar_system:\n  planets:\n    - {name: Vulcan, distance: 2.0}\n"
        with pytest.raises(ValueError, match="missing"):
            SceneParameters.from_yaml(write_yaml(tmp_path, text))

    def test_planets_wrong_type_raises(self, tmp_path):
        with pytest.raises(ValueError):
            SceneParameters.from_yaml(write_yaml(tmp_path, "solar_system:\n  planets: 3\n"))


class TestValidation:
    """Test parameter sanity checks."""

    def test_records_are_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            GalaxyConfig().radius = 10.0

    def test_non_positive_radius_is_error(self):
        params = SceneParameters(galaxy=GalaxyConfig(radius=0.0))
        assert any(w.startswith("ERROR") and "radius" in w for w in params.validate())

    def test_zero_arms_is_error(self):
        params = SceneParameters(galaxy=GalaxyConfig(arms=0))
        assert any(w.startswith("ERROR") and "arms" in w for w in params.validate())

    def test_sun_outside_disc_is_info(self):
        params = SceneParameters(galaxy=GalaxyConfig(radius=100.0))
        messages = params.validate()
        assert any(w.startswith("INFO") for w in messages)
        assert not any(w.startswith("ERROR") for w in messages)

    def test_clamped_kappa_is_warning(self):
        params = SceneParameters(sun_orbit=SunOrbitParameters(oort_B_kms_kpc=0.0))
        assert any("epicyclic" in w for w in params.validate())

    def test_duplicate_planet_names_warn(self):
        planets = [PlanetConfig("A", 1.0, 0.1, 1.0, 0xffffff)] * 2
        params = SceneParameters(planets=planets)
        assert any(w.startswith("WARNING") and "unique" in w for w in params.validate())

    def test_n_frames(self):
        params = SceneParameters(frame_dt=0.1, duration=2.0)
        assert params.n_frames == 20

    def test_constants_defaults(self):
        params = SceneParameters()
        assert params.trail_length == const.TRAIL_LENGTH
        assert params.scene_units_per_kpc == const.SCENE_UNITS_PER_KPC
