"""
Unit tests for the Sun and planets.
"""

import numpy as np
import pytest

from galorb.config import SceneParameters, SunOrbitParameters, PlanetConfig, DEFAULT_PLANETS
from galorb.orbit import SunOrbit
from galorb.solar_system import (
    SolarSystem,
    Planet,
    Sun,
    radial_direction,
    planet_offset,
    place_planet,
    update_planets,
)
from galorb import constants as const


@pytest.fixture
def orbit():
    return SunOrbit.from_parameters(SunOrbitParameters())


@pytest.fixture
def solar_system(orbit):
    return SolarSystem(orbit, rng=np.random.default_rng(3))


class TestRadialFrame:
    """Test the per-frame orbital plane."""

    def test_radial_direction_unit(self):
        radial = radial_direction((3.0, 7.0, 4.0))
        np.testing.assert_allclose(radial, [0.6, 0.0, 0.8])

    def test_radial_direction_fallback_on_axis(self):
        np.testing.assert_array_equal(radial_direction((0.0, 5.0, 0.0)), [1.0, 0.0, 0.0])
        np.testing.assert_array_equal(radial_direction((1e-6, 0.0, 1e-6)), [1.0, 0.0, 0.0])

    def test_offset_length_is_distance(self):
        radial = radial_direction((3.0, 0.0, -4.0))
        for angle in np.linspace(0.0, 2 * np.pi, 13):
            assert np.linalg.norm(planet_offset(radial, angle, 8.0)) == pytest.approx(8.0)

    def test_offset_quarter_turn_is_vertical(self):
        offset = planet_offset(np.array([1.0, 0.0, 0.0]), np.pi / 2, 4.0)
        np.testing.assert_allclose(offset, [0.0, 4.0, 0.0], atol=1e-12)

    def test_planet_at_origin_sun(self):
        """Sun on the vertical axis: planet orbits in the x-y plane."""
        planet = Planet.from_config(PlanetConfig("P", 5.0, 0.1, 1.0, 0xffffff), initial_angle=0.0)
        position = place_planet(planet, (0.0, 2.0, 0.0), elapsed_time=0.0)
        np.testing.assert_allclose(position, [5.0, 2.0, 0.0])


class TestPlanets:
    """Test planet bookkeeping."""

    def test_phase_uses_wall_clock(self):
        planet = Planet.from_config(DEFAULT_PLANETS[2], initial_angle=1.0)
        assert planet.phase(2.0) == pytest.approx(1.0 + 2.0 * 2.5)

    def test_update_planets_pushes_trails(self):
        planets = [Planet.from_config(cfg, 0.0, trail_length=10) for cfg in DEFAULT_PLANETS[:2]]
        results = update_planets(planets, (100.0, 0.0, 0.0), 0.5)

        assert len(results) == 2
        for planet, (position, trail) in zip(planets, results):
            assert trail is planet.trail
            assert len(trail) == 1
            np.testing.assert_array_equal(trail.newest, position)

    def test_rgb(self):
        planet = Planet.from_config(DEFAULT_PLANETS[3], 0.0)
        np.testing.assert_allclose(planet.rgb, [1.0, 0x44 / 255, 0x22 / 255])


class TestSolarSystem:
    """Test the frame update."""

    def test_initial_state(self, solar_system, orbit):
        np.testing.assert_array_equal(solar_system.sun.position, orbit.position(0.0))
        assert len(solar_system.sun.trail) == 0
        assert len(solar_system.planets) == 8
        assert solar_system.frame_count == 0
        assert np.all(solar_system.planet_radius_errors() < 1e-9)

    def test_initial_angles_seeded(self, orbit):
        a = SolarSystem(orbit, rng=np.random.default_rng(5))
        b = SolarSystem(orbit, rng=np.random.default_rng(5))
        angles = [p.initial_angle for p in a.planets]

        assert angles == [p.initial_angle for p in b.planets]
        assert all(0.0 <= angle < 2 * np.pi for angle in angles)

    def test_clocks(self, solar_system, orbit):
        solar_system.update(0.5)
        solar_system.update(0.5)

        assert solar_system.elapsed == 1.0
        assert solar_system.simulation_time_myr == 2.0
        assert solar_system.frame_count == 2
        np.testing.assert_allclose(solar_system.sun.position, orbit.position(2.0))

    def test_frame_order(self, solar_system):
        results = solar_system.update(1.0 / 60.0)

        np.testing.assert_array_equal(solar_system.sun.trail.newest, solar_system.sun.position)
        for planet, (position, trail) in zip(solar_system.planets, results):
            np.testing.assert_array_equal(trail.newest, position)
            # Planet placed around this frame's Sun, not last frame's
            assert np.linalg.norm(position - solar_system.sun.position) == pytest.approx(planet.distance)

    def test_orbit_radius_preserved(self, solar_system):
        for _ in range(200):
            solar_system.update(0.1)
        assert np.all(solar_system.planet_radius_errors() < 1e-9)

    def test_trail_capacity(self, orbit):
        system = SolarSystem(orbit, rng=np.random.default_rng(0), trail_length=20)
        for _ in range(50):
            system.update(0.01)

        assert len(system.sun.trail) == 20
        assert all(len(p.trail) == 20 for p in system.planets)

    def test_zero_delta_time(self, solar_system):
        before = solar_system.sun.position.copy()
        solar_system.update(0.0)
        np.testing.assert_allclose(solar_system.sun.position, before)
        assert solar_system.frame_count == 1

    def test_no_planets(self, orbit):
        system = SolarSystem(orbit, planet_configs=[], rng=np.random.default_rng(0))
        assert system.update(0.1) == []
        assert system.planet_positions.shape == (0, 3)
        assert system.planet_radius_errors().shape == (0,)

    def test_from_parameters(self):
        params = SceneParameters(simulation_myr_per_second=10.0, trail_length=5)
        system = SolarSystem.from_parameters(params, rng=np.random.default_rng(0))
        system.update(1.0)

        assert system.simulation_time_myr == 10.0
        assert system.sun.trail.capacity == 5

    def test_sun_glow_texture(self):
        glow = SolarSystem.sun_glow_texture()
        assert glow.shape == (const.GLOW_TEXTURE_SIZE, const.GLOW_TEXTURE_SIZE, 4)

    def test_sun_defaults(self, orbit):
        sun = Sun(orbit)
        assert sun.trail.capacity == const.TRAIL_LENGTH
        position = sun.move_to(3.0)
        np.testing.assert_array_equal(position, orbit.position(3.0))
        assert len(sun.trail) == 1
