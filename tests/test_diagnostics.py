"""
Tests for runtime diagnostics.
"""

import numpy as np
import pytest

from galorb.config import SunOrbitParameters
from galorb.diagnostics import check_orbit_constants, check_frame_health
from galorb.orbit import SunOrbit, derive_sun_orbit_constants
from galorb.solar_system import SolarSystem


class TestOrbitConstantsCheck:

    def test_default_is_physical(self):
        result = check_orbit_constants(derive_sun_orbit_constants(SunOrbitParameters()))

        assert result['is_physical']
        assert result['warnings'] == []
        assert 1.2 < result['epicycle_ratio'] < 1.5

    def test_zero_B_reported(self):
        result = check_orbit_constants(derive_sun_orbit_constants(SunOrbitParameters(oort_B_kms_kpc=0.0)))

        assert not result['is_physical']
        assert any("Oort B" in w for w in result['warnings'])
        assert any("epicyclic" in w for w in result['warnings'])

    def test_zero_density_reported(self):
        result = check_orbit_constants(
            derive_sun_orbit_constants(SunOrbitParameters(local_mass_density_msun_pc3=0.0)))

        assert not result['is_physical']
        assert any("vertical" in w for w in result['warnings'])

    def test_retrograde_reported(self):
        result = check_orbit_constants(
            derive_sun_orbit_constants(SunOrbitParameters(oort_A_kms_kpc=-20.0)))
        assert any("omega0" in w for w in result['warnings'])


class TestFrameHealth:

    @pytest.fixture
    def solar_system(self):
        orbit = SunOrbit.from_parameters(SunOrbitParameters())
        system = SolarSystem(orbit, rng=np.random.default_rng(0))
        system.update(1.0 / 60.0)
        return system

    def test_healthy_frame(self, solar_system):
        result = check_frame_health(solar_system)

        assert result['is_healthy']
        assert result['max_planet_radius_error'] < 1e-9
        assert result['warnings'] == []

    def test_nan_sun(self, solar_system):
        solar_system.sun.position = np.array([np.nan, 0.0, 0.0])
        result = check_frame_health(solar_system)

        assert not result['is_healthy']
        assert "CRITICAL" in result['warnings'][0]

    def test_drifted_planet(self, solar_system):
        solar_system.planets[0].position = solar_system.planets[0].position * 2.0
        result = check_frame_health(solar_system)

        assert not result['is_healthy']
        assert result['max_planet_radius_error'] > 1e-6

    def test_sun_on_minimum_radius(self):
        params = SunOrbitParameters(peculiar_U_kms=1.0e5)
        orbit = SunOrbit.from_parameters(params)
        system = SolarSystem(orbit, rng=np.random.default_rng(0))

        # Quarter radial period: the inward excursion is at its largest
        t = 0.5 * np.pi / orbit.constants.kappa
        system.update(t / system.simulation_myr_per_second)

        assert orbit.galactocentric_radius(system.simulation_time_myr) == pytest.approx(0.1)
        result = check_frame_health(system)
        assert any("minimum galactocentric radius" in w for w in result['warnings'])
