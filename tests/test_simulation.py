"""
Unit tests for the scene frame loop.
"""

import numpy as np
import pytest

from galorb.config import SceneParameters, GalaxyConfig
from galorb.simulation import (
    Scene,
    initialize_scene,
    advance_scene,
    evolve_scene,
    run_scene
)


@pytest.fixture
def params():
    """Small scene: few particles, 0.5 s at 20 fps."""
    return SceneParameters(
        galaxy=GalaxyConfig(particle_count=200),
        frame_dt=0.05,
        duration=0.5,
        output_interval=2
    )


class TestInitialization:

    def test_initialize_scene(self, params):
        scene = initialize_scene(params, seed=1)

        assert isinstance(scene, Scene)
        assert scene.galaxy_rotation == 0.0
        assert scene.frame_count == 0
        assert len(scene.galaxy.particles) == 200
        assert scene.textures is scene.galaxy.textures
        assert len(scene.textures) > 0

    def test_seed_reproduces_scene(self, params):
        a = initialize_scene(params, seed=9)
        b = initialize_scene(params, seed=9)

        np.testing.assert_array_equal(a.galaxy.particles.positions, b.galaxy.particles.positions)
        assert ([p.initial_angle for p in a.solar_system.planets]
                == [p.initial_angle for p in b.solar_system.planets])


class TestFrameLoop:

    def test_advance_rotates_galaxy(self, params):
        scene = initialize_scene(params, seed=1)
        for _ in range(10):
            advance_scene(scene, 0.1)

        assert scene.galaxy_rotation == pytest.approx(10 * 0.1 * params.galaxy_rotation_speed)
        assert scene.frame_count == 10
        assert scene.solar_system.simulation_time_myr == pytest.approx(2.0)

    def test_advance_returns_planet_results(self, params):
        scene = initialize_scene(params, seed=1)
        results = advance_scene(scene, 0.05)
        assert len(results) == len(params.planets)

    def test_evolve_scene_stats(self, params):
        scene = initialize_scene(params, seed=1)
        stats = evolve_scene(scene, params, 30, show_progress=False)

        assert stats['final_frame'] == 30
        assert stats['final_time'] == pytest.approx(30 * 0.05)
        assert stats['final_simulation_time_myr'] == pytest.approx(30 * 0.05 * 2.0)
        assert stats['max_planet_radius_error'] < 1e-9

    def test_evolve_zero_frames(self, params):
        scene = initialize_scene(params, seed=1)
        stats = evolve_scene(scene, params, 0, show_progress=False)
        assert stats['final_frame'] == 0

    def test_run_scene(self, params, capsys):
        scene, stats = run_scene(params, seed=3, show_progress=False)

        assert stats['final_frame'] == params.n_frames == 10
        assert scene.galaxy_rotation == pytest.approx(0.5 * 0.05)
        assert "Scene complete" in capsys.readouterr().out
