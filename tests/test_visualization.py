"""
Tests for plotting and report generation.
"""

import pytest

from galorb.analysis import epicycle_periods
from galorb.config import SceneParameters, GalaxyConfig
from galorb.output import SceneRecorder
from galorb.simulation import initialize_scene, evolve_scene
from galorb.visualization import (
    plot_galaxy_face_on,
    plot_sun_trajectory,
    plot_planet_orbits,
    generate_summary_report
)


@pytest.fixture(scope="module")
def recorded_run(tmp_path_factory):
    params = SceneParameters(
        scene_name="plot_test",
        galaxy=GalaxyConfig(particle_count=200),
        frame_dt=0.1,
        duration=1.0,
        output_interval=1
    )
    output_dir = tmp_path_factory.mktemp("plots")
    filepath = output_dir / 'scene.h5'
    scene = initialize_scene(params, seed=0)
    with SceneRecorder(str(filepath), params, scene) as recorder:
        evolve_scene(scene, params, params.n_frames, show_progress=False, recorder=recorder)
    return str(filepath), scene, output_dir


class TestPlots:

    def test_galaxy_face_on(self, recorded_run):
        _, scene, output_dir = recorded_run
        output = output_dir / 'galaxy.png'
        plot_galaxy_face_on(scene.galaxy, str(output))
        assert output.exists()
        assert output.stat().st_size > 0

    def test_galaxy_face_only(self, recorded_run):
        _, scene, output_dir = recorded_run
        output = output_dir / 'galaxy_face.png'
        plot_galaxy_face_on(scene.galaxy, str(output), edge_on=False)
        assert output.exists()

    def test_sun_trajectory(self, recorded_run):
        filepath, _, output_dir = recorded_run
        output = output_dir / 'sun.png'
        plot_sun_trajectory(filepath, str(output))
        assert output.exists()

    def test_planet_orbits(self, recorded_run):
        filepath, _, output_dir = recorded_run
        output = output_dir / 'planets.png'
        plot_planet_orbits(filepath, str(output))
        assert output.exists()


class TestSummaryReport:

    def test_report_contents(self, recorded_run):
        filepath, _, output_dir = recorded_run
        output = output_dir / 'report.txt'
        generate_summary_report(filepath, str(output))

        text = output.read_text()
        assert "GALAXY SCENE - SUMMARY REPORT" in text
        assert "Scene: plot_test" in text
        assert "Recorded Frames: 11" in text
        assert "particles: 200" in text
        assert "WARNING" not in text

    def test_report_unicode_name_and_configured_rate(self, tmp_path):
        params = SceneParameters(
            scene_name="Milchstraße ☉",
            galaxy=GalaxyConfig(particle_count=50),
            simulation_myr_per_second=10.0,
            frame_dt=0.1,
            duration=0.5,
            output_interval=1
        )
        filepath = tmp_path / 'scene.h5'
        scene = initialize_scene(params, seed=1)
        with SceneRecorder(str(filepath), params, scene) as recorder:
            evolve_scene(scene, params, params.n_frames, show_progress=False, recorder=recorder)

        output = tmp_path / 'report.txt'
        generate_summary_report(str(filepath), str(output))

        periods = epicycle_periods(scene.solar_system.sun.orbit.constants, 10.0)
        text = output.read_text(encoding='utf-8')
        assert "Scene: Milchstraße ☉" in text
        assert f"({periods['orbital_period_s']:.1f} s wall-clock)" in text
