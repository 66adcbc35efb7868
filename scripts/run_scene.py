"""
Headless scene runner script.

Usage:
    python scripts/run_scene.py configs/default_scene.yaml

This script:
1. Loads configuration from YAML file
2. Generates the galaxy and the solar system
3. Runs the frame loop with progress bar
4. Saves results to HDF5 file
5. Generates plots and summary report
"""

import sys
import argparse
import time
from dataclasses import replace
from pathlib import Path

# Add src to path so we can import galorb package
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from galorb.config import SceneParameters
from galorb.simulation import initialize_scene, evolve_scene
from galorb.output import SceneRecorder
from galorb.diagnostics import check_orbit_constants
from galorb.generation import validate_structure
from galorb.analysis import analyze_scene, epicycle_periods
from galorb.visualization import (
    plot_galaxy_face_on,
    plot_sun_trajectory,
    plot_planet_orbits,
    generate_summary_report
)


def main():
    parser = argparse.ArgumentParser(
        description='Generate a spiral galaxy and run the Sun/planet scene headlessly'
    )
    parser.add_argument(
        'config',
        type=str,
        help='Path to YAML configuration file'
    )
    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output HDF5 file path (default: auto from config)'
    )
    parser.add_argument(
        '--frames',
        type=int,
        default=None,
        help='Number of frames to run (default: duration / frame_dt from config)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=42,
        help='Random seed for galaxy generation and planet phases'
    )
    parser.add_argument(
        '--skip-plots',
        action='store_true',
        help='Skip plot generation'
    )

    args = parser.parse_args()

    print(f"Loading configuration from {args.config}...")
    params = SceneParameters.from_yaml(args.config)

    if args.frames is not None:
        params = replace(params, duration=args.frames * params.frame_dt)

    errors = [w for w in params.validate() if w.startswith("ERROR")]
    if errors:
        for error in errors:
            print(f"  {error}")
        sys.exit(1)

    if args.output:
        output_path = args.output
    else:
        output_dir = Path(params.output_directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = str(output_dir / f"{params.scene_name}.h5")

    print(f"Output will be saved to: {output_path}")
    print()

    print(params)
    print()

    print("Generating scene...")
    scene = initialize_scene(params, seed=args.seed)
    report = validate_structure(scene.galaxy, params.galaxy)
    print(f"Galaxy elements: {scene.galaxy.n_total} "
          f"({report['particles_count']} particles, {len(scene.textures)} textures)")

    orbit_check = check_orbit_constants(scene.solar_system.sun.orbit.constants)
    for warning in orbit_check['warnings']:
        print(f"  {warning}")
    periods = epicycle_periods(scene.solar_system.sun.orbit.constants,
                               params.simulation_myr_per_second)
    print(f"Sun orbital period: {periods['orbital_period_myr']:.1f} Myr "
          f"({periods['orbital_period_s']:.1f} s of wall-clock time)")
    print()

    print("Starting frame loop...")
    start_time = time.time()

    n_frames = params.n_frames

    with SceneRecorder(output_path, params, scene) as recorder:
        stats = evolve_scene(scene, params, n_frames, show_progress=True, recorder=recorder)

    elapsed_time = time.time() - start_time

    print()
    print("=" * 70)
    print(f"Ran {stats['final_frame']} frames in {elapsed_time:.1f} seconds")
    print("=" * 70)
    print()

    print("Analyzing results...")
    results = analyze_scene(output_path)

    print()
    print("=" * 70)
    print("QUICK RESULTS SUMMARY")
    print("=" * 70)
    print(f"Simulated time: {results['final_simulation_time_myr']:.2f} Myr")
    print(f"Sun radius: {results['sun_radius_min_kpc']:.4f} - {results['sun_radius_max_kpc']:.4f} kpc")
    print(f"Sun height: {1e3 * results['sun_height_min_kpc']:.2f} - "
          f"{1e3 * results['sun_height_max_kpc']:.2f} pc")
    print(f"Max planet orbit radius error: {results['max_planet_radius_error']:.3e}")
    print("=" * 70)
    print()

    if not args.skip_plots:
        print("Generating plots and report...")
        output_dir = Path(output_path).parent

        plot_files = {
            'galaxy': output_dir / 'galaxy_face_on.png',
            'sun': output_dir / 'sun_trajectory.png',
            'planets': output_dir / 'planet_orbits.png'
        }

        try:
            plot_galaxy_face_on(scene.galaxy, str(plot_files['galaxy']))
            print(f"  [OK] {plot_files['galaxy'].name}")
        except Exception as e:
            print(f"  [ERROR] galaxy_face_on: {e}")

        try:
            plot_sun_trajectory(output_path, str(plot_files['sun']))
            print(f"  [OK] {plot_files['sun'].name}")
        except Exception as e:
            print(f"  [ERROR] sun_trajectory: {e}")

        try:
            plot_planet_orbits(output_path, str(plot_files['planets']))
            print(f"  [OK] {plot_files['planets'].name}")
        except Exception as e:
            print(f"  [ERROR] planet_orbits: {e}")

        report_path = output_dir / 'summary_report.txt'
        try:
            generate_summary_report(output_path, str(report_path))
            print(f"  [OK] {report_path.name}")
        except Exception as e:
            print(f"  [ERROR] summary_report: {e}")

        print()
        print(f"All outputs saved to: {output_dir}")
    else:
        print("Skipping plot generation (--skip-plots)")

    print()
    print("Done!")


if __name__ == '__main__':
    main()
