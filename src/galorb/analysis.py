"""
Post-run analysis for galaxy scenes.

This module provides functions to analyze:
- Characteristic periods of the Sun's epicyclic orbit
- Per-population statistics of a generated galaxy
- Recorded Sun and planet trajectories from HDF5 files

Functions that take a path work on SceneRecorder output (not Scene objects).
"""

from typing import Dict

import h5py
import numpy as np

from galorb import constants as const
from galorb.state import GalaxyStructure


def epicycle_periods(constants,
                     simulation_myr_per_second: float = const.SIMULATION_MYR_PER_SECOND) -> Dict[str, float]:
    """
    Characteristic periods of the Sun's orbit.

    Args:
        constants: SunOrbitConstants
        simulation_myr_per_second: Simulated Myr per wall-clock second

    Returns:
        Dictionary with periods in Myr:
        - 'orbital_period_myr': 2π / ω0 (guiding centre)
        - 'radial_period_myr': 2π / κ (in-plane epicycle)
        - 'vertical_period_myr': 2π / ν (disk crossing)
        - 'orbital_period_s': orbital period in wall-clock seconds at the given rate
    """
    orbital = 2.0 * np.pi / abs(constants.omega0) if constants.omega0 != 0 else np.inf
    radial = 2.0 * np.pi / constants.kappa
    vertical = 2.0 * np.pi / constants.nu

    return {
        'orbital_period_myr': float(orbital),
        'radial_period_myr': float(radial),
        'vertical_period_myr': float(vertical),
        'orbital_period_s': float(orbital / simulation_myr_per_second)
    }


def population_summary(structure: GalaxyStructure) -> Dict[str, Dict]:
    """
    Summary statistics for each population of a generated galaxy.

    Args:
        structure: GalaxyStructure

    Returns:
        Dictionary keyed by population name, each with:
        - 'count': number of elements
        - 'blending': compositing mode
        - 'n_textures': distinct sprite textures referenced
        - 'radius_min', 'radius_max', 'radius_mean': un-jittered radius statistics
        - 'height_std': standard deviation of the vertical (y) coordinate
        - 'mean_opacity': mean opacity
    """
    summary = {}

    for name, population in structure.populations.items():
        n = len(population)
        if n > 0:
            radius_min = float(np.min(population.radii))
            radius_max = float(np.max(population.radii))
            radius_mean = float(np.mean(population.radii))
            height_std = float(np.std(population.positions[:, 1]))
            mean_opacity = float(np.mean(population.opacities))
        else:
            radius_min = radius_max = radius_mean = 0.0
            height_std = 0.0
            mean_opacity = 0.0

        summary[name] = {
            'count': n,
            'blending': population.blending,
            'n_textures': len(population.distinct_textures),
            'radius_min': radius_min,
            'radius_max': radius_max,
            'radius_mean': radius_mean,
            'height_std': height_std,
            'mean_opacity': mean_opacity
        }

    return summary


def get_sun_trajectory(hdf5_filepath: str) -> Dict[str, np.ndarray]:
    """
    Extract the recorded Sun trajectory.

    Args:
        hdf5_filepath: Path to SceneRecorder output file

    Returns:
        Dictionary containing:
        - 'times': Wall-clock seconds (N,)
        - 'simulation_time_myr': Simulated time (N,)
        - 'positions': Positions (N, 3) in scene units
        - 'positions_kpc': Positions (N, 3) in kpc
        - 'radius_kpc': Galactocentric radius in the disk plane (N,)
        - 'height_kpc': Height above the midplane (N,)
    """
    with h5py.File(hdf5_filepath, 'r') as f:
        n = int(f['timeseries'].attrs.get('n_recorded', len(f['timeseries/time'])))
        scale = float(f['config'].attrs['scene_units_per_kpc'])

        times = f['timeseries/time'][:n]
        sim_times = f['timeseries/simulation_time_myr'][:n]
        positions = f['timeseries/sun_position'][:n]

    positions_kpc = positions / scale

    return {
        'times': times,
        'simulation_time_myr': sim_times,
        'positions': positions,
        'positions_kpc': positions_kpc,
        'radius_kpc': np.hypot(positions_kpc[:, 0], positions_kpc[:, 2]),
        'height_kpc': positions_kpc[:, 1]
    }


def get_planet_trajectories(hdf5_filepath: str) -> Dict[str, np.ndarray]:
    """
    Extract recorded planet trajectories, absolute and relative to the Sun.

    Args:
        hdf5_filepath: Path to SceneRecorder output file

    Returns:
        Dictionary containing:
        - 'names': Planet names (list of str)
        - 'distances': Orbital distances (n_planets,)
        - 'colors': Hex colors (n_planets,)
        - 'positions': (N, n_planets, 3) absolute positions [scene units]
        - 'sun_positions': (N, 3) Sun positions [scene units]
        - 'relative_positions': (N, n_planets, 3) positions relative to the Sun
    """
    with h5py.File(hdf5_filepath, 'r') as f:
        n = int(f['timeseries'].attrs.get('n_recorded', len(f['timeseries/time'])))

        names = [str(name) for name in f['planets/names'].asstr()[:]]
        distances = f['planets/distances'][:]
        colors = f['planets/colors'][:]
        positions = f['timeseries/planet_positions'][:n]
        sun_positions = f['timeseries/sun_position'][:n]

    return {
        'names': names,
        'distances': distances,
        'colors': colors,
        'positions': positions,
        'sun_positions': sun_positions,
        'relative_positions': positions - sun_positions[:, None, :]
    }


def analyze_scene(hdf5_filepath: str) -> Dict:
    """
    Analyze a recorded scene run.

    Args:
        hdf5_filepath: Path to SceneRecorder output file

    Returns:
        Dictionary containing analysis results with keys:
        - 'scene_name': Scene name from the configuration
        - 'n_records': Number of recorded frames
        - 'final_time_s': Final wall-clock time [s]
        - 'final_simulation_time_myr': Final simulated time [Myr]
        - 'final_galaxy_rotation': Final galaxy container rotation [rad]
        - 'sun_radius_min_kpc', 'sun_radius_max_kpc': Galactocentric radius range
        - 'sun_height_min_kpc', 'sun_height_max_kpc': Height range
        - 'max_planet_radius_error': Worst planet orbit radius error [scene units]
        - 'population_counts': Elements per galaxy population
        - 'orbit_clamped': Whether any orbit guard fired
    """
    sun = get_sun_trajectory(hdf5_filepath)

    with h5py.File(hdf5_filepath, 'r') as f:
        n = len(sun['times'])
        scene_name = str(f['config'].attrs['scene_name'])
        rotation = f['timeseries/galaxy_rotation'][:n]

        if 'diagnostics' in f:
            radius_errors = f['diagnostics/planet_radius_error'][:n]
            max_error = float(np.max(radius_errors)) if n > 0 else 0.0
        else:
            max_error = 0.0

        orbit = f['orbit'].attrs
        orbit_clamped = bool(orbit['B_clamped'] or orbit['kappa_clamped'] or orbit['nu_clamped'])

    galaxy = GalaxyStructure.load_from_hdf5(hdf5_filepath)

    if n > 0:
        final_time = float(sun['times'][-1])
        final_sim_time = float(sun['simulation_time_myr'][-1])
        final_rotation = float(rotation[-1])
        radius_min = float(np.min(sun['radius_kpc']))
        radius_max = float(np.max(sun['radius_kpc']))
        height_min = float(np.min(sun['height_kpc']))
        height_max = float(np.max(sun['height_kpc']))
    else:
        final_time = final_sim_time = final_rotation = 0.0
        radius_min = radius_max = height_min = height_max = 0.0

    return {
        'scene_name': scene_name,
        'n_records': int(n),
        'final_time_s': final_time,
        'final_simulation_time_myr': final_sim_time,
        'final_galaxy_rotation': final_rotation,
        'sun_radius_min_kpc': radius_min,
        'sun_radius_max_kpc': radius_max,
        'sun_height_min_kpc': height_min,
        'sun_height_max_kpc': height_max,
        'max_planet_radius_error': max_error,
        'population_counts': {name: len(p) for name, p in galaxy.populations.items()},
        'orbit_clamped': orbit_clamped
    }
