"""
Data recording for headless scene runs.

This module handles:
- Storing the generated galaxy structure once per run
- Time series recording of Sun and planet positions to HDF5 files
- Planet orbit-radius monitoring
- Configuration storage for reproducibility

All data is stored in HDF5 format with compression for efficiency.
"""

import warnings
from pathlib import Path

import h5py
import numpy as np

from galorb.config import SceneParameters

# Allowed |distance(planet, sun) - orbital distance| before warning [scene units]
PLANET_RADIUS_TOLERANCE = 1e-6


class SceneRecorder:
    """
    Records scene data to an HDF5 file.

    The HDF5 file structure:
    /config (group) - Scene configuration as attributes
    /orbit (group) - Derived Sun orbit constants as attributes
    /galaxy (group) - Generated populations (see GalaxyStructure.write_to_group)
    /planets (group) - Planet metadata (names, distances, speeds, initial angles, colors)
    /timeseries (group) - Time series data
        /time (dataset) - Wall-clock seconds since start
        /frame (dataset) - Frame counter
        /simulation_time_myr (dataset) - Simulated time [Myr]
        /sun_position (dataset) - (n_steps, 3) [scene units]
        /planet_positions (dataset) - (n_steps, n_planets, 3) [scene units]
        /galaxy_rotation (dataset) - Galaxy container rotation [rad]
    /diagnostics (group)
        /planet_radius_error (dataset) - Max orbit radius error per record [scene units]
    """

    def __init__(self, filepath: str, params: SceneParameters, scene):
        """
        Initialize recorder and create HDF5 file.

        Args:
            filepath: Path to HDF5 output file
            params: Scene parameters
            scene: Initialized Scene (galaxy generated, solar system at t=0)
        """
        self.filepath = Path(filepath)
        self.params = params

        self.filepath.parent.mkdir(parents=True, exist_ok=True)

        self.file = h5py.File(str(self.filepath), 'w')

        self._save_configuration(params)
        self._save_orbit(scene.solar_system.sun.orbit.constants)
        scene.galaxy.write_to_group(self.file.create_group('galaxy'))
        self._save_planets(scene.solar_system.planets)

        # Expected number of records: initial frame + one every output_interval frames
        output_every = max(1, params.output_interval)
        self.n_output_steps = params.n_frames // output_every + 1
        self.n_planets = len(scene.solar_system.planets)

        self._create_timeseries_datasets()
        self._create_diagnostics_datasets()

        self.current_output_idx = 0

    def _save_configuration(self, params: SceneParameters):
        """Save scene configuration to HDF5 file."""
        config_group = self.file.create_group('config')

        config_group.attrs['scene_name'] = params.scene_name
        config_group.attrs['output_directory'] = params.output_directory
        config_group.attrs['frame_dt'] = params.frame_dt
        config_group.attrs['duration'] = params.duration
        config_group.attrs['output_interval'] = params.output_interval
        config_group.attrs['trail_length'] = params.trail_length
        config_group.attrs['scene_units_per_kpc'] = params.scene_units_per_kpc
        config_group.attrs['simulation_myr_per_second'] = params.simulation_myr_per_second
        config_group.attrs['galaxy_rotation_speed'] = params.galaxy_rotation_speed

        g = params.galaxy
        config_group.attrs['galaxy_radius'] = g.radius
        config_group.attrs['galaxy_arms'] = g.arms
        config_group.attrs['galaxy_spin'] = g.spin
        config_group.attrs['galaxy_randomness'] = g.randomness
        config_group.attrs['galaxy_randomness_power'] = g.randomness_power
        config_group.attrs['particle_count'] = g.particle_count
        config_group.attrs['color_inside'] = g.color_inside
        config_group.attrs['color_outside'] = g.color_outside

    def _save_orbit(self, constants):
        """Save derived Sun orbit constants."""
        orbit_group = self.file.create_group('orbit')
        for name in ('R0', 'A', 'B', 'omega0', 'kappa', 'nu', 'u0', 'v0', 'w0', 'z0',
                     'initial_azimuth', 'B_clamped', 'kappa_clamped', 'nu_clamped'):
            orbit_group.attrs[name] = getattr(constants, name)

    def _save_planets(self, planets):
        """Save planet metadata (constant throughout the run)."""
        planet_group = self.file.create_group('planets')

        names = np.array([p.name for p in planets], dtype=h5py.string_dtype())
        planet_group.create_dataset('names', data=names)
        planet_group.create_dataset('distances', data=np.array([p.distance for p in planets], dtype=np.float64))
        planet_group.create_dataset('speeds', data=np.array([p.speed for p in planets], dtype=np.float64))
        planet_group.create_dataset('initial_angles',
                                    data=np.array([p.initial_angle for p in planets], dtype=np.float64))
        planet_group.create_dataset('colors', data=np.array([p.color for p in planets], dtype=np.int64))
        planet_group.create_dataset('sizes', data=np.array([p.size for p in planets], dtype=np.float64))

    def _create_timeseries_datasets(self):
        """Create HDF5 datasets for time series data."""
        ts_group = self.file.create_group('timeseries')
        ts_group.attrs['n_recorded'] = 0

        n_steps = self.n_output_steps

        ts_group.create_dataset('time', shape=(n_steps,), dtype=np.float64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('frame', shape=(n_steps,), dtype=np.int64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('simulation_time_myr', shape=(n_steps,), dtype=np.float64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('sun_position', shape=(n_steps, 3), dtype=np.float64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('galaxy_rotation', shape=(n_steps,), dtype=np.float64,
                                compression='gzip', compression_opts=4)

        if self.n_planets > 0:
            ts_group.create_dataset('planet_positions', shape=(n_steps, self.n_planets, 3),
                                    dtype=np.float64, compression='gzip', compression_opts=4)
        else:
            ts_group.create_dataset('planet_positions', shape=(n_steps, 0, 3), dtype=np.float64)

    def _create_diagnostics_datasets(self):
        """Create HDF5 datasets for orbit monitoring."""
        diag_group = self.file.create_group('diagnostics')
        diag_group.create_dataset('planet_radius_error', shape=(self.n_output_steps,), dtype=np.float64,
                                  compression='gzip', compression_opts=4)

    def record_frame(self, scene, check_orbits: bool = True):
        """
        Record the current frame to the timeseries.

        Args:
            scene: Current Scene
            check_orbits: Whether to check planet orbit radii
        """
        if self.current_output_idx >= self.n_output_steps:
            warnings.warn(f"Output buffer full (idx={self.current_output_idx}), skipping record")
            return

        idx = self.current_output_idx
        ts = self.file['timeseries']
        solar_system = scene.solar_system

        ts['time'][idx] = solar_system.elapsed
        ts['frame'][idx] = solar_system.frame_count
        ts['simulation_time_myr'][idx] = solar_system.simulation_time_myr
        ts['sun_position'][idx] = solar_system.sun.position
        ts['galaxy_rotation'][idx] = scene.galaxy_rotation
        if self.n_planets > 0:
            ts['planet_positions'][idx] = solar_system.planet_positions

        if check_orbits:
            self._record_orbit_error(solar_system, idx)

        self.current_output_idx += 1
        ts.attrs['n_recorded'] = self.current_output_idx

    def _record_orbit_error(self, solar_system, idx: int):
        """
        Calculate and record the worst planet orbit-radius error.

        Args:
            solar_system: Current SolarSystem
            idx: Output index
        """
        errors = solar_system.planet_radius_errors()
        max_error = float(np.max(errors)) if len(errors) > 0 else 0.0

        self.file['diagnostics']['planet_radius_error'][idx] = max_error

        if max_error > PLANET_RADIUS_TOLERANCE:
            warnings.warn(
                f"Planet orbit radius off by {max_error:.3e} scene units "
                f"at t={solar_system.simulation_time_myr:.2f} Myr"
            )

    def close(self):
        """Close HDF5 file."""
        if hasattr(self, 'file') and self.file is not None:
            self.file.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
