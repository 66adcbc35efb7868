"""
Visualization functions for galaxy scenes.

This module provides functions to create plots from generated structures
and recorded HDF5 runs:
- Face-on and edge-on views of the generated galaxy
- Sun trajectory (galactocentric radius, height, plane view)
- Planet orbits relative to the Sun
- Summary report generation

All plots are saved as PNG files (300 DPI).
"""

from pathlib import Path

import h5py
import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend for saving files
import matplotlib.pyplot as plt

from galorb.analysis import (
    analyze_scene,
    epicycle_periods,
    get_planet_trajectories,
    get_sun_trajectory,
)
from galorb.constants import RADIAL_ZERO_THRESHOLD
from galorb.orbit import SunOrbitConstants
from galorb.solar_system import SUN_COLOR
from galorb.state import GalaxyStructure, NORMAL
from galorb.textures import hex_to_rgb


plt.rcParams['figure.dpi'] = 300
plt.rcParams['savefig.dpi'] = 300
plt.rcParams['font.size'] = 10
plt.rcParams['axes.labelsize'] = 12
plt.rcParams['axes.titlesize'] = 14
plt.rcParams['legend.fontsize'] = 10

# Marker scale for sprite sizes (scene units) in scatter plots
SPRITE_MARKER_SCALE = 0.02


def plot_galaxy_face_on(structure: GalaxyStructure, output_path: str, edge_on: bool = True):
    """
    Scatter plot of every generated population seen from above.

    Args:
        structure: GalaxyStructure to draw
        output_path: Path to save PNG plot
        edge_on: Also draw an edge-on (x, y) panel

    Additive populations are drawn on a black background in their own
    colors; dust lanes are drawn dark on top.
    """
    n_panels = 2 if edge_on else 1
    fig, axes = plt.subplots(1, n_panels, figsize=(8 * n_panels, 8), squeeze=False)
    axes = axes[0]

    for ax in axes:
        ax.set_facecolor('black')

    for name, population in structure.populations.items():
        if len(population) == 0:
            continue

        positions = population.positions
        colors = np.clip(population.colors, 0.0, 1.0)
        if name == 'particles':
            marker_sizes = np.full(len(population), 0.2)
        else:
            marker_sizes = population.sizes[:, 0] * SPRITE_MARKER_SCALE
        alpha = 0.8 if population.blending == NORMAL else 0.5

        axes[0].scatter(positions[:, 0], positions[:, 2], c=colors, s=marker_sizes,
                        alpha=alpha, edgecolors='none', label=name)
        if edge_on:
            axes[1].scatter(positions[:, 0], positions[:, 1], c=colors, s=marker_sizes,
                            alpha=alpha, edgecolors='none')

    axes[0].set_xlabel('x (scene units)')
    axes[0].set_ylabel('z (scene units)')
    axes[0].set_title(f'Galaxy face-on ({structure.n_total} elements)')
    axes[0].set_aspect('equal')

    if edge_on:
        axes[1].set_xlabel('x (scene units)')
        axes[1].set_ylabel('y (scene units)')
        axes[1].set_title('Galaxy edge-on')
        axes[1].set_aspect('equal')

    plt.tight_layout()
    plt.savefig(output_path, dpi=300, bbox_inches='tight')
    plt.close()


def plot_sun_trajectory(hdf5_filepath: str, output_path: str):
    """
    Plot the recorded Sun trajectory.

    Args:
        hdf5_filepath: Path to SceneRecorder output file
        output_path: Path to save PNG plot

    Creates three panels:
    - Galactocentric radius vs simulated time
    - Height above the midplane vs simulated time
    - Path in the galactic plane (x, z)
    """
    sun = get_sun_trajectory(hdf5_filepath)
    t = sun['simulation_time_myr']

    fig, axes = plt.subplots(1, 3, figsize=(16, 5))

    axes[0].plot(t, sun['radius_kpc'], color='darkorange', linewidth=1.5)
    axes[0].set_xlabel('Simulated time (Myr)')
    axes[0].set_ylabel('R (kpc)')
    axes[0].set_title('Galactocentric radius')
    axes[0].grid(True, alpha=0.3)

    axes[1].plot(t, sun['height_kpc'] * 1e3, color='steelblue', linewidth=1.5)
    axes[1].axhline(0.0, color='gray', linestyle='--', alpha=0.5)
    axes[1].set_xlabel('Simulated time (Myr)')
    axes[1].set_ylabel('z (pc)')
    axes[1].set_title('Height above midplane')
    axes[1].grid(True, alpha=0.3)

    positions = sun['positions_kpc']
    axes[2].plot(positions[:, 0], positions[:, 2], color='darkorange', linewidth=1.5)
    if len(positions) > 0:
        axes[2].scatter(positions[0, 0], positions[0, 2], c='green', s=30, marker='o', label='Start')
        axes[2].scatter(positions[-1, 0], positions[-1, 2], c='red', s=30, marker='s', label='End')
        axes[2].legend()
    axes[2].scatter([0.0], [0.0], c='black', s=20, marker='+')
    axes[2].set_xlabel('x (kpc)')
    axes[2].set_ylabel('z (kpc)')
    axes[2].set_title('Path in galactic plane')
    axes[2].set_aspect('equal', adjustable='datalim')
    axes[2].grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=300, bbox_inches='tight')
    plt.close()


def plot_planet_orbits(hdf5_filepath: str, output_path: str):
    """
    Plot planet paths relative to the Sun.

    Args:
        hdf5_filepath: Path to SceneRecorder output file
        output_path: Path to save PNG plot

    The horizontal axis is the offset along the Sun's radial direction in
    the galactic plane, the vertical axis the height (y) offset. Because the
    orbit plane follows the Sun's radial direction, every planet traces a
    circle of its orbital distance in these coordinates.
    """
    planets = get_planet_trajectories(hdf5_filepath)
    relative = planets['relative_positions']

    fig, ax = plt.subplots(figsize=(8, 8))

    if len(planets['names']) == 0 or len(relative) == 0:
        ax.text(0.5, 0.5, 'No planets recorded',
                ha='center', va='center', transform=ax.transAxes, fontsize=14)
        plt.savefig(output_path, dpi=300, bbox_inches='tight')
        plt.close()
        return

    ax.scatter([0.0], [0.0], c=[hex_to_rgb(SUN_COLOR)], s=80, label='Sun')

    sun_xz = planets['sun_positions'][:, [0, 2]]
    lengths = np.hypot(sun_xz[:, 0], sun_xz[:, 1])
    radial = np.zeros_like(planets['sun_positions'])
    radial[:, 0] = 1.0
    ok = lengths**2 >= RADIAL_ZERO_THRESHOLD
    radial[ok, 0] = sun_xz[ok, 0] / lengths[ok]
    radial[ok, 2] = sun_xz[ok, 1] / lengths[ok]

    for i, name in enumerate(planets['names']):
        offsets = relative[:, i, :]
        radial_offset = offsets[:, 0] * radial[:, 0] + offsets[:, 2] * radial[:, 2]
        ax.plot(radial_offset, offsets[:, 1], color=hex_to_rgb(int(planets['colors'][i])),
                linewidth=1.0, label=name)

    ax.set_xlabel('Radial offset (scene units)')
    ax.set_ylabel('Vertical offset (scene units)')
    ax.set_title('Planet orbits relative to the Sun')
    ax.set_aspect('equal')
    ax.legend(loc='upper right', fontsize=8)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=300, bbox_inches='tight')
    plt.close()


def generate_summary_report(hdf5_filepath: str, output_path: str):
    """
    Generate text summary report of a recorded scene.

    Args:
        hdf5_filepath: Path to SceneRecorder output file
        output_path: Path to save text report

    Creates a formatted text file with:
    - Scene information
    - Galaxy population counts
    - Sun orbit ranges and characteristic periods
    - Planet orbit radius check
    """
    results = analyze_scene(hdf5_filepath)

    with h5py.File(hdf5_filepath, 'r') as f:
        attrs = f['orbit'].attrs
        orbit_constants = SunOrbitConstants(**{key: attrs[key] for key in attrs.keys()})
        rate = float(f['config'].attrs['simulation_myr_per_second'])
    periods = epicycle_periods(orbit_constants, rate)

    lines = []
    lines.append("=" * 70)
    lines.append("GALAXY SCENE - SUMMARY REPORT")
    lines.append("=" * 70)
    lines.append("")

    lines.append("SCENE INFORMATION")
    lines.append("-" * 70)
    lines.append(f"HDF5 File: {Path(hdf5_filepath).name}")
    lines.append(f"Scene: {results['scene_name']}")
    lines.append(f"Recorded Frames: {results['n_records']}")
    lines.append(f"Wall-clock Time: {results['final_time_s']:.2f} s")
    lines.append(f"Simulated Time: {results['final_simulation_time_myr']:.2f} Myr")
    lines.append(f"Galaxy Rotation: {results['final_galaxy_rotation']:.4f} rad")
    lines.append("")

    lines.append("GALAXY POPULATIONS")
    lines.append("-" * 70)
    for name, count in results['population_counts'].items():
        lines.append(f"{name}: {count}")
    lines.append("")

    lines.append("SUN ORBIT")
    lines.append("-" * 70)
    lines.append(f"Galactocentric Radius: {results['sun_radius_min_kpc']:.4f} - "
                 f"{results['sun_radius_max_kpc']:.4f} kpc")
    lines.append(f"Height: {1e3 * results['sun_height_min_kpc']:.2f} - "
                 f"{1e3 * results['sun_height_max_kpc']:.2f} pc")
    lines.append(f"Orbital Period: {periods['orbital_period_myr']:.1f} Myr "
                 f"({periods['orbital_period_s']:.1f} s wall-clock)")
    lines.append(f"Radial Epicycle Period: {periods['radial_period_myr']:.1f} Myr")
    lines.append(f"Vertical Oscillation Period: {periods['vertical_period_myr']:.1f} Myr")
    if results['orbit_clamped']:
        lines.append("WARNING: Orbit constants were clamped; oscillations are not physical")
    lines.append("")

    lines.append("PLANETS")
    lines.append("-" * 70)
    lines.append(f"Max Orbit Radius Error: {results['max_planet_radius_error']:.3e} scene units")
    if results['max_planet_radius_error'] > 1e-6:
        lines.append("WARNING: Planet orbit radius drifted by >1e-6 scene units")

    lines.append("")
    lines.append("=" * 70)

    report_text = "\n".join(lines)
    Path(output_path).write_text(report_text, encoding='utf-8')
