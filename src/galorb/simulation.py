"""
Frame loop for the galaxy scene.

A scene is generated once (the four galaxy populations plus the solar
system) and then advanced frame by frame. Each frame:
  1. Rotate the galaxy container by delta_time * galaxy_rotation_speed
  2. Advance the solar system (Sun orbit, Sun trail, planets, planet trails)

Nothing here draws; the frame loop runs headlessly so a run can be
recorded to HDF5 and plotted afterwards.
"""

from typing import Optional

import numpy as np
from tqdm import tqdm

from galorb.config import SceneParameters
from galorb.generation import generate_galaxy
from galorb.solar_system import SolarSystem
from galorb.state import GalaxyStructure
from galorb.textures import TextureCache


class Scene:
    """Generated galaxy, its texture cache and the solar system moving through it."""

    def __init__(self, params: SceneParameters, galaxy: GalaxyStructure,
                 solar_system: SolarSystem, textures: Optional[TextureCache] = None):
        self.params = params
        self.galaxy = galaxy
        self.solar_system = solar_system
        self.textures = textures if textures is not None else galaxy.textures
        self.galaxy_rotation = 0.0

    @property
    def frame_count(self) -> int:
        return self.solar_system.frame_count

    def __repr__(self) -> str:
        return (f"Scene({self.params.scene_name!r}, {self.galaxy.n_total} galaxy elements, "
                f"rotation={self.galaxy_rotation:.3f} rad, {self.solar_system!r})")


def initialize_scene(params: SceneParameters, seed: Optional[int] = 42) -> Scene:
    """
    Generate the galaxy and the solar system.

    A single generator seeded with `seed` feeds the galaxy populations first
    and the planets' initial angles afterwards, so a seed reproduces the
    whole scene.

    Args:
        params: Scene parameters
        seed: Random seed (None for a non-reproducible scene)

    Returns:
        Scene at frame 0
    """
    rng = np.random.default_rng(seed)
    textures = TextureCache()

    galaxy = generate_galaxy(params.galaxy, rng=rng, textures=textures)
    solar_system = SolarSystem.from_parameters(params, rng=rng)

    return Scene(params, galaxy, solar_system, textures)


def advance_scene(scene: Scene, delta_time: float) -> list:
    """
    Advance the scene by one frame.

    Args:
        scene: Scene (modified in place)
        delta_time: Wall-clock seconds since the previous frame

    Returns:
        List of (position, trail) pairs for the planets
    """
    scene.galaxy_rotation += delta_time * scene.params.galaxy_rotation_speed
    return scene.solar_system.update(delta_time)


def evolve_scene(
    scene: Scene,
    params: SceneParameters,
    n_frames: int,
    show_progress: bool = True,
    recorder=None
) -> dict:
    """
    Run the frame loop for n_frames fixed-length frames.

    Args:
        scene: Scene (modified in place)
        params: SceneParameters (frame_dt, output_interval)
        n_frames: Number of frames to advance
        show_progress: Whether to show progress bar (tqdm)
        recorder: Optional SceneRecorder for data output

    Returns:
        Dictionary with run statistics:
        - final_time: Wall-clock seconds simulated
        - final_simulation_time_myr: Simulated galactic time [Myr]
        - final_frame: Final frame number
        - max_planet_radius_error: Worst planet orbit radius error seen [scene units]
    """
    dt = params.frame_dt

    if recorder is not None and params.output_interval > 0:
        output_every = params.output_interval
    else:
        output_every = None

    # Record initial frame
    if recorder is not None:
        recorder.record_frame(scene, check_orbits=True)

    max_radius_error = 0.0

    if show_progress:
        pbar = tqdm(total=n_frames, desc="Advancing scene", unit="frames")

    for frame in range(n_frames):
        advance_scene(scene, dt)

        errors = scene.solar_system.planet_radius_errors()
        if len(errors) > 0:
            max_radius_error = max(max_radius_error, float(np.max(errors)))

        if output_every is not None and (frame + 1) % output_every == 0:
            recorder.record_frame(scene, check_orbits=True)

        if show_progress:
            pbar.update(1)

    if show_progress:
        pbar.close()

    return {
        'final_time': scene.solar_system.elapsed,
        'final_simulation_time_myr': scene.solar_system.simulation_time_myr,
        'final_frame': scene.solar_system.frame_count,
        'max_planet_radius_error': max_radius_error
    }


def run_scene(
    params: SceneParameters,
    seed: int = 42,
    show_progress: bool = True
) -> tuple:
    """
    Generate a scene and run it for params.n_frames frames.

    Args:
        params: SceneParameters object
        seed: Random seed for reproducibility
        show_progress: Whether to show progress bar

    Returns:
        (scene, stats) tuple:
        - scene: Final Scene object
        - stats: Dictionary with run statistics
    """
    print("Generating galaxy...")
    scene = initialize_scene(params, seed=seed)

    n_frames = params.n_frames
    print(f"Running scene: {n_frames} frames, dt={params.frame_dt:.4f} s "
          f"({params.frame_dt * params.simulation_myr_per_second:.4f} Myr/frame)")
    print(f"Galaxy elements: {scene.galaxy.n_total}, planets: {len(scene.solar_system.planets)}")

    stats = evolve_scene(scene, params, n_frames, show_progress=show_progress)

    print(f"\nScene complete!")
    print(f"  Simulated time: {stats['final_simulation_time_myr']:.2f} Myr")
    print(f"  Galaxy rotation: {scene.galaxy_rotation:.3f} rad")
    print(f"  Max planet radius error: {stats['max_planet_radius_error']:.2e}")

    return scene, stats
