"""
Sun and planets moving through the galaxy.

The Sun follows the closed-form epicyclic orbit (galorb.orbit). Planets
move on uniform circular orbits around it, but their orbital plane is
re-derived every frame from the Sun's radial direction in the galactic
plane: the in-plane cosine term points along the radial unit vector and
the sine term along the galactic vertical axis. The orbit is therefore
sheared to follow the galaxy's rotation as seen from the Sun.

Frame order: Sun position → Sun trail → planet positions → planet trails.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from galorb import constants as const
from galorb.config import PlanetConfig, SceneParameters, DEFAULT_PLANETS
from galorb.orbit import SunOrbit
from galorb.textures import hex_to_rgb, create_glow_texture
from galorb.trail import TrailBuffer

SUN_COLOR = 0xffaa00
SUN_RADIUS = 1.5
SUN_GLOW_COLOR = 0xffcc44
SUN_GLOW_SIZE = 12.0


@dataclass
class Planet:
    """A planet on a circular orbit around the Sun."""

    name: str
    distance: float
    speed: float
    initial_angle: float
    color: int
    size: float
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    trail: TrailBuffer = field(default_factory=TrailBuffer)

    @classmethod
    def from_config(cls, config: PlanetConfig, initial_angle: float,
                    trail_length: int = const.TRAIL_LENGTH) -> 'Planet':
        return cls(
            name=config.name,
            distance=config.distance,
            speed=config.speed,
            initial_angle=initial_angle,
            color=config.color,
            size=config.size,
            trail=TrailBuffer(trail_length),
        )

    @property
    def rgb(self) -> np.ndarray:
        return hex_to_rgb(self.color)

    def phase(self, elapsed_time: float) -> float:
        """Orbital angle after elapsed_time wall-clock seconds."""
        return self.initial_angle + elapsed_time * self.speed


class Sun:
    """The Sun: closed-form orbit, current position and trail."""

    def __init__(self, orbit: SunOrbit, trail_length: int = const.TRAIL_LENGTH):
        self.orbit = orbit
        self.position = orbit.position(0.0)
        self.trail = TrailBuffer(trail_length)
        self.color = SUN_COLOR
        self.radius = SUN_RADIUS

    def move_to(self, simulation_time_myr: float) -> np.ndarray:
        """Evaluate the orbit at simulation_time_myr and record it in the trail."""
        self.position = self.orbit.position(simulation_time_myr)
        self.trail.push(self.position)
        return self.position


def radial_direction(sun_position) -> np.ndarray:
    """
    Unit vector from the galactic centre toward the Sun, in the galactic plane.

    Falls back to (1, 0, 0) when the Sun sits on the vertical axis.
    """
    radial = np.array([sun_position[0], 0.0, sun_position[2]], dtype=np.float64)
    length_sq = radial[0]**2 + radial[2]**2
    if length_sq < const.RADIAL_ZERO_THRESHOLD:
        return np.array([1.0, 0.0, 0.0])
    return radial / np.sqrt(length_sq)


def planet_offset(radial: np.ndarray, angle: float, distance: float) -> np.ndarray:
    """
    Planet position relative to the Sun.

    (Rx cos θ, sin θ, Rz cos θ) * distance. Since (Rx, 0, Rz) is a unit
    vector orthogonal to (0, 1, 0), the offset length is always `distance`.
    """
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array([radial[0] * c, s, radial[2] * c]) * distance


def place_planet(planet: Planet, sun_position, elapsed_time: float,
                 radial: Optional[np.ndarray] = None) -> np.ndarray:
    """Set planet.position for the given Sun position and elapsed time."""
    if radial is None:
        radial = radial_direction(sun_position)
    planet.position = np.asarray(sun_position, dtype=np.float64) + planet_offset(
        radial, planet.phase(elapsed_time), planet.distance)
    return planet.position


def update_planets(planets: Sequence[Planet], sun_position, elapsed_time: float) -> list:
    """
    Move every planet for the current frame and record its trail.

    Args:
        planets: Planets to update (modified in place)
        sun_position: Current Sun position [scene units]
        elapsed_time: Wall-clock seconds since the start of the scene

    Returns:
        List of (position, trail) pairs in planet order
    """
    radial = radial_direction(sun_position)

    results = []
    for planet in planets:
        position = place_planet(planet, sun_position, elapsed_time, radial)
        planet.trail.push(position)
        results.append((position, planet.trail))

    return results


class SolarSystem:
    """
    The Sun and its planets, advanced once per frame.

    Two clocks are kept:
    - elapsed: wall-clock seconds, drives planet phases
    - simulation_time_myr: advanced by delta_time * simulation_myr_per_second,
      drives the Sun's galactic orbit
    Both are float64 accumulators.
    """

    def __init__(
        self,
        orbit: SunOrbit,
        planet_configs: Sequence[PlanetConfig] = DEFAULT_PLANETS,
        rng: Optional[np.random.Generator] = None,
        trail_length: int = const.TRAIL_LENGTH,
        simulation_myr_per_second: float = const.SIMULATION_MYR_PER_SECOND
    ):
        if rng is None:
            rng = np.random.default_rng()

        self.simulation_myr_per_second = simulation_myr_per_second
        self.elapsed = 0.0
        self.simulation_time_myr = 0.0
        self.frame_count = 0

        self.sun = Sun(orbit, trail_length)
        self.planets: List[Planet] = [
            Planet.from_config(cfg, rng.random() * const.TWO_PI, trail_length)
            for cfg in planet_configs
        ]

        radial = radial_direction(self.sun.position)
        for planet in self.planets:
            place_planet(planet, self.sun.position, self.elapsed, radial)

    @classmethod
    def from_parameters(cls, params: SceneParameters,
                        rng: Optional[np.random.Generator] = None) -> 'SolarSystem':
        orbit = SunOrbit.from_parameters(params.sun_orbit, params.scene_units_per_kpc)
        return cls(
            orbit,
            planet_configs=params.planets,
            rng=rng,
            trail_length=params.trail_length,
            simulation_myr_per_second=params.simulation_myr_per_second,
        )

    def update(self, delta_time: float) -> list:
        """
        Advance one frame.

        Args:
            delta_time: Wall-clock seconds since the previous frame

        Returns:
            List of (position, trail) pairs for the planets
        """
        self.elapsed += delta_time
        self.simulation_time_myr += delta_time * self.simulation_myr_per_second

        sun_position = self.sun.move_to(self.simulation_time_myr)
        results = update_planets(self.planets, sun_position, self.elapsed)

        self.frame_count += 1
        return results

    @property
    def planet_positions(self) -> np.ndarray:
        """(n_planets, 3) current planet positions."""
        if not self.planets:
            return np.zeros((0, 3))
        return np.array([p.position for p in self.planets])

    def planet_radius_errors(self) -> np.ndarray:
        """|distance(planet, sun) - planet.distance| for every planet."""
        if not self.planets:
            return np.zeros(0)
        distances = np.linalg.norm(self.planet_positions - self.sun.position, axis=1)
        return np.abs(distances - np.array([p.distance for p in self.planets]))

    @staticmethod
    def sun_glow_texture() -> np.ndarray:
        """RGBA glow sprite drawn around the Sun (SUN_GLOW_SIZE wide, additive)."""
        return create_glow_texture()

    def __repr__(self) -> str:
        return (f"SolarSystem(t={self.simulation_time_myr:.2f} Myr, "
                f"frame={self.frame_count}, {len(self.planets)} planets)")
