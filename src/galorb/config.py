"""
Configuration management for the galaxy scene.

This module handles loading and parsing YAML configuration files into
immutable galaxy/orbit records and a mutable SceneParameters container.
Galaxy quantities are in scene units; orbit inputs keep their
astrophysical units (km/s/kpc, M_sun/pc³, km/s, pc, degrees) and are
converted once in galorb.orbit.
"""

from dataclasses import dataclass, field
from typing import List, Any
import yaml
from pathlib import Path

from galorb import constants as const


@dataclass(frozen=True)
class GalaxyConfig:
    """Parameters of the procedurally generated spiral galaxy."""

    radius: float = 500.0  # scene units
    arms: int = 5
    spin: float = 25.0
    randomness: float = 0.3
    randomness_power: float = 3.0
    particle_count: int = 8000
    color_inside: int = 0xffaa33
    color_outside: int = 0x1b3984

    def __repr__(self):
        """Human-readable representation."""
        return (f"Galaxy: r={self.radius:g}, {self.arms} arms, spin={self.spin:g}, "
                f"randomness={self.randomness:g}^{self.randomness_power:g}, "
                f"{self.particle_count} particles, "
                f"colors #{self.color_inside:06x} -> #{self.color_outside:06x}")


@dataclass(frozen=True)
class SunOrbitParameters:
    """Raw astrophysical inputs of the Sun's epicyclic orbit."""

    R0_kpc: float = 8.178
    oort_A_kms_kpc: float = 16.0
    oort_B_kms_kpc: float = -12.0
    local_mass_density_msun_pc3: float = 0.119
    peculiar_U_kms: float = 11.1
    peculiar_V_kms: float = 12.24
    peculiar_W_kms: float = 7.25
    z_sun_pc: float = 20.8
    initial_azimuth_deg: float = 0.0


@dataclass(frozen=True)
class PlanetConfig:
    """Configuration for a single planet."""

    name: str
    distance: float  # scene units from the Sun
    size: float  # scene units (sphere radius)
    speed: float  # rad per wall-clock second
    color: int

    def __repr__(self):
        """Human-readable representation."""
        return (f"{self.name}: d={self.distance:g}, size={self.size:g}, "
                f"speed={self.speed:g} rad/s, #{self.color:06x}")


DEFAULT_PLANETS = (
    PlanetConfig("Mercury", 4.0, 0.2, 4.0, 0xaaaaaa),
    PlanetConfig("Venus", 6.0, 0.35, 3.0, 0xe3bb76),
    PlanetConfig("Earth", 8.0, 0.4, 2.5, 0x22aaff),
    PlanetConfig("Mars", 11.0, 0.3, 2.0, 0xff4422),
    PlanetConfig("Jupiter", 18.0, 1.2, 1.0, 0xd8ca9d),
    PlanetConfig("Saturn", 24.0, 1.0, 0.8, 0xc6a86f),
    PlanetConfig("Uranus", 30.0, 0.6, 0.6, 0x99ddff),
    PlanetConfig("Neptune", 36.0, 0.55, 0.5, 0x4466ff),
)


@dataclass
class SceneParameters:
    """
    Container for all scene parameters.

    Units:
    - Galaxy and planet distances: scene units
    - Sun orbit: astrophysical units (see SunOrbitParameters)
    - frame_dt, duration: wall-clock seconds
    - output_interval: frames between recorded samples
    """

    # Metadata
    scene_name: str = "milky_way"
    output_directory: str = "./results"

    galaxy: GalaxyConfig = field(default_factory=GalaxyConfig)
    sun_orbit: SunOrbitParameters = field(default_factory=SunOrbitParameters)
    planets: List[PlanetConfig] = field(default_factory=lambda: list(DEFAULT_PLANETS))

    # Solar system
    trail_length: int = const.TRAIL_LENGTH
    scene_units_per_kpc: float = const.SCENE_UNITS_PER_KPC
    simulation_myr_per_second: float = const.SIMULATION_MYR_PER_SECOND
    galaxy_rotation_speed: float = const.GALAXY_ROTATION_SPEED

    # Headless run control
    frame_dt: float = 1.0 / 60.0
    duration: float = 10.0
    output_interval: int = 1

    @property
    def n_frames(self) -> int:
        """Number of frames covered by duration at frame_dt."""
        if self.frame_dt <= 0:
            return 0
        return int(round(self.duration / self.frame_dt))

    def validate(self) -> list:
        """
        Perform sanity checks on configuration parameters.

        Returns:
            List of warning/error messages. Empty list if all checks pass.
        """
        warnings = []
        g = self.galaxy
        s = self.sun_orbit

        # Galaxy preconditions (the generator itself does not enforce these)
        if g.radius <= 0:
            warnings.append(f"ERROR: galaxy radius must be positive, got {g.radius}")

        if g.arms < 1:
            warnings.append(f"ERROR: galaxy arms must be >= 1, got {g.arms}")

        if g.particle_count < 0:
            warnings.append(f"ERROR: particle_count must be non-negative, got {g.particle_count}")

        if g.randomness < 0:
            warnings.append(f"ERROR: randomness must be non-negative, got {g.randomness}")

        if g.randomness_power <= 0:
            warnings.append(
                f"WARNING: randomness_power ({g.randomness_power}) <= 0 spreads jitter "
                f"to its full magnitude; arms will not be visible"
            )

        for label, value in (('color_inside', g.color_inside), ('color_outside', g.color_outside)):
            if not 0 <= value <= 0xffffff:
                warnings.append(f"ERROR: {label} must be a 24-bit RGB value, got {value:#x}")

        # Sun orbit
        if s.R0_kpc <= 0:
            warnings.append(f"ERROR: R0_kpc must be positive, got {s.R0_kpc}")

        omega0 = s.oort_A_kms_kpc - s.oort_B_kms_kpc
        if omega0 <= 0:
            warnings.append(
                f"WARNING: Oort A - B ({omega0:g} km/s/kpc) is not positive; "
                f"the Sun will not rotate prograde"
            )

        if -4.0 * s.oort_B_kms_kpc * omega0 <= 0:
            warnings.append(
                "WARNING: -4*B*(A-B) is not positive; epicyclic frequency will be clamped"
            )

        if s.local_mass_density_msun_pc3 <= 0:
            warnings.append(
                "WARNING: local_mass_density_msun_pc3 is not positive; "
                "vertical frequency will be clamped"
            )

        sun_radius_scene = s.R0_kpc * self.scene_units_per_kpc
        if sun_radius_scene > g.radius + 20:
            warnings.append(
                f"INFO: Sun orbit radius ({sun_radius_scene:.1f} scene units) lies outside "
                f"the generated disc ({g.radius + 20:.1f})"
            )

        # Solar system
        if self.trail_length < 1:
            warnings.append(f"ERROR: trail_length must be >= 1, got {self.trail_length}")

        if self.scene_units_per_kpc <= 0:
            warnings.append(f"ERROR: scene_units_per_kpc must be positive, got {self.scene_units_per_kpc}")

        for planet in self.planets:
            if planet.distance <= 0:
                warnings.append(f"ERROR: planet {planet.name} distance must be positive")

        names = [p.name for p in self.planets]
        for name in sorted({n for n in names if names.count(n) > 1}):
            warnings.append(f"WARNING: planet name {name} is not unique")

        # Run control
        if self.frame_dt <= 0:
            warnings.append(f"ERROR: frame_dt must be positive, got {self.frame_dt}")

        if self.duration <= 0:
            warnings.append(f"ERROR: duration must be positive, got {self.duration}")

        if 0 < self.duration <= self.frame_dt:
            warnings.append(f"WARNING: frame_dt ({self.frame_dt}) >= duration ({self.duration})")

        if self.output_interval < 1:
            warnings.append(f"ERROR: output_interval must be >= 1 frame, got {self.output_interval}")

        return warnings

    @classmethod
    def from_yaml(cls, filepath: str) -> 'SceneParameters':
        """
        Load configuration from YAML file.

        Args:
            filepath: Path to YAML configuration file

        Returns:
            SceneParameters object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        def to_float(value: Any) -> float:
            """Convert value to float, handling YAML quirks with scientific notation."""
            return float(value)

        def to_int(value: Any) -> int:
            """Convert value to int."""
            return int(value)

        def to_color(value: Any) -> int:
            """Convert an int or a '0xRRGGBB' / '#RRGGBB' string to a 24-bit color."""
            if isinstance(value, str):
                text = value.strip().lower()
                if text.startswith('#'):
                    text = text[1:]
                elif text.startswith('0x'):
                    text = text[2:]
                try:
                    return int(text, 16)
                except ValueError:
                    raise ValueError(f"Invalid color value: {value!r}")
            return int(value)

        config_path = Path(filepath)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        defaults = cls()

        # Galaxy
        galaxy_data = config.get('galaxy') or {}
        base = defaults.galaxy
        galaxy = GalaxyConfig(
            radius=to_float(galaxy_data.get('radius', base.radius)),
            arms=to_int(galaxy_data.get('arms', base.arms)),
            spin=to_float(galaxy_data.get('spin', base.spin)),
            randomness=to_float(galaxy_data.get('randomness', base.randomness)),
            randomness_power=to_float(galaxy_data.get('randomness_power', base.randomness_power)),
            particle_count=to_int(galaxy_data.get('particle_count', base.particle_count)),
            color_inside=to_color(galaxy_data.get('color_inside', base.color_inside)),
            color_outside=to_color(galaxy_data.get('color_outside', base.color_outside)),
        )

        # Sun orbit (field names match the YAML keys)
        orbit_data = config.get('sun_orbit') or {}
        known = SunOrbitParameters.__dataclass_fields__
        unknown = set(orbit_data) - set(known)
        if unknown:
            raise ValueError(f"sun_orbit: unknown parameters {sorted(unknown)}")
        sun_orbit = SunOrbitParameters(**{k: to_float(v) for k, v in orbit_data.items()})

        # Solar system
        solar_data = config.get('solar_system') or {}
        planets_data = solar_data.get('planets', 'default')

        if planets_data == 'default':
            planets = list(DEFAULT_PLANETS)
        elif isinstance(planets_data, list):
            planets = []
            for i, entry in enumerate(planets_data):
                missing = {'name', 'distance', 'size', 'speed', 'color'} - set(entry)
                if missing:
                    raise ValueError(f"planet #{i}: missing fields {sorted(missing)}")
                planets.append(PlanetConfig(
                    name=str(entry['name']),
                    distance=to_float(entry['distance']),
                    size=to_float(entry['size']),
                    speed=to_float(entry['speed']),
                    color=to_color(entry['color']),
                ))
        else:
            raise ValueError(f"solar_system.planets must be 'default' or a list, got {planets_data!r}")

        trail_length = to_int(solar_data.get('trail_length', defaults.trail_length))

        # Simulation control
        control = config.get('simulation_control') or {}

        return cls(
            scene_name=config.get('scene_name', defaults.scene_name),
            output_directory=config.get('output_directory', defaults.output_directory),
            galaxy=galaxy,
            sun_orbit=sun_orbit,
            planets=planets,
            trail_length=trail_length,
            scene_units_per_kpc=to_float(control.get('scene_units_per_kpc', defaults.scene_units_per_kpc)),
            simulation_myr_per_second=to_float(
                control.get('simulation_myr_per_second', defaults.simulation_myr_per_second)),
            galaxy_rotation_speed=to_float(
                control.get('galaxy_rotation_speed', defaults.galaxy_rotation_speed)),
            frame_dt=to_float(control.get('frame_dt_seconds', defaults.frame_dt)),
            duration=to_float(control.get('duration_seconds', defaults.duration)),
            output_interval=to_int(control.get('output_interval_frames', defaults.output_interval)),
        )

    def __repr__(self):
        """Human-readable representation."""
        s = self.sun_orbit
        lines = [
            f"Scene: {self.scene_name}",
            f"{self.galaxy!r}",
            f"Sun orbit: R0={s.R0_kpc:g} kpc, A={s.oort_A_kms_kpc:g}, B={s.oort_B_kms_kpc:g} km/s/kpc, "
            f"rho={s.local_mass_density_msun_pc3:g} M_sun/pc^3",
            f"Planets: {len(self.planets)} configured",
        ]
        for planet in self.planets:
            lines.append(f"  {planet}")
        lines.extend([
            f"Trail length: {self.trail_length}",
            f"Time rate: {self.simulation_myr_per_second:g} Myr/s",
            f"Duration: {self.duration:g} s ({self.n_frames} frames)",
        ])
        return "\n".join(lines)
