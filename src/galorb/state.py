"""
Generated galaxy structure containers.

A Population stores one group of drawable elements (core glows, star
particles, nebula clouds or dust lanes) as parallel numpy arrays, the same
way the renderer uploads them. Per-element metadata (un-jittered radius,
arm angle, texture key) is kept next to the drawable attributes for
analysis and testing.

Populations are frozen (arrays made read-only) once generation finishes.
"""

from dataclasses import dataclass
from typing import Optional, List
from pathlib import Path

import numpy as np
import h5py

from galorb.textures import TextureKey, TextureCache

# Compositing modes
ADDITIVE = 'additive'
NORMAL = 'normal'

POPULATION_NAMES = ('core_glows', 'particles', 'nebula_clouds', 'dust_lanes')


@dataclass(frozen=True)
class GeneratedElement:
    """Read-only view of a single generated element."""

    position: tuple
    color: tuple
    size: tuple
    opacity: float
    texture_key: Optional[TextureKey]


class Population:
    """
    A named collection of generated elements.

    Arrays:
    - positions: (N, 3) scene units
    - colors: (N, 3) RGB in [0, 1]
    - sizes: (N, 2) sprite width/height (points use width == height)
    - opacities: (N,) in [0, 1]
    - radii: (N,) un-jittered galactocentric radius used for placement
    - branch_angles: (N,) arm angle [rad]; NaN for elements not tied to an arm
    - texture_keys: list of TextureKey, None for untextured points
    """

    def __init__(self, name: str, n: int, blending: str = ADDITIVE):
        self.name = name
        self.blending = blending

        self.positions = np.zeros((n, 3), dtype=np.float64)
        self.colors = np.zeros((n, 3), dtype=np.float64)
        self.sizes = np.zeros((n, 2), dtype=np.float64)
        self.opacities = np.zeros(n, dtype=np.float64)
        self.radii = np.zeros(n, dtype=np.float64)
        self.branch_angles = np.full(n, np.nan, dtype=np.float64)
        self.texture_keys: List[Optional[TextureKey]] = [None] * n

    def __len__(self) -> int:
        return len(self.positions)

    def __getitem__(self, index: int) -> GeneratedElement:
        return GeneratedElement(
            position=tuple(self.positions[index]),
            color=tuple(self.colors[index]),
            size=tuple(self.sizes[index]),
            opacity=float(self.opacities[index]),
            texture_key=self.texture_keys[index],
        )

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def freeze(self) -> 'Population':
        """Make all arrays read-only."""
        for array in (self.positions, self.colors, self.sizes, self.opacities,
                      self.radii, self.branch_angles):
            array.setflags(write=False)
        self.texture_keys = tuple(self.texture_keys)
        return self

    @property
    def distinct_textures(self) -> set:
        """Set of texture keys referenced by this population."""
        return {k for k in self.texture_keys if k is not None}

    def write_to_group(self, group: h5py.Group, compression: str = "gzip"):
        """Write arrays and metadata into an HDF5 group."""
        group.attrs['name'] = self.name
        group.attrs['blending'] = self.blending

        # Empty datasets cannot be chunked
        if len(self) == 0:
            compression = None

        group.create_dataset('positions', data=self.positions, compression=compression)
        group.create_dataset('colors', data=self.colors, compression=compression)
        group.create_dataset('sizes', data=self.sizes, compression=compression)
        group.create_dataset('opacities', data=self.opacities, compression=compression)
        group.create_dataset('radii', data=self.radii, compression=compression)
        group.create_dataset('branch_angles', data=self.branch_angles, compression=compression)

        # Texture keys split into parallel columns; color -1 marks "no texture"
        n = len(self)
        tex_color = np.full(n, -1, dtype=np.int64)
        tex_softness = np.zeros(n, dtype=np.float64)
        tex_dark = np.zeros(n, dtype=bool)
        for i, key in enumerate(self.texture_keys):
            if key is None:
                continue
            tex_color[i] = key.color
            tex_softness[i] = key.softness
            tex_dark[i] = key.is_dark

        group.create_dataset('texture_color', data=tex_color, compression=compression)
        group.create_dataset('texture_softness', data=tex_softness, compression=compression)
        group.create_dataset('texture_is_dark', data=tex_dark, compression=compression)

    @classmethod
    def read_from_group(cls, group: h5py.Group) -> 'Population':
        """Rebuild a (frozen) population from an HDF5 group."""
        n = len(group['positions'])
        population = cls(str(group.attrs['name']), n, blending=str(group.attrs['blending']))

        population.positions[:] = group['positions'][:]
        population.colors[:] = group['colors'][:]
        population.sizes[:] = group['sizes'][:]
        population.opacities[:] = group['opacities'][:]
        population.radii[:] = group['radii'][:]
        population.branch_angles[:] = group['branch_angles'][:]

        tex_color = group['texture_color'][:]
        tex_softness = group['texture_softness'][:]
        tex_dark = group['texture_is_dark'][:]
        population.texture_keys = [
            None if tex_color[i] < 0
            else TextureKey(int(tex_color[i]), float(tex_softness[i]), bool(tex_dark[i]))
            for i in range(n)
        ]

        return population.freeze()

    def __repr__(self) -> str:
        return (f"Population({self.name}: {len(self)} elements, {self.blending}, "
                f"{len(self.distinct_textures)} textures)")


class GalaxyStructure:
    """
    The four generated populations of a galaxy.

    Produced once by galorb.generation.generate_galaxy and consumed
    read-only by the renderer. textures is the cache the sprite texture
    keys refer to (None after loading from HDF5; images are not stored).
    """

    def __init__(self, core_glows: Population, particles: Population,
                 nebula_clouds: Population, dust_lanes: Population,
                 textures: Optional[TextureCache] = None):
        self.core_glows = core_glows
        self.particles = particles
        self.nebula_clouds = nebula_clouds
        self.dust_lanes = dust_lanes
        self.textures = textures

    @property
    def populations(self) -> dict:
        """Populations keyed by name, in generation order."""
        return {name: getattr(self, name) for name in POPULATION_NAMES}

    @property
    def n_total(self) -> int:
        """Total number of generated elements."""
        return sum(len(p) for p in self.populations.values())

    def write_to_group(self, group: h5py.Group, compression: str = "gzip"):
        """Write every population into a subgroup of an HDF5 group."""
        for name, population in self.populations.items():
            population.write_to_group(group.create_group(name), compression=compression)

    @classmethod
    def read_from_group(cls, group: h5py.Group) -> 'GalaxyStructure':
        return cls(**{name: Population.read_from_group(group[name]) for name in POPULATION_NAMES})

    def save_to_hdf5(self, filepath: str, compression: str = "gzip"):
        """
        Save the structure to an HDF5 file.

        Args:
            filepath: Path to HDF5 file
            compression: HDF5 compression method ("gzip", "lzf", or None)
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with h5py.File(filepath, 'w') as f:
            f.attrs['n_total'] = self.n_total
            self.write_to_group(f.create_group('galaxy'), compression=compression)

    @classmethod
    def load_from_hdf5(cls, filepath: str) -> 'GalaxyStructure':
        """
        Load a structure from an HDF5 file written by save_to_hdf5 or SceneRecorder.

        Args:
            filepath: Path to HDF5 file

        Returns:
            GalaxyStructure with frozen populations
        """
        with h5py.File(filepath, 'r') as f:
            return cls.read_from_group(f['galaxy'])

    def __repr__(self) -> str:
        lines = [f"GalaxyStructure({self.n_total} elements)"]
        for population in self.populations.values():
            lines.append(f"  {population!r}")
        return "\n".join(lines)
