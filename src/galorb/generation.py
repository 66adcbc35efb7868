"""
Procedural generation of the spiral galaxy structure.

This module builds the four populations the renderer draws:
1. Core bulge glows (inner core + outer halo sprites)
2. Background star particles along index-assigned spiral arms
3. Nebula clouds along randomly-assigned arms, plus ambient haze
4. Dust lanes trailing the arms (normal blending)

Spiral placement: an element at galactocentric radius r on arm k sits at
angle  r * spin * 0.0005 + 2πk / arms.

All randomness comes from the injected numpy Generator, so a seeded
generator reproduces a galaxy exactly.
"""

import numpy as np
from typing import Optional

from galorb import constants as const
from galorb.config import GalaxyConfig
from galorb.state import Population, GalaxyStructure, ADDITIVE, NORMAL
from galorb.textures import TextureCache, hex_to_rgb, lerp_colors

# Spin angle per unit radius per unit spin
SPIN_SCALE = 0.0005

# Vertical jitter scale of star particles
PARTICLE_Y_SCALE = 30.0

# Core bulge
CORE_COUNT = 40
CORE_COLORS = (0xfff4d6, 0xffe8b0, 0xffd080, 0xffcc66, 0xeebb55)
HALO_COUNT = 30
HALO_COLOR = 0xeedd99

# Nebula clouds and haze
NEBULA_COUNT = 2500
NEBULA_INNER_COLORS = (0xffeedd, 0xffddbb, 0xeedd99, 0xddccaa)
NEBULA_MID_COLORS = (0xddeeff, 0xccddff, 0xbbccee, 0xaabbdd, 0xffffff)
NEBULA_OUTER_COLORS = (0x99bbdd, 0x7799cc, 0x6688bb, 0x5577aa)
HAZE_COUNT = 300
HAZE_COLOR = 0x99aacc

# Dust lanes
DUST_COUNT = 300
DUST_COLORS = (0x332211, 0x442211, 0x2a1508, 0x1a0d05)


def _pick(rng: np.random.Generator, palette: tuple) -> int:
    """Pick a palette entry with a single uniform draw."""
    return palette[int(rng.random() * len(palette))]


def _arm_count(config: GalaxyConfig) -> int:
    # arms >= 1 is a caller precondition; keep output finite if violated
    return max(int(config.arms), 1)


def _radius_scale(config: GalaxyConfig) -> float:
    # radius > 0 is a caller precondition; avoid dividing by zero if violated
    return config.radius if config.radius != 0 else const.EPS


def spin_angle(radius, spin: float):
    """Winding angle of the spiral at a given radius."""
    return radius * spin * SPIN_SCALE


def particle_branch_angle(index, arms: int):
    """
    Arm angle of star particle `index`.

    Particles are dealt to arms round-robin by index, so every arm holds
    the same number of particles (±1).
    """
    return (np.mod(index, arms) / arms) * const.TWO_PI


def nebula_palette(t: float) -> tuple:
    """Color palette for a cloud at normalized radius t = r / galaxy radius."""
    if t < 0.25:
        return NEBULA_INNER_COLORS
    elif t < 0.6:
        return NEBULA_MID_COLORS
    return NEBULA_OUTER_COLORS


def create_central_bulge(rng: np.random.Generator, textures: TextureCache) -> Population:
    """
    Create the warm glow sprites of the central bulge.

    Args:
        rng: NumPy random number generator
        textures: Texture cache for sprite gradients

    Returns:
        Population of CORE_COUNT inner core sprites followed by HALO_COUNT
        outer halo sprites (additive blending)

    Notes:
        - Inner core: bright palette, r in [0, 50), |y| < 6, size 50-150,
          opacity 0.3-0.6, aspect 0.6
        - Outer halo: single warm color, r in [30, 110), |y| < 4,
          size 100-250, opacity 0.1-0.25, aspect 0.5
    """
    population = Population('core_glows', CORE_COUNT + HALO_COUNT, blending=ADDITIVE)

    for i in range(CORE_COUNT):
        hex_color = _pick(rng, CORE_COLORS)
        population.texture_keys[i] = textures.acquire(hex_color, 1.2)
        population.colors[i] = hex_to_rgb(hex_color)
        population.opacities[i] = 0.3 + rng.random() * 0.3

        angle = rng.random() * const.TWO_PI
        radius = rng.random() * 50
        population.positions[i] = (
            np.cos(angle) * radius,
            (rng.random() - 0.5) * 12,
            np.sin(angle) * radius,
        )
        population.radii[i] = radius

        size = 50 + rng.random() * 100
        population.sizes[i] = (size, size * 0.6)

    halo_key = textures.acquire(HALO_COLOR, 0.6)
    halo_rgb = hex_to_rgb(HALO_COLOR)

    for j in range(HALO_COUNT):
        i = CORE_COUNT + j
        population.texture_keys[i] = halo_key
        population.colors[i] = halo_rgb
        population.opacities[i] = 0.1 + rng.random() * 0.15

        angle = rng.random() * const.TWO_PI
        radius = 30 + rng.random() * 80
        population.positions[i] = (
            np.cos(angle) * radius,
            (rng.random() - 0.5) * 8,
            np.sin(angle) * radius,
        )
        population.radii[i] = radius

        size = 100 + rng.random() * 150
        population.sizes[i] = (size, size * 0.5)

    return population.freeze()


def create_galaxy_particles(config: GalaxyConfig, rng: np.random.Generator) -> Population:
    """
    Create the background star particles along the spiral arms.

    Args:
        config: Galaxy configuration
        rng: NumPy random number generator

    Returns:
        Population of config.particle_count points (additive, untextured)

    Notes:
        - radius = U * galaxy_radius + 20
        - arm chosen by index (i mod arms), not by a random draw
        - jitter per axis: U^power * (±1) * randomness * scale, with
          scale = radius for x/z and 30 for y; a high power keeps most
          stars close to the arm centreline
        - color = lerp(inside, outside, radius / galaxy_radius)
    """
    n = max(int(config.particle_count), 0)
    arms = _arm_count(config)
    population = Population('particles', n, blending=ADDITIVE)

    radius = rng.random(n) * config.radius + 20
    angle = spin_angle(radius, config.spin) + particle_branch_angle(np.arange(n), arms)

    magnitude = rng.random((n, 3)) ** config.randomness_power
    sign = np.where(rng.random((n, 3)) < 0.5, 1.0, -1.0)
    scale = np.column_stack([radius, np.full(n, PARTICLE_Y_SCALE), radius])
    jitter = magnitude * sign * config.randomness * scale

    population.positions[:, 0] = np.cos(angle) * radius + jitter[:, 0]
    population.positions[:, 1] = jitter[:, 1]
    population.positions[:, 2] = np.sin(angle) * radius + jitter[:, 2]

    inside = hex_to_rgb(config.color_inside)
    outside = hex_to_rgb(config.color_outside)
    # Stars beyond galaxy_radius (up to +20) would extrapolate past the outside color
    population.colors[:] = np.clip(lerp_colors(inside, outside, radius / _radius_scale(config)), 0.0, 1.0)

    population.sizes[:] = const.PARTICLE_SIZE
    population.opacities[:] = 1.0
    population.radii[:] = radius
    population.branch_angles[:] = particle_branch_angle(np.arange(n), arms)

    return population.freeze()


def create_nebula_clouds(config: GalaxyConfig, rng: np.random.Generator,
                         textures: TextureCache) -> Population:
    """
    Create nebula cloud sprites along the arms plus inter-arm haze.

    Args:
        config: Galaxy configuration
        rng: NumPy random number generator
        textures: Texture cache for sprite gradients

    Returns:
        Population of NEBULA_COUNT arm clouds followed by HAZE_COUNT haze
        sprites (additive blending)

    Notes:
        - radius = 30 + U^0.8 * (galaxy_radius - 30), denser toward the centre
        - arm chosen by a random draw (clouds cluster unevenly)
        - offset within the arm: polar, distance U^2 * spread with
          spread = 0.15 r + 10
        - palette, softness and opacity depend on t = r / galaxy_radius:
          t < 0.3 → softness 1.0, opacity 0.08-0.16;
          otherwise softness 0.6-1.0, opacity 0.04-0.10
    """
    arms = _arm_count(config)
    galaxy_radius = config.radius
    norm = _radius_scale(config)

    population = Population('nebula_clouds', NEBULA_COUNT + HAZE_COUNT, blending=ADDITIVE)

    for i in range(NEBULA_COUNT):
        radius = 30 + rng.random() ** 0.8 * (galaxy_radius - 30)

        branch_angle = (int(rng.random() * arms) / arms) * const.TWO_PI
        angle = spin_angle(radius, config.spin) + branch_angle

        spread = radius * 0.15 + 10
        offset_angle = rng.random() * const.TWO_PI
        offset_dist = rng.random() ** 2 * spread

        population.positions[i] = (
            np.cos(angle) * radius + np.cos(offset_angle) * offset_dist,
            (rng.random() - 0.5) * (spread * 0.5 + 10),
            np.sin(angle) * radius + np.sin(offset_angle) * offset_dist,
        )
        population.radii[i] = radius
        population.branch_angles[i] = branch_angle

        t = radius / norm
        hex_color = _pick(rng, nebula_palette(t))
        softness = 1.0 if t < 0.3 else 0.6 + rng.random() * 0.4
        population.texture_keys[i] = textures.acquire(hex_color, softness)
        population.colors[i] = hex_to_rgb(hex_color)

        if t < 0.3:
            population.opacities[i] = 0.08 + rng.random() * 0.08
        else:
            population.opacities[i] = 0.04 + rng.random() * 0.06

        cloud_size = 60 + rng.random() * 80 + t * 50
        population.sizes[i] = (cloud_size, cloud_size * 0.4)

    haze_key = textures.acquire(HAZE_COLOR, 0.4)
    haze_rgb = hex_to_rgb(HAZE_COLOR)

    for j in range(HAZE_COUNT):
        i = NEBULA_COUNT + j
        angle = rng.random() * const.TWO_PI
        radius = 60 + rng.random() * (galaxy_radius * 0.8)

        population.positions[i] = (
            np.cos(angle) * radius,
            (rng.random() - 0.5) * 15,
            np.sin(angle) * radius,
        )
        population.radii[i] = radius
        population.texture_keys[i] = haze_key
        population.colors[i] = haze_rgb
        population.opacities[i] = 0.02 + rng.random() * 0.03

        size = 100 + rng.random() * 150
        population.sizes[i] = (size, size * 0.3)

    return population.freeze()


def create_dust_lanes(config: GalaxyConfig, rng: np.random.Generator,
                      textures: TextureCache) -> Population:
    """
    Create dark dust sprites along the trailing edge of the arms.

    Args:
        config: Galaxy configuration
        rng: NumPy random number generator
        textures: Texture cache for sprite gradients

    Returns:
        Population of DUST_COUNT sprites with NORMAL blending (dust darkens
        what lies behind it instead of adding light)

    Notes:
        - radius = 50 + U * 0.7 * galaxy_radius
        - angle = spiral angle - 0.2 - U * 0.2 (lags the arm)
        - dark texture profile, opacity 0.2-0.5, size 30-80, aspect 0.3
    """
    arms = _arm_count(config)
    population = Population('dust_lanes', DUST_COUNT, blending=NORMAL)

    for i in range(DUST_COUNT):
        radius = 50 + rng.random() * (config.radius * 0.7)
        branch_angle = (int(rng.random() * arms) / arms) * const.TWO_PI
        arm_offset = -0.2 - rng.random() * 0.2

        angle = spin_angle(radius, config.spin) + branch_angle + arm_offset
        population.positions[i] = (
            np.cos(angle) * radius + (rng.random() - 0.5) * 20,
            (rng.random() - 0.5) * 5,
            np.sin(angle) * radius + (rng.random() - 0.5) * 20,
        )
        population.radii[i] = radius
        population.branch_angles[i] = branch_angle

        hex_color = _pick(rng, DUST_COLORS)
        population.texture_keys[i] = textures.acquire(hex_color, 1.0, is_dark=True)
        population.colors[i] = hex_to_rgb(hex_color)
        population.opacities[i] = 0.2 + rng.random() * 0.3

        size = 30 + rng.random() * 50
        population.sizes[i] = (size, size * 0.3)

    return population.freeze()


def generate_galaxy(
    config: GalaxyConfig,
    rng: Optional[np.random.Generator] = None,
    textures: Optional[TextureCache] = None,
    seed: Optional[int] = None
) -> GalaxyStructure:
    """
    Generate the complete galaxy structure.

    Populations are generated in a fixed order (bulge, particles, nebula
    clouds, dust lanes) so a seeded generator reproduces the same galaxy.

    Args:
        config: Galaxy configuration
        rng: Random source; a new default_rng(seed) if omitted
        textures: Texture cache to fill; a new cache if omitted
        seed: Seed for the generator created when rng is omitted

    Returns:
        GalaxyStructure whose `textures` is the cache holding every
        referenced texture
    """
    if rng is None:
        rng = np.random.default_rng(seed)
    if textures is None:
        textures = TextureCache()

    core_glows = create_central_bulge(rng, textures)
    particles = create_galaxy_particles(config, rng)
    nebula_clouds = create_nebula_clouds(config, rng, textures)
    dust_lanes = create_dust_lanes(config, rng, textures)

    return GalaxyStructure(core_glows, particles, nebula_clouds, dust_lanes, textures=textures)


def validate_structure(structure: GalaxyStructure, config: GalaxyConfig) -> dict:
    """
    Compute diagnostics for a generated structure.

    Checks:
    - Element counts per population
    - Particle radius bounds and per-arm occupancy
    - Finite positions everywhere
    - Texture cache size and references

    Args:
        structure: Generated structure
        config: Configuration it was generated from

    Returns:
        diagnostics: Dictionary with validation metrics
    """
    diagnostics = {}

    for name, population in structure.populations.items():
        diagnostics[f'{name}_count'] = len(population)
        diagnostics[f'{name}_finite'] = bool(np.all(np.isfinite(population.positions)))

    particles = structure.particles
    if len(particles) > 0:
        diagnostics['particle_radius_min'] = float(np.min(particles.radii))
        diagnostics['particle_radius_max'] = float(np.max(particles.radii))

        arms = _arm_count(config)
        arm_index = np.arange(len(particles)) % arms
        diagnostics['particles_per_arm'] = np.bincount(arm_index, minlength=arms)

    referenced = set()
    for population in structure.populations.values():
        referenced |= population.distinct_textures
    diagnostics['textures_referenced'] = len(referenced)

    if structure.textures is not None:
        diagnostics['textures_cached'] = len(structure.textures)
        diagnostics['textures_missing'] = len([k for k in referenced if k not in structure.textures])

    return diagnostics
