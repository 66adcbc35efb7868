"""
Physical, astronomical and scene constants used throughout the package.

GALACTIC UNITS SYSTEM (orbit model):
- Distance: kiloparsecs (kpc)
- Time: megayears (Myr)
- Velocity: kpc/Myr (converted from km/s)
- Mass: solar masses (M_sun)

SCENE UNITS:
- Galaxy structure is generated directly in scene units (galaxy radius 500)
- Orbit positions in kpc are multiplied by SCENE_UNITS_PER_KPC
"""

import numpy as np

# Unit conversions
# 1 km/s = 1.022712165045695e-3 kpc/Myr
KMS_TO_KPC_PER_MYR = 0.001022712165045695

# Gravitational constant [kpc (km/s)² / M_sun]
G_KPC_KMS2_PER_MSUN = 4.30091e-6

# Solar masses per pc³ → per kpc³
PC3_TO_KPC3 = 1.0e9

# Floor used for radicands and |B|
EPS = 1e-9

# Lower bound on galactocentric radius [kpc]
MIN_GALACTOCENTRIC_RADIUS = 0.1

# Squared length below which the Sun is treated as sitting at the galactic centre
RADIAL_ZERO_THRESHOLD = 1e-9

# Scene scaling (galaxy radius 500 ↔ ~8 kpc solar circle)
SCENE_UNITS_PER_KPC = 60.0
SIMULATION_MYR_PER_SECOND = 2.0
GALAXY_ROTATION_SPEED = 0.05  # rad per wall-clock second

# Trail buffers
TRAIL_LENGTH = 300

# Texture images
TEXTURE_SIZE = 128
GLOW_TEXTURE_SIZE = 64

# Particle point size
PARTICLE_SIZE = 1.5

TWO_PI = 2.0 * np.pi
