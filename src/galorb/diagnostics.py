"""
Runtime diagnostics for scene health checks.

This module provides functions to detect:
- Orbit constants that only exist because a numeric guard fired
- Non-finite Sun or planet positions
- Planets drifting off their orbital radius
- The Sun pinned at the minimum galactocentric radius
"""

import numpy as np

from galorb import constants as const


def check_orbit_constants(constants):
    """
    Report whether the derived Sun orbit relies on clamped values.

    Args:
        constants: SunOrbitConstants

    Returns:
        dict with:
            - is_physical: bool (no clamp fired)
            - epicycle_ratio: float (κ / ω0; ~1.3-1.4 for the solar neighbourhood)
            - warnings: list of warning messages
    """
    warnings = []

    if constants.B_clamped:
        warnings.append("WARNING: Oort B is ~0; replaced by -EPS to avoid division by zero.")

    if constants.kappa_clamped:
        warnings.append(
            "WARNING: -4*B*omega0 < EPS; epicyclic frequency floored "
            f"(kappa={constants.kappa:.3e} rad/Myr). Radial oscillation is not physical."
        )

    if constants.nu_clamped:
        warnings.append(
            "WARNING: 4*pi*G*rho < EPS; vertical frequency floored "
            f"(nu={constants.nu:.3e} rad/Myr). Vertical oscillation is not physical."
        )

    if constants.omega0 != 0:
        epicycle_ratio = constants.kappa / constants.omega0
    else:
        epicycle_ratio = np.inf

    if constants.omega0 <= 0:
        warnings.append(f"WARNING: omega0 ({constants.omega0:.3e}) is not positive.")

    return {
        'is_physical': not constants.any_clamped,
        'epicycle_ratio': epicycle_ratio,
        'warnings': warnings
    }


def check_frame_health(solar_system, tolerance=1e-6):
    """
    Check the current frame of a SolarSystem for numerical problems.

    Args:
        solar_system: SolarSystem after at least one update
        tolerance: Allowed |distance - orbital distance| per planet

    Returns:
        dict with:
            - is_healthy: bool
            - max_planet_radius_error: float
            - warnings: list of warning messages
    """
    warnings = []

    sun_position = solar_system.sun.position
    if not np.all(np.isfinite(sun_position)):
        warnings.append("CRITICAL: Sun position is NaN or Inf - orbit constants are invalid!")
        return {
            'is_healthy': False,
            'max_planet_radius_error': np.nan,
            'warnings': warnings
        }

    planet_positions = solar_system.planet_positions
    if not np.all(np.isfinite(planet_positions)):
        warnings.append("CRITICAL: Planet position is NaN or Inf!")
        return {
            'is_healthy': False,
            'max_planet_radius_error': np.nan,
            'warnings': warnings
        }

    errors = solar_system.planet_radius_errors()
    max_error = float(np.max(errors)) if len(errors) > 0 else 0.0
    if max_error > tolerance:
        warnings.append(f"WARNING: Planet orbital radius off by {max_error:.3e} scene units.")

    # R is clamped at MIN_GALACTOCENTRIC_RADIUS; sitting on the clamp means the
    # epicycle amplitude exceeds R0
    radius_kpc = np.hypot(sun_position[0], sun_position[2]) / solar_system.sun.orbit.scene_units_per_kpc
    if radius_kpc <= const.MIN_GALACTOCENTRIC_RADIUS * (1.0 + 1e-9):
        warnings.append(
            f"CAUTION: Sun is at the minimum galactocentric radius ({const.MIN_GALACTOCENTRIC_RADIUS} kpc)."
        )

    return {
        'is_healthy': max_error <= tolerance,
        'max_planet_radius_error': max_error,
        'warnings': warnings
    }
