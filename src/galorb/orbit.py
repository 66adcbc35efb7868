"""
Epicyclic orbit of the Sun around the galactic centre.

First-order epicyclic approximation: the Sun moves on a circular guiding
orbit at R0 with angular frequency ω0, plus small harmonic oscillations in
the radial (κ), azimuthal and vertical (ν) directions driven by its
peculiar velocity (U, V, W) and vertical offset.

The position is evaluated in closed form from t alone. There is no
integrator and no state, so any time can be evaluated directly without
replaying history and without accumulated drift.

Performance-critical kernels are JIT-compiled with Numba; they take plain
floats so they stay Numba-compatible.

Units: kpc, Myr, kpc/Myr (converted from km/s via KMS_TO_KPC_PER_MYR).
"""

from dataclasses import dataclass

import numpy as np
from numba import jit

from galorb import constants as const
from galorb.config import SunOrbitParameters


@dataclass(frozen=True)
class SunOrbitConstants:
    """
    Derived constants of the Sun's epicyclic orbit.

    Frequencies are in rad/Myr, velocities in kpc/Myr, lengths in kpc.
    The *_clamped flags record whether a numeric guard replaced the raw
    value (B too close to zero, radicand of κ² or ν² below EPS).
    """

    R0: float
    A: float
    B: float
    omega0: float
    kappa: float
    nu: float
    u0: float
    v0: float
    w0: float
    z0: float
    initial_azimuth: float
    B_clamped: bool = False
    kappa_clamped: bool = False
    nu_clamped: bool = False

    @property
    def any_clamped(self) -> bool:
        return self.B_clamped or self.kappa_clamped or self.nu_clamped

    def as_tuple(self) -> tuple:
        """Arguments for the Numba kernels, in kernel order."""
        return (self.R0, self.A, self.B, self.omega0, self.kappa, self.nu,
                self.u0, self.v0, self.w0, self.z0, self.initial_azimuth)


def derive_sun_orbit_constants(params: SunOrbitParameters) -> SunOrbitConstants:
    """
    Derive the epicyclic constants from raw astrophysical parameters.

    κ = sqrt(max(EPS, -4 B ω0)),  ω0 = A - B
    ν = sqrt(max(EPS, 4π G ρ))

    Args:
        params: Raw parameters (Oort constants in km/s/kpc, density in
            M_sun/pc³, peculiar velocity in km/s, z offset in pc,
            azimuth in degrees)

    Returns:
        SunOrbitConstants in kpc / Myr units

    Notes:
        - B is replaced by -EPS when |B| < EPS (it divides v0 later)
        - Radicands are floored at EPS so κ and ν are always real and positive
        - U is measured toward the galactic centre, hence u0 = -U
    """
    k = const.KMS_TO_KPC_PER_MYR

    A = params.oort_A_kms_kpc * k
    raw_B = params.oort_B_kms_kpc * k
    B_clamped = abs(raw_B) < const.EPS
    B = -const.EPS if B_clamped else raw_B

    omega0 = (params.oort_A_kms_kpc - params.oort_B_kms_kpc) * k

    kappa_radicand = -4.0 * B * omega0
    kappa = np.sqrt(max(const.EPS, kappa_radicand))

    rho_kpc3 = params.local_mass_density_msun_pc3 * const.PC3_TO_KPC3
    nu_radicand = 4.0 * np.pi * const.G_KPC_KMS2_PER_MSUN * rho_kpc3
    nu = np.sqrt(max(const.EPS, nu_radicand)) * k

    return SunOrbitConstants(
        R0=params.R0_kpc,
        A=A,
        B=B,
        omega0=omega0,
        kappa=float(kappa),
        nu=float(nu),
        u0=-params.peculiar_U_kms * k,
        v0=params.peculiar_V_kms * k,
        w0=params.peculiar_W_kms * k,
        z0=params.z_sun_pc * 1e-3,
        initial_azimuth=float(np.deg2rad(params.initial_azimuth_deg)),
        B_clamped=B_clamped,
        kappa_clamped=kappa_radicand < const.EPS,
        nu_clamped=nu_radicand < const.EPS,
    )


@jit(nopython=True)
def epicycle_offsets(t, A, B, omega0, kappa, nu, u0, v0, w0, z0):
    """
    Local epicyclic offsets from the guiding centre at time t.

    x_local = (u0/κ) sin κt + (v0/2B)(1 - cos κt)
    y_local = 2A (v0/2B) t - (ω0/(Bκ)) v0 sin κt + (2ω0/κ²) u0 (1 - cos κt)
    z_local = (w0/ν) sin νt + z0 cos νt

    Args:
        t: Simulated time [Myr]

    Returns:
        (x_local, y_local, z_local) in kpc: radial, azimuthal, vertical
    """
    kappa_t = kappa * t
    sin_kappa = np.sin(kappa_t)
    cos_kappa = np.cos(kappa_t)

    x_local = (u0 / kappa) * sin_kappa + (v0 / (2.0 * B)) * (1.0 - cos_kappa)
    y_local = (2.0 * A * (v0 / (2.0 * B)) * t
               - (omega0 / (B * kappa)) * v0 * sin_kappa
               + (2.0 * omega0 / (kappa * kappa)) * u0 * (1.0 - cos_kappa))

    z_local = (w0 / nu) * np.sin(nu * t) + z0 * np.cos(nu * t)

    return x_local, y_local, z_local


@jit(nopython=True)
def sun_position_kpc(t, R0, A, B, omega0, kappa, nu, u0, v0, w0, z0, initial_azimuth):
    """
    Galactocentric position of the Sun at simulated time t.

    R = max(0.1, R0 + x_local)
    φ = φ0 - ω0 t - y_local / R0

    Args:
        t: Simulated time [Myr]
        (remaining arguments: SunOrbitConstants.as_tuple())

    Returns:
        (x, y, z) in kpc with y the vertical axis: (R cos φ, z_local, R sin φ)
    """
    x_local, y_local, z_local = epicycle_offsets(t, A, B, omega0, kappa, nu, u0, v0, w0, z0)

    R = max(const.MIN_GALACTOCENTRIC_RADIUS, R0 + x_local)
    phi = initial_azimuth - omega0 * t - (y_local / R0)

    return R * np.cos(phi), z_local, R * np.sin(phi)


@jit(nopython=True)
def sun_positions_kpc(times, R0, A, B, omega0, kappa, nu, u0, v0, w0, z0, initial_azimuth):
    """
    Vectorized sun_position_kpc over an array of times.

    Args:
        times: Simulated times [Myr] (shape: (N,))

    Returns:
        positions: (N, 3) array in kpc
    """
    n = len(times)
    positions = np.empty((n, 3))

    for i in range(n):
        x, y, z = sun_position_kpc(times[i], R0, A, B, omega0, kappa, nu,
                                   u0, v0, w0, z0, initial_azimuth)
        positions[i, 0] = x
        positions[i, 1] = y
        positions[i, 2] = z

    return positions


class SunOrbit:
    """
    Closed-form Sun trajectory in scene units.

    position(t) depends on t alone; calling it in any order, any number of
    times, gives the same answer.
    """

    def __init__(self, constants: SunOrbitConstants,
                 scene_units_per_kpc: float = const.SCENE_UNITS_PER_KPC):
        self.constants = constants
        self.scene_units_per_kpc = scene_units_per_kpc
        self._args = constants.as_tuple()

    @classmethod
    def from_parameters(cls, params: SunOrbitParameters,
                        scene_units_per_kpc: float = const.SCENE_UNITS_PER_KPC) -> 'SunOrbit':
        return cls(derive_sun_orbit_constants(params), scene_units_per_kpc)

    def position_kpc(self, t_myr: float) -> np.ndarray:
        """Position at simulated time t_myr, in kpc."""
        return np.array(sun_position_kpc(float(t_myr), *self._args))

    def position(self, t_myr: float) -> np.ndarray:
        """Position at simulated time t_myr, in scene units."""
        return self.position_kpc(t_myr) * self.scene_units_per_kpc

    def positions(self, times_myr) -> np.ndarray:
        """(N, 3) positions in scene units for an array of times."""
        times = np.ascontiguousarray(times_myr, dtype=np.float64)
        return sun_positions_kpc(times, *self._args) * self.scene_units_per_kpc

    def galactocentric_radius(self, t_myr: float) -> float:
        """In-plane radius R(t) in kpc (always >= 0.1)."""
        x, _, z = sun_position_kpc(float(t_myr), *self._args)
        return float(np.hypot(x, z))

    def __repr__(self) -> str:
        c = self.constants
        return (f"SunOrbit(R0={c.R0:g} kpc, omega0={c.omega0:.5f}, "
                f"kappa={c.kappa:.5f}, nu={c.nu:.5f} rad/Myr)")
