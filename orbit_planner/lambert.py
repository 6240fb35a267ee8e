"""
Lambert solver for two-point boundary value problems in orbital mechanics.

Solves Lambert's problem: given two position vectors and a transfer time,
find the initial and final velocity vectors for a conic trajectory.

Uses Izzo's algorithm (2015), single revolution, prograde sense about +z.
"""
import logging
from functools import partial
from typing import Optional, Tuple

import jax
import jax.numpy as jnp
from jax import jit
import numpy as np

from orbit_planner.bodies import GravitationalBody
from orbit_planner.constants import LAMBERT_DEGENERATE_TOLERANCE, LAMBERT_MAX_ITERATIONS

logger = logging.getLogger(__name__)

# Battin's series replaces Lancaster's expression this close to x = 1
_BATTIN_THRESHOLD = 0.01
_HYPERGEOMETRIC_TERMS = 20


def _hypergeometric_f(z):
    """Gauss hypergeometric function 2F1(3, 1; 5/2; z), truncated series."""
    def body_fn(j, state):
        total, term = state
        term = term * (3.0 + j) / (2.5 + j) * z
        return total + term, term

    total, _ = jax.lax.fori_loop(0, _HYPERGEOMETRIC_TERMS, body_fn, (jnp.ones_like(z), jnp.ones_like(z)))
    return total


def _time_of_flight(x, lam):
    """
    Non-dimensional time of flight T(x) for a zero-revolution transfer.

    Lancaster's expression away from x = 1, Battin's hypergeometric series
    close to it (where Lancaster's form is 0/0).
    """
    E = x * x - 1.0
    rho = jnp.abs(E)
    z = jnp.sqrt(1.0 + lam * lam * E)

    eta = z - lam * x
    S1 = 0.5 * (1.0 - lam - x * eta)
    Q = 4.0 / 3.0 * _hypergeometric_f(S1)
    tof_battin = (eta**3 * Q + 4.0 * lam * eta) / 2.0

    sq = jnp.sqrt(rho)
    g = x * z - lam * E
    d = jnp.where(E < 0.0, jnp.arccos(jnp.clip(g, -1.0, 1.0)), jnp.log(sq * (z - lam * x) + g))
    tof_lancaster = (x - lam * z - d / sq) / E

    return jnp.where(jnp.abs(x - 1.0) < _BATTIN_THRESHOLD, tof_battin, tof_lancaster)


def _tof_derivatives(x, y, lam, T):
    """First three derivatives of T(x)."""
    umx2 = 1.0 - x * x
    l2 = lam * lam
    l3 = l2 * lam
    dT = (3.0 * T * x - 2.0 + 2.0 * l3 * x / y) / umx2
    ddT = (3.0 * T + 5.0 * x * dT + 2.0 * (1.0 - l2) * l3 / y**3) / umx2
    dddT = (7.0 * x * ddT + 8.0 * dT - 6.0 * (1.0 - l2) * l2 * l3 * x / y**5) / umx2
    return dT, ddT, dddT


def _initial_guess(T, lam):
    """Izzo's starting value for x given the non-dimensional flight time T."""
    T0 = jnp.arccos(lam) + lam * jnp.sqrt(1.0 - lam * lam)
    T1 = 2.0 / 3.0 * (1.0 - lam**3)

    x_short = 2.5 * T1 * (T1 - T) / (T * (1.0 - lam**5)) + 1.0
    # Passes through x = 1 at T1 and x = 0 at T0
    x_mid = (T / T0) ** (jnp.log(2.0) / jnp.log(T1 / T0)) - 1.0
    x_long = (T0 / T) ** (2.0 / 3.0) - 1.0

    x0 = jnp.where(T < T1, x_short, jnp.where(T <= T0, x_mid, x_long))
    # T == T1 is the parabolic transfer, x = 1 exactly
    return jnp.where(jnp.isclose(T, T1, rtol=1e-12, atol=0.0), 1.0, x0)


@partial(jit, static_argnames=("max_iter",))
def lambert_izzo(
    r1: jnp.ndarray,
    r2: jnp.ndarray,
    tof: float,
    mu: float,
    max_iter: int = LAMBERT_MAX_ITERATIONS,
) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """
    Solve Lambert's problem with Izzo's method.

    The transfer is prograde about +z: when (r1 x r2)_z < 0 the long way round
    is taken (lambda < 0, tangential directions flipped). The non-dimensional
    flight time is refined with a fixed number of third order Householder
    steps; a non-finite step leaves x unchanged.

    Args:
        r1: Departure position vector (m)
        r2: Arrival position vector (m)
        tof: Time of flight (s), positive
        mu: Gravitational parameter (m^3/s^2)
        max_iter: Number of Householder iterations

    Returns:
        (v1, v2): Departure and arrival velocity (m/s). Degenerate geometry
        (coincident or opposite position vectors) yields NaN components.
    """
    r1 = jnp.asarray(r1, dtype=jnp.float64)
    r2 = jnp.asarray(r2, dtype=jnp.float64)

    r1_mag = jnp.linalg.norm(r1)
    r2_mag = jnp.linalg.norm(r2)
    c = jnp.linalg.norm(r2 - r1)
    s = 0.5 * (r1_mag + r2_mag + c)

    ir1 = r1 / r1_mag
    ir2 = r2 / r2_mag
    cross = jnp.cross(r1, r2)
    ih = cross / jnp.linalg.norm(cross)

    # Direction of motion: the sign of lambda follows (r1 x r2)_z
    direction = jnp.where(cross[2] < 0.0, -1.0, 1.0)
    lam = direction * jnp.sqrt(1.0 - c / s)
    it1 = direction * jnp.cross(ih, ir1)
    it2 = direction * jnp.cross(ih, ir2)

    T_star = jnp.sqrt(2.0 * mu / s**3) * tof
    x0 = _initial_guess(T_star, lam)

    def householder_step(_, x):
        y = jnp.sqrt(1.0 - lam * lam * (1.0 - x * x))
        T = _time_of_flight(x, lam)
        dT, ddT, dddT = _tof_derivatives(x, y, lam, T)
        delta = T - T_star
        step = delta * (dT**2 - delta * ddT / 2.0) / (dT * (dT**2 - delta * ddT) + dddT * delta**2 / 6.0)
        return jnp.where(jnp.isfinite(step), x - step, x)

    x = jax.lax.fori_loop(0, max_iter, householder_step, x0)
    y = jnp.sqrt(1.0 - lam * lam * (1.0 - x * x))

    gamma = jnp.sqrt(mu * s / 2.0)
    rho = (r1_mag - r2_mag) / c
    sigma = jnp.sqrt(jnp.maximum(1.0 - rho * rho, 0.0))

    vr1 = gamma * ((lam * y - x) - rho * (lam * y + x)) / r1_mag
    vr2 = -gamma * ((lam * y - x) + rho * (lam * y + x)) / r2_mag
    vt = gamma * sigma * (y + lam * x)
    vt1 = vt / r1_mag
    vt2 = vt / r2_mag

    v1 = vr1 * ir1 + vt1 * it1
    v2 = vr2 * ir2 + vt2 * it2
    return v1, v2


def solve_lambert(
    body: GravitationalBody,
    r1,
    t1: float,
    r2,
    t2: float,
    max_iter: int = LAMBERT_MAX_ITERATIONS,
) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """
    Solve Lambert's problem around a gravitational body.

    Args:
        body: Central body
        r1: Departure position (m)
        t1: Departure time (s)
        r2: Arrival position (m)
        t2: Arrival time (s)
        max_iter: Number of Householder iterations

    Returns:
        (v1, v2) as numpy arrays in m/s, or None when the geometry has no
        solution: the endpoints coincide or are collinear with the body (to
        LAMBERT_DEGENERATE_TOLERANCE), or a velocity component is not finite.

    Raises:
        ValueError: If t2 <= t1.

    Example:
        Quarter-turn transfer around Kerbin, 30 minutes of flight::

            from orbit_planner import solve_lambert, bodies_data
            r1 = [1.0e6, 0.0, 0.0]
            r2 = [0.0, 1.5e6, 0.0]
            v1, v2 = solve_lambert(bodies_data["Kerbin"], r1, 0.0, r2, 1800.0)
    """
    dt = t2 - t1
    if dt <= 0:
        raise ValueError("t2 must be greater than t1")

    r1 = np.asarray(r1, dtype=float)
    r2 = np.asarray(r2, dtype=float)
    r1_mag = np.linalg.norm(r1)
    r2_mag = np.linalg.norm(r2)
    chord = np.linalg.norm(r2 - r1)
    # Coincident or collinear endpoints, including ones a full revolution apart
    if (chord <= LAMBERT_DEGENERATE_TOLERANCE * max(r1_mag, r2_mag)
            or np.linalg.norm(np.cross(r1, r2)) <= LAMBERT_DEGENERATE_TOLERANCE * r1_mag * r2_mag):
        logger.debug("Lambert endpoints around %s do not define a transfer plane (chord=%g m)", body.name, chord)
        return None

    v1, v2 = lambert_izzo(jnp.asarray(r1), jnp.asarray(r2), dt, body.mu, max_iter=max_iter)

    # Convert back to numpy
    v1 = np.array(v1)
    v2 = np.array(v2)

    if not (np.all(np.isfinite(v1)) and np.all(np.isfinite(v2))):
        logger.debug("Lambert solution around %s is not finite (tof=%g s)", body.name, dt)
        return None
    return v1, v2
