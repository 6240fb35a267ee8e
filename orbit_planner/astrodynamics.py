import math

import jax.numpy as jnp
from jax import jit
import numpy as np

from orbit_planner.constants import (
    CIRCULAR_ECCENTRICITY_TOLERANCE,
    EQUATORIAL_TOLERANCE,
    PARABOLIC_ECCENTRICITY_TOLERANCE,
    TWO_PI,
)


@jit
def true_anomaly_to_position(nu, rpe, ecc, inc, ape, lan):
    """
    Position on the orbit at the given true anomaly.

    Parameters
    ----------
    nu : float or jnp.ndarray
        True anomaly (rad). Arrays broadcast, giving one row per anomaly.
    rpe, ecc, inc, ape, lan : float
        Periapsis radius (m), eccentricity, inclination, argument of periapsis
        and longitude of the ascending node (rad).

    Returns
    -------
    r : jnp.ndarray
        Position vector(s) with shape nu.shape + (3,), in m.
    """
    nu = jnp.asarray(nu, dtype=jnp.float64)
    r_mag = rpe * (1.0 + ecc) / (1.0 + ecc * jnp.cos(nu))

    cos_u = jnp.cos(ape + nu)
    sin_u = jnp.sin(ape + nu)
    cos_Omega = jnp.cos(lan)
    sin_Omega = jnp.sin(lan)
    cos_i = jnp.cos(inc)
    sin_i = jnp.sin(inc)

    x = r_mag * (cos_Omega * cos_u - sin_Omega * sin_u * cos_i)
    y = r_mag * (sin_Omega * cos_u + cos_Omega * sin_u * cos_i)
    z = r_mag * sin_u * sin_i
    return jnp.stack([x, y, z], axis=-1)


@jit
def true_anomaly_to_velocity(nu, rpe, ecc, inc, ape, lan, mu):
    """
    Velocity on the orbit at the given true anomaly.

    Uses the closed form with h = sqrt(mu * p), p = rpe * (1 + ecc):

        vx = -mu/h [cosO (sin(w+nu) + e sin w) + sinO (cos(w+nu) + e cos w) cos i]
        vy = -mu/h [sinO (sin(w+nu) + e sin w) - cosO (cos(w+nu) + e cos w) cos i]
        vz =  mu/h (cos(w+nu) + e cos w) sin i

    Returns
    -------
    v : jnp.ndarray
        Velocity vector(s) with shape nu.shape + (3,), in m/s.
    """
    nu = jnp.asarray(nu, dtype=jnp.float64)
    h = jnp.sqrt(mu * rpe * (1.0 + ecc))
    k = mu / h

    sin_term = jnp.sin(ape + nu) + ecc * jnp.sin(ape)
    cos_term = jnp.cos(ape + nu) + ecc * jnp.cos(ape)
    cos_Omega = jnp.cos(lan)
    sin_Omega = jnp.sin(lan)
    cos_i = jnp.cos(inc)
    sin_i = jnp.sin(inc)

    vx = -k * (cos_Omega * sin_term + sin_Omega * cos_term * cos_i)
    vy = -k * (sin_Omega * sin_term - cos_Omega * cos_term * cos_i)
    vz = k * cos_term * sin_i
    return jnp.stack([vx, vy, vz], axis=-1)


def angular_momentum_direction(inc: float, lan: float) -> np.ndarray:
    """Unit orbit normal for the given inclination and node longitude."""
    return np.array([
        math.sin(inc) * math.sin(lan),
        -math.sin(inc) * math.cos(lan),
        math.cos(inc),
    ])


def periapsis_direction(inc: float, ape: float, lan: float) -> np.ndarray:
    """Unit vector from the body towards periapsis."""
    cos_Omega, sin_Omega = math.cos(lan), math.sin(lan)
    cos_w, sin_w = math.cos(ape), math.sin(ape)
    cos_i, sin_i = math.cos(inc), math.sin(inc)
    return np.array([
        cos_Omega * cos_w - sin_Omega * sin_w * cos_i,
        sin_Omega * cos_w + cos_Omega * sin_w * cos_i,
        sin_w * sin_i,
    ])


def cartesian_to_elements(position, velocity, mu: float):
    """
    Convert a Cartesian state to orbital elements.

    h = r x v, e = (v x h)/mu - r/|r| and n = z x h/|h|. Eccentricities within
    PARABOLIC_ECCENTRICITY_TOLERANCE of 1 snap to exactly 1. Circular orbits
    measure anomalies from the ascending node (or the x axis when equatorial);
    equatorial orbits have APE = 0 and LAN is the angle from x to periapsis.

    Args:
        position: Position vector (m)
        velocity: Velocity vector (m/s)
        mu: Gravitational parameter (m^3/s^2)

    Returns:
        (rpe, ecc, inc, ape, lan, nu) with angles in radians

    Raises:
        ValueError: If the angular momentum is zero (rectilinear motion).
    """
    r = np.asarray(position, dtype=float)
    v = np.asarray(velocity, dtype=float)
    r_mag = np.linalg.norm(r)

    h = np.cross(r, v)
    h_mag = np.linalg.norm(h)
    if not h_mag > 0.0:
        raise ValueError("State vectors have zero angular momentum; rectilinear orbits are not supported")
    h_hat = h / h_mag

    e_vec = np.cross(v, h) / mu - r / r_mag
    ecc = float(np.linalg.norm(e_vec))
    if abs(ecc - 1.0) < PARABOLIC_ECCENTRICITY_TOLERANCE:
        ecc = 1.0

    n_vec = np.cross(np.array([0.0, 0.0, 1.0]), h_hat)
    n_mag = np.linalg.norm(n_vec)
    equatorial = n_mag < EQUATORIAL_TOLERANCE
    n_hat = np.array([1.0, 0.0, 0.0]) if equatorial else n_vec / n_mag

    if ecc < CIRCULAR_ECCENTRICITY_TOLERANCE:
        ecc = 0.0
        p_hat = n_hat
    else:
        p_hat = e_vec / np.linalg.norm(e_vec)

    inc = math.atan2(n_mag * h_mag, h[2])

    if equatorial:
        ape = 0.0
        lan = math.atan2(p_hat[1], p_hat[0])
    else:
        # Signed angles about h; same as acos(n.e) reflected when e_z < 0
        ape = math.atan2(np.dot(h_hat, np.cross(n_hat, p_hat)), np.dot(n_hat, p_hat))
        lan = math.atan2(n_hat[1], n_hat[0])

    nu = math.atan2(np.dot(h_hat, np.cross(p_hat, r)), np.dot(p_hat, r))

    p = h_mag**2 / mu
    rpe = p / (1.0 + ecc)
    return rpe, ecc, inc, ape % TWO_PI, lan % TWO_PI, nu % TWO_PI
