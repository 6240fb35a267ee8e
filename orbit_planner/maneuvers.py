"""
Impulsive maneuver bookkeeping.

A maneuver is an instantaneous switch from one orbit to another at a given
time. The delta-V is the velocity difference at that instant, which is also
broken down along the prograde, normal and radial directions of the orbit
being left.
"""
from typing import NamedTuple, Optional, Tuple

import numpy as np

from orbit_planner.orbit import Orbit


class ManeuverBreakdown(NamedTuple):
    """
    Delta-V of an impulsive maneuver.

    Attributes:
        total: Magnitude of the velocity change (m/s)
        prograde: Component along the pre-burn velocity (m/s)
        normal: Component along the pre-burn angular momentum (m/s)
        radial: Component along v x h, completing the right-handed frame (m/s)
    """
    total: float
    prograde: float
    normal: float
    radial: float


def maneuver_delta_v(previous: Orbit, following: Orbit, time: float) -> np.ndarray:
    """Velocity change (m/s) needed to switch from `previous` to `following` at `time`."""
    return following.time_to_velocity(time) - previous.time_to_velocity(time)


def decompose_delta_v(previous: Orbit, following: Orbit, time: float) -> ManeuverBreakdown:
    """
    Split a maneuver's delta-V into prograde, normal and radial components.

    The frame is built from the velocity and the position of the orbit being
    left at `time`.
    """
    state = previous.time_to_state(time)
    dv = following.time_to_velocity(time) - state.velocity

    prograde_hat = state.velocity / np.linalg.norm(state.velocity)
    h = np.cross(state.position, state.velocity)
    normal_hat = h / np.linalg.norm(h)
    radial = np.cross(state.velocity, h)
    radial_hat = radial / np.linalg.norm(radial)

    return ManeuverBreakdown(
        total=float(np.linalg.norm(dv)),
        prograde=float(np.dot(dv, prograde_hat)),
        normal=float(np.dot(dv, normal_hat)),
        radial=float(np.dot(dv, radial_hat)),
    )


def transfer_delta_v(initial: Orbit, departure_time: float,
                     target: Orbit, arrival_time: float) -> Optional[Tuple[float, float]]:
    """
    Compute the delta-V required for a Lambert transfer between two orbits.

    Args:
        initial: Orbit departed from
        departure_time: Departure time (s)
        target: Orbit arrived at
        arrival_time: Arrival time (s)

    Returns:
        (dv_departure, dv_arrival) magnitudes in m/s, or None when there is no
        transfer orbit.
    """
    transfer = Orbit.find_transfer_orbit(initial, departure_time, target, arrival_time)
    if transfer is None:
        return None

    dv_departure = np.linalg.norm(maneuver_delta_v(initial, transfer, departure_time))
    dv_arrival = np.linalg.norm(maneuver_delta_v(transfer, target, arrival_time))
    return float(dv_departure), float(dv_arrival)
