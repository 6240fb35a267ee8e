"""
Sampling of orbit positions over a range of true anomalies, for drawing.
"""
import math
from typing import List, Optional, Tuple

import numpy as np

from orbit_planner.angle import Angle, AngleLike
from orbit_planner.astrodynamics import true_anomaly_to_position
from orbit_planner.constants import ORBIT_DEFAULT_STEP_RAD, TWO_PI


def sample_true_anomalies(start: Optional[AngleLike] = None, end: Optional[AngleLike] = None,
                          max_step: float = ORBIT_DEFAULT_STEP_RAD) -> List[Angle]:
    """
    Evenly spaced true anomalies from start to end.

    The whole orbit is covered when either bound is None or the bounds are
    equal; it yields n samples starting at `start` (or 0) without repeating
    the first one. A partial arc runs counter-clockwise from start to end and
    yields n + 1 samples including both ends. n is the smallest count whose
    step does not exceed max_step.
    """
    max_step = float(max_step)
    if not max_step > 0.0:
        raise ValueError(f"max_step must be positive, got {max_step}")

    start = Angle.coerce(start)
    end = Angle.coerce(end)
    whole_orbit = start is None or end is None or start == end

    if whole_orbit:
        first = start if start is not None else Angle.ZERO
        angular_range = TWO_PI
    else:
        first = start
        angular_range = (end - start).rad

    count = max(1, math.ceil(angular_range / max_step))
    actual_step = angular_range / count
    n_samples = count if whole_orbit else count + 1
    return [first + i * actual_step for i in range(n_samples)]


def orbital_points(orbit, start: Optional[AngleLike] = None, end: Optional[AngleLike] = None,
                   max_step: float = ORBIT_DEFAULT_STEP_RAD) -> Tuple[List[np.ndarray], List[Angle]]:
    """
    Positions along an orbit, for drawing.

    Args:
        orbit: The Orbit to sample
        start: First true anomaly, None for the whole orbit
        end: Last true anomaly, None for the whole orbit
        max_step: Largest allowed spacing between samples (rad)

    Returns:
        (points, anomalies): positions (m) and the true anomaly of each.
        Anomalies an open orbit never reaches keep their slot and get the
        point-at-infinity sentinel (inf, inf, inf), so renderers can clip.
    """
    anomalies = sample_true_anomalies(start, end, max_step)
    nu = np.array([a.rad for a in anomalies])

    positions = np.array(true_anomaly_to_position(
        nu, orbit.rpe, orbit.ecc, orbit.inc.rad, orbit.ape.rad, orbit.lan.rad
    ))

    if not orbit.is_elliptical:
        unreachable = np.array([orbit.is_unreachable(a) for a in anomalies])
        positions[unreachable] = np.inf

    return list(positions), anomalies
