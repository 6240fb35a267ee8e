"""
Cartesian state of a satellite relative to its central body.
"""
from typing import NamedTuple
import numpy as np


class StateVector(NamedTuple):
    """
    Position and velocity in the body-centred inertial frame.

    Attributes:
        position: Position vector [x, y, z] in m
        velocity: Velocity vector [vx, vy, vz] in m/s

    Note:
        - Both fields are numpy float arrays of shape (3,)
        - A position of (inf, inf, inf) marks a point at infinity on an open orbit
    """
    position: np.ndarray  # position [x, y, z] (m)
    velocity: np.ndarray  # velocity [vx, vy, vz] (m/s)
