"""
Persistable snapshot of an orbit's elements.
"""
from typing import NamedTuple


class OrbitalElements(NamedTuple):
    """
    The six scalar elements of an orbit plus the name of its central body.

    All angular quantities are in radians. This is the minimum an orbit needs
    to be saved and restored; see Orbit.to_elements and Orbit.from_elements.

    Attributes:
        rpe: Periapsis radius (m)
        ecc: Eccentricity (dimensionless)
        inc: Inclination (rad)
        ape: Argument of periapsis (rad)
        lan: Longitude of the ascending node (rad)
        tpp: Time of periapsis passage (s)
        body_name: Name of the central body

    Note:
        - For elliptical orbits: 0 <= ecc < 1
        - For parabolic orbits: ecc = 1
        - For hyperbolic orbits: ecc > 1
    """
    rpe: float  # periapsis radius (m)
    ecc: float  # eccentricity
    inc: float  # inclination (rad)
    ape: float  # argument of periapsis (rad)
    lan: float  # longitude of ascending node (rad)
    tpp: float  # time of periapsis passage (s)
    body_name: str
