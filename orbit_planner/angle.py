"""
Angle type with wraparound arithmetic.

An Angle stores a single value in radians normalised to [0, 2*pi). Equality is
tolerance based and treats values on either side of the 0 / 2*pi seam as equal,
while ordering compares the raw stored values.
"""
from __future__ import annotations

import math
from typing import Optional, Union

from orbit_planner.constants import ANGLE_TOLERANCE, TWO_PI

AngleLike = Union["Angle", float, int]


def _normalize(value: float, full_turn: float) -> float:
    # Python's % already returns a non-negative result for a positive modulus,
    # but tiny negative inputs round up to exactly one full turn.
    wrapped = value % full_turn
    if wrapped >= full_turn:
        wrapped = 0.0
    return wrapped


class Angle:
    """
    An angle in [0, 2*pi).

    Attributes:
        rad: Value in radians, [0, 2*pi)
        deg: Value in degrees, [0, 360)
        rad_signed: Value in radians, (-pi, pi]
        deg_signed: Value in degrees, (-180, 180]
    """
    __slots__ = ("_rad",)

    tolerance = ANGLE_TOLERANCE

    def __init__(self, value: AngleLike = 0.0):
        if isinstance(value, Angle):
            self._rad = value._rad
            return
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Angle value must be finite, got {value}")
        self._rad = _normalize(value, TWO_PI)

    @classmethod
    def from_degrees(cls, value: float) -> Angle:
        """Create an Angle from a value in degrees."""
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Angle value must be finite, got {value}")
        return cls(math.radians(_normalize(value, 360.0)))

    @classmethod
    def coerce(cls, value: Optional[AngleLike]) -> Optional[Angle]:
        """Return value as an Angle, passing None and Angle instances through."""
        if value is None or isinstance(value, Angle):
            return value
        return cls(value)

    @property
    def rad(self) -> float:
        return self._rad

    @property
    def deg(self) -> float:
        return _normalize(math.degrees(self._rad), 360.0)

    @property
    def rad_signed(self) -> float:
        return self._rad if self._rad <= math.pi else self._rad - TWO_PI

    @property
    def deg_signed(self) -> float:
        return math.degrees(self.rad_signed)

    def __float__(self) -> float:
        return self._rad

    def __repr__(self) -> str:
        return f"Angle({self._rad!r})"

    def __str__(self) -> str:
        return f"{self.deg:.4f} deg"

    # Arithmetic ----------------------------------------------------------

    def __neg__(self) -> Angle:
        return Angle(TWO_PI - self._rad)

    def __add__(self, other: AngleLike) -> Angle:
        return Angle(self._rad + float(other))

    __radd__ = __add__

    def __sub__(self, other: AngleLike) -> Angle:
        return Angle(self._rad - float(other))

    def __rsub__(self, other: AngleLike) -> Angle:
        return Angle(float(other) - self._rad)

    def __mul__(self, factor: float) -> Angle:
        return Angle(self._rad * float(factor))

    __rmul__ = __mul__

    # Comparison ----------------------------------------------------------

    def __eq__(self, other) -> bool:
        if other is None:
            return False
        if not isinstance(other, (Angle, int, float)):
            return NotImplemented
        diff = abs(self._rad - Angle(other)._rad)
        return diff <= self.tolerance or abs(diff - TWO_PI) <= self.tolerance

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    # Tolerance based equality cannot be hashed consistently.
    __hash__ = None

    def __lt__(self, other) -> bool:
        if other is None:
            return False
        return self._rad < Angle(other)._rad

    def __gt__(self, other) -> bool:
        if other is None:
            return False
        return self._rad > Angle(other)._rad

    def __le__(self, other) -> bool:
        return self < other or self == other

    def __ge__(self, other) -> bool:
        return self > other or self == other

    def is_close(self, other: Optional[AngleLike], abs_tol: float = ANGLE_TOLERANCE) -> bool:
        """Seam aware approximate comparison with an explicit tolerance."""
        if other is None:
            return False
        diff = abs(self._rad - Angle(other)._rad)
        return diff <= abs_tol or abs(diff - TWO_PI) <= abs_tol

    # Range helpers -------------------------------------------------------

    def is_between(self, lower: Optional[AngleLike], upper: Optional[AngleLike]) -> bool:
        """
        Check whether this angle lies strictly inside the arc from lower to upper.

        When lower > upper the arc wraps through zero. An empty arc
        (lower == upper) only contains the bound itself.
        """
        if lower is None or upper is None:
            return False
        lower = Angle(lower)
        upper = Angle(upper)
        if lower == upper:
            return self == lower
        if lower < upper:
            return lower < self < upper
        return self > lower or self < upper

    def closer(self, one: Optional[AngleLike], two: Optional[AngleLike]) -> Angle:
        """Return whichever of the two angles is numerically closer to this one."""
        if one is None and two is None:
            return self
        if one is None:
            return Angle(two)
        if two is None:
            return Angle(one)
        one = Angle(one)
        two = Angle(two)
        if abs(self._rad - one._rad) < abs(self._rad - two._rad):
            return one
        return two

    @staticmethod
    def expel(angle: AngleLike, forbidden_low: Optional[AngleLike],
              forbidden_high: Optional[AngleLike]) -> Angle:
        """
        Push an angle out of the forbidden arc (forbidden_low, forbidden_high).

        Angles outside the arc are returned unchanged; angles inside it snap to
        the closer boundary.
        """
        angle = Angle(angle)
        if forbidden_low is None or forbidden_high is None:
            return angle
        if Angle(forbidden_low) == Angle(forbidden_high):
            return angle
        if not angle.is_between(forbidden_low, forbidden_high):
            return angle
        return angle.closer(forbidden_low, forbidden_high)


Angle.ZERO = Angle(0.0)
Angle.QUARTER_TURN = Angle(math.pi / 2.0)
Angle.HALF_TURN = Angle(math.pi)
Angle.THREE_QUARTERS_TURN = Angle(3.0 * math.pi / 2.0)
Angle.MAX_ANGLE = Angle(math.nextafter(TWO_PI, 0.0))
