"""
Keplerian orbit model.

An Orbit is defined by six elements around a GravitationalBody:

    rpe  periapsis radius (m)
    ecc  eccentricity
    inc  inclination
    ape  argument of periapsis
    lan  longitude of the ascending node
    tpp  time of periapsis passage (s)

and converts between time, true anomaly, position and velocity for elliptical,
parabolic and hyperbolic orbits alike.
"""
import logging
import math
from enum import Enum
from typing import Optional

import numpy as np
import pydantic
from pydantic import ConfigDict, PrivateAttr, field_validator

from orbit_planner import kepler
from orbit_planner.angle import Angle, AngleLike
from orbit_planner.astrodynamics import (
    angular_momentum_direction,
    cartesian_to_elements,
    periapsis_direction,
    true_anomaly_to_position,
    true_anomaly_to_velocity,
)
from orbit_planner.bodies import GravitationalBody, bodies_data
from orbit_planner.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from orbit_planner.constants import ANGLE_TOLERANCE, TWO_PI
from orbit_planner.lambert import solve_lambert
from orbit_planner.orbital_elements import OrbitalElements
from orbit_planner.sampling import orbital_points
from orbit_planner.state_vector import StateVector

logger = logging.getLogger(__name__)

# Relative tolerance on rpe and ecc for exact orbit equality
_EQUALITY_REL_TOL = 1e-12


class InfiniteTimeError(ValueError):
    """A closed orbit was asked for its state at t = +/-inf."""


class DegenerateOrbitError(ValueError):
    """A collapsed orbit (rpe = 0) was asked for its state at some time."""


class ConicSection(Enum):
    ELLIPTICAL = "elliptical"
    PARABOLIC = "parabolic"
    HYPERBOLIC = "hyperbolic"


def point_at_infinity() -> np.ndarray:
    """Sentinel position for the unreachable part of an open orbit."""
    return np.full(3, np.inf)


def is_point_at_infinity(point) -> bool:
    return bool(np.any(np.isinf(point)))


class Orbit(pydantic.BaseModel):
    """
    A Keplerian orbit around a gravitational body.

    Elements are validated on construction and on assignment: NaN or infinite
    values raise pydantic.ValidationError and leave the orbit unchanged,
    negative rpe/ecc clamp to zero, and angular elements accept floats (rad)
    or Angle instances.

    Orbits compare by value. The time element is compared through the true
    anomaly it implies, so elliptical orbits whose tpp differ by whole periods
    are equal. Collapsed orbits (rpe = 0) have no motion and compare by their raw
    tpp.

    Example:
        An rpe = 1e8 m, e = 0.2 orbit around Earth passes true anomaly 3*pi/4
        about 143887 s after periapsis::

            orbit = Orbit(1e8, 0.2, 0.0, 0.0, 0.0, 0.0, bodies_data["Earth"])
            t = orbit.true_anomaly_to_time(3 * math.pi / 4)   # ~143887.3
            position = orbit.time_to_point(t)
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True, allow_inf_nan=False)

    rpe: float
    ecc: float
    inc: Angle
    ape: Angle
    lan: Angle
    tpp: float
    body: GravitationalBody

    _solver: SolverConfig = PrivateAttr(default=DEFAULT_SOLVER_CONFIG)

    def __init__(self, rpe: float, ecc: float, inc: AngleLike, ape: AngleLike, lan: AngleLike,
                 tpp: float, body: GravitationalBody, *, solver: Optional[SolverConfig] = None, **data):
        super().__init__(rpe=rpe, ecc=ecc, inc=inc, ape=ape, lan=lan, tpp=tpp, body=body, **data)
        if solver is not None:
            self._solver = solver

    @field_validator('rpe', 'ecc')
    @classmethod
    def _clamp_non_negative(cls, value: float) -> float:
        return max(value, 0.0)

    @field_validator('inc', 'ape', 'lan', mode='before')
    @classmethod
    def _coerce_angle(cls, value):
        if isinstance(value, Angle):
            return value
        return Angle(value)

    @property
    def solver(self) -> SolverConfig:
        return self._solver

    def clone(self) -> "Orbit":
        """Independent copy, e.g. to hand to another thread."""
        return self.model_copy()

    # Classification ---------------------------------------------------------

    @property
    def mu(self) -> float:
        return self.body.mu

    @property
    def orbit_type(self) -> ConicSection:
        if self.ecc < 1.0:
            return ConicSection.ELLIPTICAL
        if self.ecc == 1.0:
            return ConicSection.PARABOLIC
        return ConicSection.HYPERBOLIC

    @property
    def is_elliptical(self) -> bool:
        return self.ecc < 1.0

    # Derived geometry -------------------------------------------------------

    @property
    def semi_major_axis(self) -> float:
        """rpe / (1 - e); infinite for parabolic and negative for hyperbolic orbits."""
        if self.orbit_type is ConicSection.PARABOLIC:
            return math.inf
        return self.rpe / (1.0 - self.ecc)

    @property
    def semi_latus_rectum(self) -> float:
        return self.rpe * (1.0 + self.ecc)

    @property
    def period(self) -> float:
        if not self.is_elliptical:
            return math.inf
        return TWO_PI * math.sqrt(self.semi_major_axis**3 / self.mu)

    @property
    def mean_motion(self) -> float:
        """
        Rate of the mean anomaly.

        Parabolic orbits have no semi-major axis; their mean anomaly is
        sqrt(mu) * (t - tpp), so sqrt(mu) is returned.
        """
        if self.orbit_type is ConicSection.PARABOLIC:
            return math.sqrt(self.mu)
        a3 = abs(self.semi_major_axis) ** 3
        if a3 == 0.0:
            return math.inf
        return math.sqrt(self.mu / a3)

    @property
    def is_degenerate(self) -> bool:
        """True for a collapsed orbit (rpe = 0), which has no motion to evaluate."""
        return self.rpe == 0.0 or not math.isfinite(self.mean_motion)

    @property
    def specific_energy(self) -> float:
        return self.mu * (self.ecc - 1.0) / (2.0 * self.rpe)

    @property
    def apoapsis_radius(self) -> float:
        if not self.is_elliptical:
            return math.inf
        return (1.0 + self.ecc) / (1.0 - self.ecc) * self.rpe

    @property
    def excess_velocity(self) -> Optional[float]:
        """Hyperbolic excess speed v_inf (m/s); None for closed orbits."""
        conic = self.orbit_type
        if conic is ConicSection.ELLIPTICAL:
            return None
        if conic is ConicSection.PARABOLIC:
            return 0.0
        return math.sqrt(self.mu / -self.semi_major_axis)

    @property
    def h_vector(self) -> np.ndarray:
        """Specific angular momentum, magnitude sqrt(mu * p)."""
        return math.sqrt(self.mu * self.semi_latus_rectum) * angular_momentum_direction(self.inc.rad, self.lan.rad)

    @property
    def e_vector(self) -> np.ndarray:
        """Eccentricity vector, pointing at periapsis."""
        return self.ecc * periapsis_direction(self.inc.rad, self.ape.rad, self.lan.rad)

    @property
    def n_vector(self) -> np.ndarray:
        """Node vector z x h_hat, pointing at the ascending node with magnitude sin(inc)."""
        h_hat = angular_momentum_direction(self.inc.rad, self.lan.rad)
        return np.cross(np.array([0.0, 0.0, 1.0]), h_hat)

    @property
    def max_true_anomaly(self) -> Optional[Angle]:
        """Asymptote direction acos(-1/e) of an open orbit; None when elliptical."""
        if self.is_elliptical:
            return None
        return Angle(math.acos(-1.0 / self.ecc))

    @property
    def periapsis_point(self) -> np.ndarray:
        return self.true_anomaly_to_point(Angle.ZERO)

    @property
    def apoapsis_point(self) -> Optional[np.ndarray]:
        if not self.is_elliptical:
            return None
        return self.true_anomaly_to_point(Angle.HALF_TURN)

    @property
    def ascending_node(self) -> Optional[np.ndarray]:
        point = self.true_anomaly_to_point(-self.ape)
        return None if is_point_at_infinity(point) else point

    @property
    def descending_node(self) -> Optional[np.ndarray]:
        point = self.true_anomaly_to_point(-self.ape + Angle.HALF_TURN)
        return None if is_point_at_infinity(point) else point

    # Reachability ----------------------------------------------------------

    def _expel_unreachable(self, nu: Angle) -> Angle:
        max_nu = self.max_true_anomaly
        if max_nu is None:
            return nu
        return Angle.expel(nu, max_nu, -max_nu)

    def _is_asymptote(self, nu: Angle) -> bool:
        max_nu = self.max_true_anomaly
        return max_nu is not None and (nu == max_nu or nu == -max_nu)

    def is_unreachable(self, true_anomaly: AngleLike) -> bool:
        """True when the anomaly lies on or beyond an open orbit's asymptotes."""
        return self._is_asymptote(self._expel_unreachable(Angle(true_anomaly)))

    # True anomaly -> state ---------------------------------------------------

    def true_anomaly_to_point(self, true_anomaly: AngleLike) -> np.ndarray:
        """
        Position at the given true anomaly.

        Anomalies beyond an open orbit's asymptotes snap to the nearer
        asymptote, where the point is at infinity: (inf, inf, inf).
        """
        nu = self._expel_unreachable(Angle(true_anomaly))
        if self._is_asymptote(nu):
            return point_at_infinity()
        return np.array(true_anomaly_to_position(
            nu.rad, self.rpe, self.ecc, self.inc.rad, self.ape.rad, self.lan.rad
        ))

    def true_anomaly_to_velocity(self, true_anomaly: AngleLike) -> np.ndarray:
        """Velocity at the given true anomaly; the asymptotic velocity beyond the asymptotes."""
        nu = self._expel_unreachable(Angle(true_anomaly))
        return np.array(true_anomaly_to_velocity(
            nu.rad, self.rpe, self.ecc, self.inc.rad, self.ape.rad, self.lan.rad, self.mu
        ))

    def true_anomaly_to_time(self, true_anomaly: AngleLike) -> float:
        """
        Time at which the satellite passes the given true anomaly.

        Elliptical orbits return the passage in [tpp, tpp + period). Open orbits
        return +inf / -inf on the outgoing / incoming asymptote (parabolic:
        +inf at pi).
        """
        nu = Angle(true_anomaly)
        conic = self.orbit_type

        if conic is ConicSection.ELLIPTICAL:
            E = kepler.true_to_eccentric_anomaly(nu.rad, self.ecc)
            M = kepler.eccentric_to_mean_anomaly(E, self.ecc)
        elif conic is ConicSection.PARABOLIC:
            if nu == Angle.HALF_TURN:
                return math.inf
            D = kepler.true_to_parabolic_anomaly(nu.rad, self.rpe)
            M = kepler.parabolic_to_mean_anomaly(D, self.rpe)
        else:
            nu = self._expel_unreachable(nu)
            max_nu = self.max_true_anomaly
            if nu == max_nu:
                return math.inf
            if nu == -max_nu:
                return -math.inf
            H = kepler.true_to_hyperbolic_anomaly(nu.rad, self.ecc)
            M = kepler.hyperbolic_to_mean_anomaly(H, self.ecc)

        return float(M) / self.mean_motion + self.tpp

    # Time -> state ---------------------------------------------------------

    def time_to_true_anomaly(self, time: float) -> Angle:
        """
        True anomaly at the given time.

        Near periapsis of a highly eccentric orbit the anomaly changes quickly,
        so the result is only as precise as the time itself: an error of one
        ulp in time moves the anomaly by ulp(time) * dnu/dt.

        Raises:
            ValueError: If time is NaN.
            InfiniteTimeError: If time is infinite and the orbit is elliptical.
            DegenerateOrbitError: If the orbit has collapsed to rpe = 0.
        """
        time = float(time)
        if math.isnan(time):
            raise ValueError("time must not be NaN")
        if self.is_degenerate:
            raise DegenerateOrbitError(f"Orbit around {self.body.name} has rpe = 0 and no position in time")

        conic = self.orbit_type
        if math.isinf(time):
            if conic is ConicSection.ELLIPTICAL:
                raise InfiniteTimeError(f"An elliptical orbit has no state at t = {time}")
            if conic is ConicSection.PARABOLIC:
                return Angle.HALF_TURN
            max_nu = self.max_true_anomaly
            return max_nu if time > 0 else -max_nu

        M = self.mean_motion * (time - self.tpp)
        solver = self._solver

        if conic is ConicSection.ELLIPTICAL:
            E, _ = kepler.solve_kepler(M, self.ecc, solver.kepler_tolerance, solver.kepler_max_iterations)
            nu = kepler.eccentric_to_true_anomaly(E, self.ecc)
        elif conic is ConicSection.HYPERBOLIC:
            H, _ = kepler.solve_kepler_hyperbolic(M, self.ecc, solver.kepler_tolerance, solver.kepler_max_iterations)
            nu = kepler.hyperbolic_to_true_anomaly(H, self.ecc)
        else:
            D = kepler.solve_barker(M, self.rpe)
            nu = kepler.parabolic_to_true_anomaly(D, self.rpe)

        return Angle(float(nu))

    def time_to_point(self, time: float) -> np.ndarray:
        return self.true_anomaly_to_point(self.time_to_true_anomaly(time))

    def time_to_velocity(self, time: float) -> np.ndarray:
        return self.true_anomaly_to_velocity(self.time_to_true_anomaly(time))

    def time_to_state(self, time: float) -> StateVector:
        nu = self.time_to_true_anomaly(time)
        return StateVector(position=self.true_anomaly_to_point(nu), velocity=self.true_anomaly_to_velocity(nu))

    def orbital_points(self, start: Optional[AngleLike] = None, end: Optional[AngleLike] = None,
                       max_step: Optional[float] = None):
        """Sample positions along the orbit; see orbit_planner.sampling.orbital_points."""
        if max_step is None:
            max_step = self._solver.sample_step_rad
        return orbital_points(self, start, end, max_step)

    # Construction from states ----------------------------------------------

    @classmethod
    def state_vectors_to_orbit(cls, body: GravitationalBody, position, velocity, time: float,
                               solver: Optional[SolverConfig] = None) -> "Orbit":
        """
        Orbit passing through the given position with the given velocity at time.

        Raises:
            ValueError: If time is NaN or the state has zero angular momentum.
        """
        time = float(time)
        if math.isnan(time):
            raise ValueError("time must not be NaN")
        rpe, ecc, inc, ape, lan, nu = cartesian_to_elements(position, velocity, body.mu)
        orbit = cls(rpe, ecc, inc, ape, lan, 0.0, body, solver=solver)
        orbit.tpp = time - orbit.true_anomaly_to_time(nu)
        return orbit

    @staticmethod
    def find_transfer_orbit(initial: "Orbit", departure_time: float,
                            target: "Orbit", arrival_time: float) -> Optional["Orbit"]:
        """
        Orbit leaving `initial` at departure_time and meeting `target` at arrival_time.

        Returns:
            The transfer orbit, a copy of `initial` when both points and times
            coincide, or None when the orbits are around different bodies, the
            flight time is not positive, or Lambert's problem has no solution.
        """
        departure_time = float(departure_time)
        arrival_time = float(arrival_time)
        if math.isnan(departure_time) or math.isnan(arrival_time):
            raise ValueError("departure and arrival times must not be NaN")

        if initial.body != target.body:
            logger.warning("No transfer between orbits around %s and %s", initial.body.name, target.body.name)
            return None

        departure_point = initial.time_to_point(departure_time)
        arrival_point = target.time_to_point(arrival_time)

        if np.array_equal(departure_point, arrival_point) and math.isclose(departure_time, arrival_time):
            return initial.clone()
        if is_point_at_infinity(departure_point) or is_point_at_infinity(arrival_point):
            logger.debug("Transfer endpoint is at infinity")
            return None
        if arrival_time <= departure_time:
            logger.debug("Transfer flight time %g s is not positive", arrival_time - departure_time)
            return None

        solution = solve_lambert(
            initial.body, departure_point, departure_time, arrival_point, arrival_time,
            max_iter=initial.solver.lambert_max_iterations,
        )
        if solution is None:
            return None

        v1, _ = solution
        return Orbit.state_vectors_to_orbit(initial.body, departure_point, v1, departure_time, solver=initial.solver)

    # Persistence -----------------------------------------------------------

    def to_elements(self) -> OrbitalElements:
        return OrbitalElements(
            rpe=self.rpe,
            ecc=self.ecc,
            inc=self.inc.rad,
            ape=self.ape.rad,
            lan=self.lan.rad,
            tpp=self.tpp,
            body_name=self.body.name,
        )

    @classmethod
    def from_elements(cls, elements: OrbitalElements,
                      bodies: Optional[dict[str, GravitationalBody]] = None) -> "Orbit":
        """Rebuild an orbit from saved elements, resolving the body by name."""
        if bodies is None:
            bodies = bodies_data
        body = bodies[elements.body_name]
        return cls(elements.rpe, elements.ecc, elements.inc, elements.ape, elements.lan, elements.tpp, body)

    # Comparison ------------------------------------------------------------

    def _agrees_with(self, other: "Orbit", rel_tol: float, angle_tol: float) -> bool:
        if self.body != other.body:
            return False
        if not math.isclose(self.rpe, other.rpe, rel_tol=rel_tol):
            return False
        if not math.isclose(self.ecc, other.ecc, rel_tol=rel_tol, abs_tol=rel_tol):
            return False
        for name in ('inc', 'ape', 'lan'):
            if not getattr(self, name).is_close(getattr(other, name), angle_tol):
                return False
        if self.is_degenerate or other.is_degenerate:
            return math.isclose(self.tpp, other.tpp, rel_tol=rel_tol)
        reference = self.tpp
        return self.time_to_true_anomaly(reference).is_close(other.time_to_true_anomaly(reference), angle_tol)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Orbit):
            return NotImplemented
        return self._agrees_with(other, _EQUALITY_REL_TOL, ANGLE_TOLERANCE)

    __hash__ = None

    def is_close(self, other: "Orbit", rel_tol: float = 1e-4) -> bool:
        """Approximate equality; angles are compared to rel_tol of a full turn."""
        return self._agrees_with(other, rel_tol, rel_tol * TWO_PI)

    def __str__(self) -> str:
        return (
            f"RPE: {self.rpe:.3f} m\n"
            f"ECC: {self.ecc:.6f}\n"
            f"INC: {self.inc.deg:.4f} deg\n"
            f"APE: {self.ape.deg:.4f} deg\n"
            f"LAN: {self.lan.deg:.4f} deg\n"
            f"TPP: {self.tpp:.3f} s"
        )
