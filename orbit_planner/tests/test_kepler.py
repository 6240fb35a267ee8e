"""
Tests for the Kepler equation solvers and anomaly conversions.

The solvers are checked for convergence across the full eccentricity range
(including the near-parabolic ends) by substituting the result back into
Kepler's equation.
"""
import numpy as np
import pytest

from orbit_planner.constants import KEPLER_MAX_ITERATIONS
from orbit_planner import kepler


ELLIPTIC_ECCENTRICITIES = [0.0, 0.1, 0.5, 0.9, 0.99, 0.999, 0.999999]
HYPERBOLIC_ECCENTRICITIES = [1.000001, 1.01, 1.5, 3.0, 10.0, 100.0]


@pytest.mark.parametrize("e", ELLIPTIC_ECCENTRICITIES)
def test_solve_kepler_converges(e):
    """Residual of M = E - e sin(E) is tiny for mean anomalies across a full turn."""
    for M in np.linspace(-np.pi, np.pi, 25):
        E, iterations = kepler.solve_kepler(M, e)
        E = float(E)
        residual = E - e * np.sin(E) - M
        assert abs(residual) < 1e-12, f"e={e}, M={M}: residual {residual:.3e}"
        assert int(iterations) <= KEPLER_MAX_ITERATIONS


def test_solve_kepler_reduces_mean_anomaly():
    """Mean anomalies outside [-pi, pi] give the equivalent eccentric anomaly."""
    e = 0.3
    for M in [10.0, -25.0, 1000.0]:
        E, _ = kepler.solve_kepler(M, e)
        E = float(E)
        residual = E - e * np.sin(E) - M
        wrapped = (residual + np.pi) % (2 * np.pi) - np.pi
        assert abs(wrapped) < 1e-10


def test_solve_kepler_circular_is_identity():
    E, iterations = kepler.solve_kepler(1.234, 0.0)
    assert float(E) == pytest.approx(1.234, abs=1e-15)
    assert int(iterations) <= 1


@pytest.mark.parametrize("e", HYPERBOLIC_ECCENTRICITIES)
def test_solve_kepler_hyperbolic_converges(e):
    for M in [-500.0, -10.0, -0.5, 0.0, 1e-6, 0.5, 10.0, 500.0, 1e6]:
        H, iterations = kepler.solve_kepler_hyperbolic(M, e)
        H = float(H)
        residual = e * np.sinh(H) - H - M
        assert abs(residual) < 1e-10 * max(1.0, abs(M)), f"e={e}, M={M}: residual {residual:.3e}"
        assert int(iterations) <= KEPLER_MAX_ITERATIONS


def test_solve_kepler_hyperbolic_saturates():
    """An infinite mean anomaly gives an infinite hyperbolic anomaly of the same sign."""
    H, _ = kepler.solve_kepler_hyperbolic(np.inf, 2.0)
    assert float(H) == np.inf
    H, _ = kepler.solve_kepler_hyperbolic(-np.inf, 2.0)
    assert float(H) == -np.inf


@pytest.mark.parametrize("rpe", [1.0, 6.0e5, 1.0e8])
def test_solve_barker(rpe):
    scale = rpe**1.5
    for M in [-1e3 * scale, -scale, -1e-6 * scale, 0.0, 1e-9 * scale, 0.3 * scale, 50.0 * scale]:
        D = float(kepler.solve_barker(M, rpe))
        residual = rpe * D + D**3 / 6.0 - M
        assert abs(residual) <= 1e-12 * max(abs(M), scale), f"rpe={rpe}, M={M}: residual {residual:.3e}"


def test_solve_barker_is_odd():
    rpe = 1.0e7
    for M in [1.0e9, 3.0e10, 7.0e12]:
        assert float(kepler.solve_barker(-M, rpe)) == pytest.approx(-float(kepler.solve_barker(M, rpe)), rel=1e-14)


def test_solve_barker_small_anomaly_precision():
    """Near periapsis D ~ M / q; the cancellation-free form keeps full precision."""
    rpe = 1.0e7
    M = 1.0e-3
    D = float(kepler.solve_barker(M, rpe))
    assert D == pytest.approx(M / rpe, rel=1e-12)


def test_elliptic_anomaly_round_trip():
    e = 0.7
    for nu in np.linspace(0.0, 2 * np.pi, 17, endpoint=False):
        E = kepler.true_to_eccentric_anomaly(nu, e)
        nu_back = float(kepler.eccentric_to_true_anomaly(E, e))
        assert np.cos(nu_back) == pytest.approx(np.cos(nu), abs=1e-12)
        assert np.sin(nu_back) == pytest.approx(np.sin(nu), abs=1e-12)


def test_hyperbolic_anomaly_round_trip():
    e = 1.8
    nu_max = np.arccos(-1.0 / e)
    for nu in np.linspace(-0.95 * nu_max, 0.95 * nu_max, 11):
        H = kepler.true_to_hyperbolic_anomaly(nu, e)
        assert float(kepler.hyperbolic_to_true_anomaly(H, e)) == pytest.approx(nu, abs=1e-12)


def test_hyperbolic_asymptote():
    e = 1.8
    nu_max = np.arccos(-1.0 / e)
    assert float(kepler.hyperbolic_to_true_anomaly(np.inf, e)) == pytest.approx(nu_max, abs=1e-12)
    assert float(kepler.hyperbolic_to_true_anomaly(-np.inf, e)) == pytest.approx(-nu_max, abs=1e-12)
    assert float(kepler.hyperbolic_to_mean_anomaly(np.inf, e)) == np.inf
    assert float(kepler.hyperbolic_to_mean_anomaly(-np.inf, e)) == -np.inf


def test_parabolic_anomaly_round_trip():
    rpe = 2.0e6
    for nu in [-3.0, -1.0, 0.0, 0.5, 2.5, 3.1]:
        D = kepler.true_to_parabolic_anomaly(nu, rpe)
        assert float(kepler.parabolic_to_true_anomaly(D, rpe)) == pytest.approx(nu, abs=1e-12)
    assert float(kepler.parabolic_to_true_anomaly(np.inf, rpe)) == pytest.approx(np.pi)
    assert float(kepler.parabolic_to_mean_anomaly(np.inf, rpe)) == np.inf


@pytest.mark.parametrize("e", [1.0 - 1e-9, 1.0 - 1e-10])
def test_solve_kepler_near_parabolic(e):
    """Tiny mean anomalies on nearly parabolic ellipses keep full relative precision."""
    for M in [1e-17, 1e-12, 1e-6, 1e-2, 1.0, 3.0]:
        E, iterations = kepler.solve_kepler(M, e)
        assert float(kepler.eccentric_to_mean_anomaly(E, e)) == pytest.approx(M, rel=1e-12)
        assert int(iterations) < KEPLER_MAX_ITERATIONS


@pytest.mark.parametrize("e", [1.0 + 1e-9, 1.0 + 1e-10])
def test_solve_kepler_hyperbolic_near_parabolic(e):
    for M in [1e-17, -1e-12, 1e-6, 1.0, 100.0]:
        H, iterations = kepler.solve_kepler_hyperbolic(M, e)
        assert float(kepler.hyperbolic_to_mean_anomaly(H, e)) == pytest.approx(M, rel=1e-12)
        assert int(iterations) < KEPLER_MAX_ITERATIONS


def test_mean_anomaly_without_cancellation():
    """Series branch agrees with the direct form where both are accurate."""
    e = 0.3
    for E in [0.49, 0.51]:
        assert float(kepler.eccentric_to_mean_anomaly(E, e)) == pytest.approx(E - e * np.sin(E), rel=1e-14)
        assert float(kepler.hyperbolic_to_mean_anomaly(E, 1.0 + e)) == pytest.approx(
            (1.0 + e) * np.sinh(E) - E, rel=1e-14)
    # E - sin(E) ~ E^3 / 6 for small E
    assert float(kepler.eccentric_to_mean_anomaly(1e-6, 1.0)) == pytest.approx(1e-18 / 6.0, rel=1e-10)
