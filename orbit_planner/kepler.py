"""
Anomaly conversions and Kepler equation solvers for all three conic sections.

Every function here is a pure, jit-compiled kernel operating on scalars (or
broadcastable arrays where no iteration is involved). Angles are plain radians;
the Orbit class takes care of wrapping, boundary cases and infinities.

    Elliptical:  M = E - e sin(E)
    Hyperbolic:  M = e sinh(H) - H
    Parabolic:   M = q D + D^3 / 6   (Barker's equation, M = sqrt(mu) (t - tpp))

Near e = 1 the elliptical and hyperbolic forms are evaluated as

    M = (E - sin E) + (1 - e) sin E
    M = (sinh H - H) + (e - 1) sinh H

with series for the bracketed differences at small anomalies, so neither the
solvers nor the inverse conversions lose precision to cancellation.
"""
import jax
import jax.numpy as jnp
from jax import jit

from orbit_planner.constants import (
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    NEAR_PARABOLIC_ECCENTRICITY,
    TWO_PI,
)

# Below this |x| the differences x - sin(x) and sinh(x) - x come from their series
_SERIES_LIMIT = 0.5


def _x_minus_sin(x):
    x2 = x * x
    series = x * x2 / 6.0 * (1.0 - x2 / 20.0 * (1.0 - x2 / 42.0 * (1.0 - x2 / 72.0 * (
        1.0 - x2 / 110.0 * (1.0 - x2 / 156.0 * (1.0 - x2 / 210.0))))))
    return jnp.where(jnp.abs(x) < _SERIES_LIMIT, series, x - jnp.sin(x))


def _sinh_minus_x(x):
    x2 = x * x
    series = x * x2 / 6.0 * (1.0 + x2 / 20.0 * (1.0 + x2 / 42.0 * (1.0 + x2 / 72.0 * (
        1.0 + x2 / 110.0 * (1.0 + x2 / 156.0 * (1.0 + x2 / 210.0))))))
    return jnp.where(jnp.abs(x) < _SERIES_LIMIT, series, jnp.sinh(x) - x)


@jit
def solve_kepler(M, e, tol=KEPLER_TOLERANCE, max_iter=KEPLER_MAX_ITERATIONS):
    """
    Solve Kepler's equation M = E - e*sin(E) for the eccentric anomaly.

    Newton-Raphson from the Prussing-Conway starting value
    E0 = (M (1 - sin u) + u sin M) / (1 + sin M - sin u), with u = M + e.
    Above NEAR_PARABOLIC_ECCENTRICITY the start is instead the root of the
    cubic (1 - e) E + e E^3 / 6 = M, which is exact in the limit of small E.
    M is first reduced to [-pi, pi], so E is returned in the same branch.

    Args:
        M: Mean anomaly (rad)
        e: Eccentricity, 0 <= e < 1
        tol: Relative tolerance. Iteration stops once |residual| <= tol |M|
            or the Newton step is at most tol |E|
        max_iter: Iteration cap

    Returns:
        (E, iterations): eccentric anomaly (rad) and the number of Newton steps taken
    """
    M = jnp.asarray(M, dtype=jnp.float64)
    e = jnp.asarray(e, dtype=jnp.float64)
    M = M - TWO_PI * jnp.round(M / TWO_PI)

    u = M + e
    E_pc = (M * (1.0 - jnp.sin(u)) + u * jnp.sin(M)) / (1.0 + jnp.sin(M) - jnp.sin(u))
    e_cubic = jnp.maximum(e, 0.5)
    E_cubic = solve_barker(M / e_cubic, (1.0 - e_cubic) / e_cubic)
    E0 = jnp.where(e > NEAR_PARABOLIC_ECCENTRICITY, E_cubic, E_pc)
    threshold = tol * jnp.abs(M)

    def residual(E):
        return _x_minus_sin(E) + (1.0 - e) * jnp.sin(E) - M

    def cond_fn(state):
        E, i, f, step = state
        return (jnp.abs(f) > threshold) & (jnp.abs(step) > tol * jnp.abs(E)) & (i < max_iter)

    def body_fn(state):
        E, i, f, _ = state
        # 1 - e cos(E), written so it stays accurate near E = 0 when e -> 1
        slope = 2.0 * jnp.sin(E / 2.0) ** 2 + (1.0 - e) * jnp.cos(E)
        step = f / slope
        E_new = E - step
        return E_new, i + 1, residual(E_new), step

    init = (E0, jnp.asarray(0, dtype=jnp.int32), residual(E0), jnp.asarray(jnp.inf, dtype=jnp.float64))
    E, iterations, _, _ = jax.lax.while_loop(cond_fn, body_fn, init)
    return E, iterations


@jit
def solve_kepler_hyperbolic(M, e, tol=KEPLER_TOLERANCE, max_iter=KEPLER_MAX_ITERATIONS):
    """
    Solve the hyperbolic Kepler equation M = e*sinh(H) - H for the hyperbolic anomaly.

    Newton-Raphson from the smaller of H0 = sign(M) ln(2|M|/e + 1.8) and the
    root of the cubic (e - 1) H + e H^3 / 6 = M. The cubic is exact in the
    limit of small H and keeps near-parabolic orbits accurate; the logarithm
    is the better start for large |M|. If sinh/cosh overflow and the iterate
    becomes NaN, the result saturates to +/-inf with the sign of M.

    Args:
        M: Hyperbolic mean anomaly (rad)
        e: Eccentricity, e > 1
        tol: Relative tolerance, as for solve_kepler
        max_iter: Iteration cap

    Returns:
        (H, iterations): hyperbolic anomaly and the number of Newton steps taken
    """
    M = jnp.asarray(M, dtype=jnp.float64)
    e = jnp.asarray(e, dtype=jnp.float64)

    H_log = jnp.sign(M) * jnp.log(2.0 * jnp.abs(M) / e + 1.8)
    H_cubic = solve_barker(M / e, (e - 1.0) / e)
    # A non-finite cubic root (M = +/-inf) compares False and keeps the logarithm
    H0 = jnp.where(jnp.abs(H_cubic) < jnp.abs(H_log), H_cubic, H_log)
    threshold = tol * jnp.abs(M)

    def residual(H):
        return _sinh_minus_x(H) + (e - 1.0) * jnp.sinh(H) - M

    def cond_fn(state):
        H, i, f, step = state
        return ((jnp.abs(f) > threshold) & (jnp.abs(step) > tol * jnp.abs(H))
                & (i < max_iter) & ~jnp.isnan(H))

    def body_fn(state):
        H, i, f, _ = state
        # e cosh(H) - 1
        slope = 2.0 * jnp.sinh(H / 2.0) ** 2 + (e - 1.0) * jnp.cosh(H)
        step = f / slope
        H_new = H - step
        return H_new, i + 1, residual(H_new), step

    init = (H0, jnp.asarray(0, dtype=jnp.int32), residual(H0), jnp.asarray(jnp.inf, dtype=jnp.float64))
    H, iterations, _, _ = jax.lax.while_loop(cond_fn, body_fn, init)
    H = jnp.where(jnp.isnan(H), jnp.where(M > 0.0, jnp.inf, -jnp.inf), H)
    return H, iterations


@jit
def solve_barker(M, rpe):
    """
    Invert Barker's equation M = q*D + D^3/6 for the parabolic anomaly D.

    Cardano's formula is evaluated on |M| and the sign reapplied afterwards
    (D is odd in M), so no fractional power of a negative number is taken.
    With w = cbrt(3|M| + sqrt(9 M^2 + 8 q^3)) and s = sqrt(2q) the root is
    D = w - s^2/w, computed in a cancellation-free form.

    Args:
        M: Parabolic mean anomaly, sqrt(mu) * (t - tpp)
        rpe: Periapsis radius q

    Returns:
        Parabolic anomaly D
    """
    M = jnp.asarray(M, dtype=jnp.float64)
    q = jnp.asarray(rpe, dtype=jnp.float64)
    M_abs = jnp.abs(M)

    s = jnp.sqrt(2.0 * q)
    s3 = s**3
    A = jnp.sqrt(9.0 * M**2 + 8.0 * q**3)
    w = jnp.cbrt(3.0 * M_abs + A)

    # w^3 - s^3 with A - s^3 rewritten as 9 M^2 / (A + s^3)
    w3_minus_s3 = 3.0 * M_abs + 9.0 * M**2 / (A + s3)
    w_minus_s = w3_minus_s3 / (w**2 + w * s + s**2)
    D = jnp.where(w > 0.0, w_minus_s * (w + s) / w, 0.0)
    return jnp.sign(M) * D


# Elliptical ---------------------------------------------------------------

@jit
def eccentric_to_true_anomaly(E, e):
    return 2.0 * jnp.arctan2(
        jnp.sqrt(1.0 + e) * jnp.sin(E / 2.0),
        jnp.sqrt(1.0 - e) * jnp.cos(E / 2.0)
    )


@jit
def true_to_eccentric_anomaly(nu, e):
    return 2.0 * jnp.arctan2(
        jnp.sqrt(1.0 - e) * jnp.sin(nu / 2.0),
        jnp.sqrt(1.0 + e) * jnp.cos(nu / 2.0)
    )


@jit
def eccentric_to_mean_anomaly(E, e):
    return _x_minus_sin(E) + (1.0 - e) * jnp.sin(E)


# Hyperbolic ---------------------------------------------------------------

@jit
def hyperbolic_to_true_anomaly(H, e):
    # tanh saturates at +/-1, so H = +/-inf lands on the asymptote directions.
    return 2.0 * jnp.arctan2(jnp.sqrt(e + 1.0) * jnp.tanh(H / 2.0), jnp.sqrt(e - 1.0))


@jit
def true_to_hyperbolic_anomaly(nu, e):
    return 2.0 * jnp.arctanh(jnp.sqrt((e - 1.0) / (e + 1.0)) * jnp.tan(nu / 2.0))


@jit
def hyperbolic_to_mean_anomaly(H, e):
    return jnp.where(jnp.isinf(H), H, _sinh_minus_x(H) + (e - 1.0) * jnp.sinh(H))


# Parabolic ----------------------------------------------------------------

@jit
def parabolic_to_true_anomaly(D, rpe):
    return 2.0 * jnp.arctan(D / jnp.sqrt(2.0 * rpe))


@jit
def true_to_parabolic_anomaly(nu, rpe):
    return jnp.sqrt(2.0 * rpe) * jnp.tan(nu / 2.0)


@jit
def parabolic_to_mean_anomaly(D, rpe):
    return jnp.where(jnp.isinf(D), D, rpe * D + D**3 / 6.0)
