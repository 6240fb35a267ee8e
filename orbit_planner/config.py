from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from orbit_planner.constants import (
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    LAMBERT_MAX_ITERATIONS,
    ORBIT_DEFAULT_STEP_RAD,
)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_KEPLER_MAX_ITERATIONS = KEPLER_MAX_ITERATIONS
DEFAULT_KEPLER_TOLERANCE = KEPLER_TOLERANCE
DEFAULT_LAMBERT_MAX_ITERATIONS = LAMBERT_MAX_ITERATIONS
DEFAULT_SAMPLE_STEP_RAD = ORBIT_DEFAULT_STEP_RAD


@dataclass(frozen=True, slots=True)
class SolverConfig:
    kepler_max_iterations: int = DEFAULT_KEPLER_MAX_ITERATIONS
    kepler_tolerance: float = DEFAULT_KEPLER_TOLERANCE
    lambert_max_iterations: int = DEFAULT_LAMBERT_MAX_ITERATIONS
    sample_step_rad: float = DEFAULT_SAMPLE_STEP_RAD


DEFAULT_SOLVER_CONFIG = SolverConfig()


def make_solver_config(
    kepler_max_iterations: Optional[int] = None,
    kepler_tolerance: Optional[float] = None,
    *,
    lambert_max_iterations: Optional[int] = None,
    sample_step_rad: Optional[float] = None,
) -> SolverConfig:
    """Normalize user-supplied solver settings into a SolverConfig.

    Missing or out-of-range values fall back to the defaults.
    """
    kepler_iter = kepler_max_iterations
    if kepler_iter is None or kepler_iter < 1:
        kepler_iter = DEFAULT_KEPLER_MAX_ITERATIONS
    tol = kepler_tolerance
    if tol is None or not tol > 0.0:
        tol = DEFAULT_KEPLER_TOLERANCE
    lambert_iter = lambert_max_iterations
    if lambert_iter is None or lambert_iter < 1:
        lambert_iter = DEFAULT_LAMBERT_MAX_ITERATIONS
    step = sample_step_rad
    if step is None or not step > 0.0:
        step = DEFAULT_SAMPLE_STEP_RAD
    return SolverConfig(
        kepler_max_iterations=int(kepler_iter),
        kepler_tolerance=float(tol),
        lambert_max_iterations=int(lambert_iter),
        sample_step_rad=float(step),
    )
