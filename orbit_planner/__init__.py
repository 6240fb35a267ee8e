# Configure JAX to use double precision (64-bit floats) throughout the package
import jax
jax.config.update("jax_enable_x64", True)

from .orbital_elements import OrbitalElements
from .state_vector import StateVector

from .constants import (
    # Constants
    TWO_PI,
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    LAMBERT_MAX_ITERATIONS,
    ORBIT_DEFAULT_STEP_RAD,
    ANGLE_TOLERANCE,
)

from .config import (
    SolverConfig,
    DEFAULT_SOLVER_CONFIG,
    make_solver_config,
)

from .angle import Angle

from .bodies import (
    # Body class
    GravitationalBody,
    load_bodies_data,
    get_body,
    bodies_data,
    KSP_BODY_NAMES,
)

from .kepler import (
    # Anomaly solvers
    solve_kepler,
    solve_kepler_hyperbolic,
    solve_barker,
)

from .lambert import (
    # Lambert solver
    lambert_izzo,
    solve_lambert,
)

from .orbit import (
    Orbit,
    ConicSection,
    InfiniteTimeError,
    DegenerateOrbitError,
    point_at_infinity,
    is_point_at_infinity,
)

from .sampling import (
    sample_true_anomalies,
    orbital_points,
)

from .maneuvers import (
    ManeuverBreakdown,
    maneuver_delta_v,
    decompose_delta_v,
    transfer_delta_v,
)

__all__ = [
    # Constants
    "TWO_PI",
    "KEPLER_MAX_ITERATIONS",
    "KEPLER_TOLERANCE",
    "LAMBERT_MAX_ITERATIONS",
    "ORBIT_DEFAULT_STEP_RAD",
    "ANGLE_TOLERANCE",

    # Configuration
    "SolverConfig",
    "DEFAULT_SOLVER_CONFIG",
    "make_solver_config",

    # Named tuples
    "OrbitalElements",
    "StateVector",

    # Angles
    "Angle",

    # Bodies
    "GravitationalBody",
    "load_bodies_data",
    "get_body",
    "bodies_data",
    "KSP_BODY_NAMES",

    # Anomaly solvers
    "solve_kepler",
    "solve_kepler_hyperbolic",
    "solve_barker",

    # Lambert solver
    "lambert_izzo",
    "solve_lambert",

    # Orbits
    "Orbit",
    "ConicSection",
    "InfiniteTimeError",
    "DegenerateOrbitError",
    "point_at_infinity",
    "is_point_at_infinity",

    # Sampling
    "sample_true_anomalies",
    "orbital_points",

    # Maneuvers
    "ManeuverBreakdown",
    "maneuver_delta_v",
    "decompose_delta_v",
    "transfer_delta_v",
]
