"""
Numerical constants for the orbit planner.

This module contains the tuning constants used by the angle arithmetic, the
anomaly solvers and the Lambert solver. Units are SI (m, s, rad) throughout.
"""
import math

TWO_PI = 2.0 * math.pi

# Kepler equation solvers (elliptical and hyperbolic)
KEPLER_MAX_ITERATIONS = 100
KEPLER_TOLERANCE = 1e-15  # residual of Kepler's equation (rad)

# Izzo's Lambert solver, fixed number of Householder steps
LAMBERT_MAX_ITERATIONS = 10

# Orbit sampling
ORBIT_DEFAULT_STEP_RAD = 0.001

# Angle equality tolerance (rad), applied at 0 and across the 2*pi seam
ANGLE_TOLERANCE = 1e-10

# Eccentricities this close to 1 are treated as exactly parabolic
PARABOLIC_ECCENTRICITY_TOLERANCE = 1e-9

# Eccentricities below this have no usable periapsis direction
CIRCULAR_ECCENTRICITY_TOLERANCE = 1e-12

# Default parking orbit: periapsis is 5% above the surface, rounded up to 25 km
DEFAULT_ORBIT_ALTITUDE_FACTOR = 1.05
DEFAULT_ORBIT_ROUNDING = 25000.0  # m

# Orbits whose node vector is shorter than this are treated as equatorial
EQUATORIAL_TOLERANCE = 1e-12

# Above this eccentricity the elliptical Kepler solver starts from the near-parabolic cubic
NEAR_PARABOLIC_ECCENTRICITY = 0.9

# Lambert endpoints closer than this fraction of their radius, or separated by an
# angle whose sine is below it, have no unique transfer plane
LAMBERT_DEGENERATE_TOLERANCE = 1e-12
