"""
Run-wide defaults for the libration point orbit family computations.

All values are module-level constants so that the job runner, the engine and
the tests read the same numbers. Lengths and times are in the non-dimensional
units of the CR3BP (distance between the primaries, inverse mean motion).
"""

import numpy as np

# Physical system
#----------------

#: float: Gravitational parameter of the Earth (m^3 s^-2)
EARTH_GM = np.float64(3.986004418e14)

#: float: Gravitational parameter of the Moon (m^3 s^-2)
MOON_GM = np.float64(4.9048695e12)

# Continuation
#-------------

#: int: Hard cap on the number of members of one family
MAX_MEMBERS = 4000

#: float: Position displacement of every pseudo-arc-length predictor step
ARC_LENGTH = 1.0e-4

#: float: Maximum eigenvalue deviation used by the stability classifier
EIGENVALUE_TOLERANCE = 1.0e-3

# Differential correction
#------------------------

POSITION_TOLERANCE = 1.0e-12
VELOCITY_TOLERANCE = 1.0e-12

#: int: Newton updates allowed before the corrector reports failure
MAX_CORRECTION_ITERATIONS = 20

# Integration
#------------

INTEGRATOR_METHOD = "DOP853"
INTEGRATOR_RTOL = 3.0e-14
INTEGRATOR_ATOL = 1.0e-14

#: int: Number of samples written per persisted trajectory
TRAJECTORY_STEPS = 1000

NUMBA_FASTMATH = True

# Output
#-------

OUTPUT_DIR = "data/raw/orbits"
TRAJECTORY_DIR = "data/raw/orbits/trajectories"
LOG_DIR = "logs"

#: int: Column width of every field in the output text files
FIELD_WIDTH = 25

#: int: Significant digits needed to round-trip a float64 (numpy finfo precision + 2)
ROUND_TRIP_DIGITS = np.finfo(np.float64).precision + 2
