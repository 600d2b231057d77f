"""
Differential correction of symmetric libration point orbits.

A trial initial state lying on a symmetry plane is propagated, together with
its State Transition Matrix, until it returns to that plane half a period
later. The components that must vanish there for the orbit to be periodic
are driven to zero by Newton updates of a few free initial components, the
remaining ones being held fixed. The linearisation accounts for the change
of the crossing time, as in the classical halo corrector:

    J = Phi[targets, free] - f[targets] Phi[axis, free] / f[axis]

where f is the vector field at the crossing.

The raw corrector reports its result as a 15-vector
[state (6), period, half-period state (6), half-period time, iterations],
all zeros when the correction fails. CorrectionOutcome.from_vector turns it
into a Converged outcome or the FAILED sentinel.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from cr3bp_families.config import POSITION_TOLERANCE, VELOCITY_TOLERANCE, MAX_CORRECTION_ITERATIONS
from cr3bp_families.dynamics.equations import crtbp_accel
from cr3bp_families.dynamics.propagator import find_half_period_crossing
from cr3bp_families.orbits.base import SHOOTING_SCHEMES, parse_orbit_type

logger = logging.getLogger(__name__)

RESULT_SIZE = 15


class CorrectionOutcome:
    """Result of one differential correction episode."""

    converged = False

    @staticmethod
    def from_vector(vector):
        """
        Interpret the raw 15-vector returned by apply_differential_correction.

        An all-zero vector is the failure sentinel.
        """
        vector = np.asarray(vector, dtype=np.float64)
        if vector.shape != (RESULT_SIZE,):
            raise ValueError(f"Correction result must have {RESULT_SIZE} components, got shape {vector.shape}")
        if not np.any(vector):
            return FAILED
        return Converged(
            corrected_state=vector[0:6].copy(),
            corrected_period=float(vector[6]),
            iteration_count=int(round(vector[14])),
            half_period_time=float(vector[13]),
            half_period_state=vector[7:13].copy(),
        )


@dataclass(frozen=True, eq=False)
class Converged(CorrectionOutcome):
    """
    A periodic orbit found by the corrector.

    Attributes
    ----------
    corrected_state : ndarray
        Initial state [x, y, z, vx, vy, vz] of the periodic orbit
    corrected_period : float
        Orbital period
    iteration_count : int
        Newton updates applied to the trial state
    half_period_time : float
        Integration time to the half-period crossing
    half_period_state : ndarray
        State at the half-period crossing
    """

    corrected_state: np.ndarray
    corrected_period: float
    iteration_count: int
    half_period_time: float
    half_period_state: np.ndarray
    converged: bool = field(default=True, init=False)

    def to_vector(self):
        """Raw 15-vector form of the outcome."""
        vector = np.zeros(RESULT_SIZE, dtype=np.float64)
        vector[0:6] = self.corrected_state
        vector[6] = self.corrected_period
        vector[7:13] = self.half_period_state
        vector[13] = self.half_period_time
        vector[14] = self.iteration_count
        return vector


class _Failed(CorrectionOutcome):

    def to_vector(self):
        return np.zeros(RESULT_SIZE, dtype=np.float64)

    def __repr__(self):
        return "FAILED"


FAILED = _Failed()


def _residual_converged(residual, targets, position_tolerance, velocity_tolerance):
    for value, index in zip(residual, targets):
        tolerance = position_tolerance if index < 3 else velocity_tolerance
        if abs(value) > tolerance:
            return False
    return True


def apply_differential_correction(L_i, orbit_type, trial_state, trial_period, mu,
                                  position_tolerance=POSITION_TOLERANCE,
                                  velocity_tolerance=VELOCITY_TOLERANCE,
                                  max_iterations=MAX_CORRECTION_ITERATIONS,
                                  **solver_kwargs):
    """
    Correct a trial state into a symmetric periodic orbit.
    
    Parameters
    ----------
    L_i : int
        Libration point index (1 or 2); identifies the family in log messages
    orbit_type : OrbitType or str
        Family being corrected, selecting the symmetry plane, the targets and
        the free variables
    trial_state : array_like, shape (6,)
        Initial state guess [x0, y0, z0, vx0, vy0, vz0] on the symmetry plane
    trial_period : float
        Period guess; the half-period crossing is searched up to this time
    mu : float
        Three-body mass parameter
    position_tolerance : float, optional
        Convergence tolerance on position components at the crossing
    velocity_tolerance : float, optional
        Convergence tolerance on velocity components at the crossing
    max_iterations : int, optional
        Maximum number of Newton updates
    **solver_kwargs
        Additional keyword arguments passed to the ODE solver
    
    Returns
    -------
    ndarray, shape (15,)
        [state (6), period, half-period state (6), half-period time, iterations],
        or all zeros if the correction failed
    """
    orbit_type = parse_orbit_type(orbit_type)
    scheme = SHOOTING_SCHEMES[orbit_type]
    targets = list(scheme.targets)
    free = list(scheme.free)
    axis = scheme.crossing_axis

    X0 = np.array(trial_state, dtype=np.float64)
    position_checks = [axis] + targets

    for attempt in range(max_iterations + 1):
        crossing = find_half_period_crossing(X0, mu, axis, trial_period, **solver_kwargs)
        if crossing is None:
            logger.debug("L%d %s: no half-period crossing before t=%.6f (attempt %d)",
                         L_i, orbit_type.value, trial_period, attempt)
            return np.zeros(RESULT_SIZE)

        t_half, x_half, phi = crossing
        residual = x_half[position_checks]

        if _residual_converged(residual, position_checks, position_tolerance, velocity_tolerance):
            return Converged(
                corrected_state=X0,
                corrected_period=2 * t_half,
                iteration_count=attempt,
                half_period_time=t_half,
                half_period_state=x_half,
            ).to_vector()

        if attempt == max_iterations:
            break

        f = crtbp_accel(x_half, mu)
        J = phi[np.ix_(targets, free)] - np.outer(f[targets], phi[axis, free]) / f[axis]

        try:
            update = np.linalg.solve(J, -x_half[targets])
        except np.linalg.LinAlgError:
            logger.debug("L%d %s: singular correction matrix (attempt %d)", L_i, orbit_type.value, attempt)
            return np.zeros(RESULT_SIZE)

        if not np.all(np.isfinite(update)):
            return np.zeros(RESULT_SIZE)

        X0[free] += update
        logger.debug("L%d %s: attempt %d, residual %s, update %s",
                     L_i, orbit_type.value, attempt, x_half[targets], update)

    logger.debug("L%d %s: maximum number of correction attempts (%d) exceeded",
                 L_i, orbit_type.value, max_iterations)
    return np.zeros(RESULT_SIZE)


class OrbitCorrector:
    """
    Shooting corrector used by the continuation engine.

    Parameters
    ----------
    max_iterations : int, optional
        Maximum number of Newton updates per correction
    **solver_kwargs
        Additional keyword arguments passed to the ODE solver
    """

    def __init__(self, max_iterations=MAX_CORRECTION_ITERATIONS, **solver_kwargs):
        self.max_iterations = max_iterations
        self.solver_kwargs = solver_kwargs

    def correct(self, L_i, orbit_type, trial_state, trial_period, mu,
                position_tolerance=POSITION_TOLERANCE, velocity_tolerance=VELOCITY_TOLERANCE):
        """
        Correct a trial (state, period) pair.

        Returns
        -------
        CorrectionOutcome
            Converged outcome, or FAILED
        """
        vector = apply_differential_correction(
            L_i, orbit_type, trial_state, trial_period, mu,
            position_tolerance=position_tolerance,
            velocity_tolerance=velocity_tolerance,
            max_iterations=self.max_iterations,
            **self.solver_kwargs)
        return CorrectionOutcome.from_vector(vector)
