"""
Pseudo-arc-length continuation of a periodic orbit family.

A family is started from two corrected seed orbits. Each new member is
predicted along the secant through the last two members in
(initial state, period) space, scaled so that the initial position moves by a
fixed distance, and then corrected. The family ends when the monodromy test
fails, when a correction fails, or when the member cap is reached.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import numpy as np
from tqdm import tqdm

from cr3bp_families.config import (
    MAX_MEMBERS,
    ARC_LENGTH,
    POSITION_TOLERANCE,
    VELOCITY_TOLERANCE,
    EIGENVALUE_TOLERANCE,
    TRAJECTORY_DIR,
)
from cr3bp_families.core.energy import jacobi_energy
from cr3bp_families.exceptions import ConfigurationError, PropagationError, SeedingError
from cr3bp_families.orbits.base import parse_orbit_type, check_libration_point
from cr3bp_families.orbits.initial_guess import SEED_INDICES
from cr3bp_families.orbits.stability import relaxed_mode_for, stability_indices
from cr3bp_families.continuation.records import (
    OrbitFamilyMember,
    CorrectionRecord,
    OrbitFamily,
    ContinuationState,
)

logger = logging.getLogger(__name__)


class Termination(str, Enum):
    """Reason a family stopped growing."""

    STABILITY = "stability"
    CORRECTION_FAILED = "correction_failed"
    MEMBER_LIMIT = "member_limit"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class ContinuationSettings:
    """Per-run parameters of the continuation."""

    max_members: int = MAX_MEMBERS
    arc_length: float = ARC_LENGTH
    position_tolerance: float = POSITION_TOLERANCE
    velocity_tolerance: float = VELOCITY_TOLERANCE
    eigenvalue_tolerance: float = EIGENVALUE_TOLERANCE
    save_trajectories: bool = False
    trajectory_dir: Optional[str] = None
    progress: bool = True

    def validate(self):
        if self.max_members < len(SEED_INDICES):
            raise ConfigurationError(
                f"max_members must be at least {len(SEED_INDICES)}, got {self.max_members}")
        if not self.arc_length > 0:
            raise ConfigurationError(f"arc_length must be positive, got {self.arc_length}")
        if not (self.position_tolerance > 0 and self.velocity_tolerance > 0 and self.eigenvalue_tolerance > 0):
            raise ConfigurationError("Tolerances must be positive")


@dataclass(frozen=True)
class ContinuationResult:
    family: OrbitFamily
    termination: Termination


def _as_vector(member):
    return np.concatenate((member.initial_state, [member.period]))


def secant_direction(previous, latest):
    """
    Difference of the (initial state, period) 7-vectors of two members.

    Parameters
    ----------
    previous, latest : OrbitFamilyMember
        Two consecutive family members

    Returns
    -------
    ndarray, shape (7,)
        latest - previous
    """
    return _as_vector(latest) - _as_vector(previous)


def pseudo_arc_length_step(delta, target=ARC_LENGTH):
    """
    Scale factor moving the initial position by `target` along `delta`.

    Returns
    -------
    float
        target / ||delta[:3]||, or None if the position part of delta is zero
    """
    position_norm = np.linalg.norm(np.asarray(delta)[:3])
    if position_norm == 0.0 or not np.isfinite(position_norm):
        return None
    return target / position_norm


class ContinuationEngine:
    """
    Traces one orbit family around a libration point.

    Parameters
    ----------
    L_i : int
        Libration point index (1 or 2)
    orbit_type : OrbitType or str
        Family to trace
    system : PhysicalSystemConfig
        Primaries of the CR3BP
    guess_provider : object
        Provides guess(L_i, orbit_type, seed_index) -> (state, period)
    corrector : object
        Provides correct(L_i, orbit_type, state, period, mu, position_tolerance,
        velocity_tolerance) -> CorrectionOutcome
    propagator : callable
        propagator(state, period, mu, **kwargs) -> [state(6), STM(36)]
    classifier : callable
        classifier(state_and_stm, eigenvalue_tolerance, relaxed) -> bool
    settings : ContinuationSettings, optional

    Raises
    ------
    ConfigurationError
        If the libration point, orbit type or settings are invalid
    """

    def __init__(self, L_i, orbit_type, system, guess_provider, corrector, propagator,
                 classifier, settings=None):
        self.L_i = check_libration_point(L_i)
        self.orbit_type = parse_orbit_type(orbit_type)
        self.system = system
        self.guess_provider = guess_provider
        self.corrector = corrector
        self.propagator = propagator
        self.classifier = classifier
        self.settings = settings or ContinuationSettings()
        self.mu = system.mass_parameter
        self._validate()

    @property
    def label(self):
        return f"L{self.L_i} {self.orbit_type}"

    def _validate(self):
        self.settings.validate()
        validate = getattr(self.guess_provider, "validate", None)
        if validate is not None:
            validate(self.L_i, self.orbit_type)

    def _trajectory_kwargs(self, index):
        if not self.settings.save_trajectories:
            return {}
        directory = Path(self.settings.trajectory_dir or TRAJECTORY_DIR)
        name = f"L{self.L_i}_{self.orbit_type.value}_{index}.txt"
        return {"trajectory_path": directory / name}

    def _correct(self, state, period, mu):
        return self.corrector.correct(
            self.L_i, self.orbit_type, state, period, mu,
            position_tolerance=self.settings.position_tolerance,
            velocity_tolerance=self.settings.velocity_tolerance)

    def _build(self, outcome, state_and_stm):
        member = OrbitFamilyMember(
            energy=jacobi_energy(state_and_stm[:6], self.mu),
            period=float(outcome.corrected_period),
            initial_state=np.array(outcome.corrected_state, dtype=np.float64),
            monodromy=np.array(state_and_stm[6:], dtype=np.float64),
        )
        record = CorrectionRecord(
            iteration_count=int(outcome.iteration_count),
            half_period_energy=jacobi_energy(outcome.half_period_state, self.mu),
            elapsed_time=float(outcome.half_period_time),
            half_period_state=np.array(outcome.half_period_state, dtype=np.float64),
        )
        return member, record

    def _seed(self, family):
        for seed_index in SEED_INDICES:
            state, period = self.guess_provider.guess(self.L_i, self.orbit_type, seed_index)
            outcome = self._correct(state, period, self.mu)
            if not outcome.converged:
                raise SeedingError(f"{self.label}: seed {seed_index} did not converge")

            try:
                state_and_stm = self.propagator(outcome.corrected_state, outcome.corrected_period, self.mu,
                                                **self._trajectory_kwargs(len(family)))
            except PropagationError as e:
                raise SeedingError(f"{self.label}: seed {seed_index} could not be propagated: {e}") from e

            family.append(*self._build(outcome, state_and_stm))
            logger.info("%s: seed %d converged in %d iterations (T = %.10f)",
                        self.label, seed_index, outcome.iteration_count, outcome.corrected_period)

    def _step(self, state):
        """
        One predictor-corrector step; returns False if the family cannot be extended.
        """
        previous, latest = state.family.last_two()
        delta = secant_direction(previous, latest)
        step_size = pseudo_arc_length_step(delta, self.settings.arc_length)
        if step_size is None:
            logger.warning("%s: degenerate secant after %d members", self.label, len(state.family))
            return False
        state.step_size = step_size

        prediction = _as_vector(latest) + step_size * delta
        logger.debug("%s: pseudo-arc-length correction %s", self.label, step_size * delta)

        outcome = self._correct(prediction[:6], prediction[6], self.mu)
        if not outcome.converged:
            logger.info("%s: correction failed after %d members", self.label, len(state.family))
            return False

        try:
            state_and_stm = self.propagator(outcome.corrected_state, outcome.corrected_period, self.mu,
                                            **self._trajectory_kwargs(len(state.family)))
        except PropagationError as e:
            logger.warning("%s: propagation failed after %d members: %s", self.label, len(state.family), e)
            return False

        member, record = self._build(outcome, state_and_stm)
        state.family.append(member, record)

        # The member is kept even when it is the first one to fail the test
        state.active = bool(self.classifier(
            state_and_stm,
            eigenvalue_tolerance=self.settings.eigenvalue_tolerance,
            relaxed=relaxed_mode_for(self.L_i, self.orbit_type)))
        return True

    def _log_stability(self, member):
        monodromy = member.monodromy.reshape(6, 6)
        if not np.all(np.isfinite(monodromy)):
            return
        (nu1, nu2), _ = stability_indices(monodromy)
        logger.info("%s: stability indices of the last member: nu1 = %.6g, nu2 = %.6g",
                    self.label, nu1.real, nu2.real)

    def run(self):
        """
        Trace the family.

        Returns
        -------
        ContinuationResult
            The accumulated family and the reason it ended

        Raises
        ------
        SeedingError
            If either seed orbit cannot be corrected
        """
        family = OrbitFamily()
        self._seed(family)

        state = ContinuationState(family=family)
        termination = None
        with tqdm(total=self.settings.max_members, initial=len(family), desc=self.label,
                  disable=not self.settings.progress, leave=False) as progress:
            while len(family) < self.settings.max_members and state.active:
                if not self._step(state):
                    termination = Termination.CORRECTION_FAILED
                    break
                progress.update(1)

        if termination is None:
            termination = Termination.MEMBER_LIMIT if state.active else Termination.STABILITY

        logger.info("%s: family ended with %d members (%s)", self.label, len(family), termination)
        self._log_stability(family.members[-1])
        return ContinuationResult(family=family, termination=termination)
