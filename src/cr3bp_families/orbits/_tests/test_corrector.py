import numpy as np
import pytest

from cr3bp_families.core.system import EARTH_MOON
from cr3bp_families.dynamics.propagator import propagate_full_period
from cr3bp_families.orbits.base import OrbitType
from cr3bp_families.orbits.corrector import (
    OrbitCorrector,
    CorrectionOutcome,
    Converged,
    FAILED,
    apply_differential_correction,
)
from cr3bp_families.orbits.initial_guess import InitialGuessProvider

MU = 0.0121505856

# L1 planar Lyapunov orbit
LYAPUNOV_STATE = np.array([0.843995693043320, 0, 0, 0, -0.0565838306397683, 0])
LYAPUNOV_PERIOD = 2.70081224387894


def test_zero_vector_is_failure_sentinel():
    outcome = CorrectionOutcome.from_vector(np.zeros(15))
    assert outcome is FAILED
    assert not outcome.converged


def test_from_vector_layout():
    vector = np.arange(1.0, 16.0)
    outcome = CorrectionOutcome.from_vector(vector)
    assert isinstance(outcome, Converged)
    assert np.array_equal(outcome.corrected_state, vector[0:6])
    assert outcome.corrected_period == 7.0
    assert np.array_equal(outcome.half_period_state, vector[7:13])
    assert outcome.half_period_time == 14.0
    assert outcome.iteration_count == 15
    assert np.array_equal(outcome.to_vector(), vector)


def test_from_vector_rejects_wrong_size():
    with pytest.raises(ValueError):
        CorrectionOutcome.from_vector(np.ones(14))


def test_correct_perturbed_lyapunov_orbit():
    trial = LYAPUNOV_STATE.copy()
    trial[4] += 1e-6

    outcome = OrbitCorrector().correct(1, OrbitType.HORIZONTAL, trial, LYAPUNOV_PERIOD, MU)

    assert outcome.converged
    assert outcome.iteration_count >= 1
    assert outcome.corrected_state[0] == LYAPUNOV_STATE[0]
    assert outcome.corrected_state[4] == pytest.approx(LYAPUNOV_STATE[4], abs=1e-6)
    assert outcome.corrected_period == pytest.approx(LYAPUNOV_PERIOD, abs=1e-5)
    assert outcome.corrected_period == 2 * outcome.half_period_time
    assert abs(outcome.half_period_state[3]) <= 1e-12


def test_corrected_seed_is_periodic():
    """The Richardson guess of the first L1 horizontal seed converges to a periodic orbit."""
    mu = EARTH_MOON.mass_parameter
    state, period = InitialGuessProvider(mu).guess(1, OrbitType.HORIZONTAL, 0)

    outcome = OrbitCorrector().correct(1, OrbitType.HORIZONTAL, state, period, mu)

    assert outcome.converged
    assert 2.6 < outcome.corrected_period < 2.8
    final = propagate_full_period(outcome.corrected_state, outcome.corrected_period, mu)
    assert np.allclose(final[:6], outcome.corrected_state, atol=1e-8)


def test_raw_vector_form():
    trial = LYAPUNOV_STATE.copy()
    trial[4] += 1e-6

    vector = apply_differential_correction(1, "horizontal", trial, LYAPUNOV_PERIOD, MU)

    assert vector.shape == (15,)
    assert np.any(vector)
    assert vector[6] == pytest.approx(2 * vector[13])


def test_iteration_budget_exhausted_returns_sentinel():
    trial = LYAPUNOV_STATE.copy()
    trial[4] += 1e-4

    outcome = OrbitCorrector(max_iterations=0).correct(1, OrbitType.HORIZONTAL, trial, LYAPUNOV_PERIOD, MU)

    assert outcome is FAILED


def test_missing_crossing_returns_sentinel():
    vector = apply_differential_correction(1, OrbitType.HORIZONTAL, LYAPUNOV_STATE, 0.5, MU)
    assert not np.any(vector)
