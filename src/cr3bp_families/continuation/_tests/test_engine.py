import numpy as np
import pytest

from cr3bp_families.core.energy import jacobi_energy
from cr3bp_families.core.system import EARTH_MOON
from cr3bp_families.continuation.engine import (
    ContinuationEngine,
    ContinuationSettings,
    Termination,
    secant_direction,
    pseudo_arc_length_step,
)
from cr3bp_families.continuation.records import OrbitFamilyMember, CorrectionRecord, OrbitFamily
from cr3bp_families.exceptions import ConfigurationError, PropagationError, SeedingError
from cr3bp_families.orbits.base import OrbitType
from cr3bp_families.orbits.corrector import Converged, FAILED
from cr3bp_families.utils.io import write_family

MU = EARTH_MOON.mass_parameter
REFERENCE_STATE = np.array([0.84, 0.0, 0.0, 0.0, 0.05, 0.0])


class StubGuesses:
    def __init__(self, seeds):
        self.seeds = seeds
        self.calls = []

    def guess(self, L_i, orbit_type, seed_index):
        self.calls.append(seed_index)
        state, period = self.seeds[seed_index]
        return np.array(state, dtype=float), period


class IdentityCorrector:
    """Accepts every trial as already periodic; fails on the calls listed in `fail_on`."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = 0

    def correct(self, L_i, orbit_type, state, period, mu, position_tolerance, velocity_tolerance):
        self.calls += 1
        if self.calls in self.fail_on:
            return FAILED
        state = np.array(state, dtype=float)
        return Converged(corrected_state=state, corrected_period=float(period), iteration_count=0,
                         half_period_time=float(period) / 2, half_period_state=state)


def stub_propagator(state, period, mu, **kwargs):
    return np.concatenate((state, np.eye(6).ravel()))


class StubClassifier:
    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.calls = []

    def __call__(self, state_and_stm, eigenvalue_tolerance, relaxed):
        self.calls.append(relaxed)
        return self.answers.pop(0) if self.answers else True


def _moving_seeds():
    second = REFERENCE_STATE.copy()
    second[0] += 1e-4
    second[4] += 2e-4
    return {0: (REFERENCE_STATE, 2.7), 1: (second, 2.7001)}


def _engine(seeds=None, corrector=None, classifier=None, L_i=1, orbit_type=OrbitType.HORIZONTAL, **settings):
    settings.setdefault("progress", False)
    return ContinuationEngine(
        L_i, orbit_type, EARTH_MOON,
        guess_provider=StubGuesses(seeds or _moving_seeds()),
        corrector=corrector or IdentityCorrector(),
        propagator=stub_propagator,
        classifier=classifier or StubClassifier(),
        settings=ContinuationSettings(**settings),
    )


def test_seeds_are_appended_unchanged():
    seeds = {0: (REFERENCE_STATE, 2.7), 1: (REFERENCE_STATE, 2.7 + 1e-6)}
    engine = _engine(seeds=seeds)

    result = engine.run()
    family = result.family

    assert len(family.members) == 2
    assert len(family.records) == 2
    assert engine.guess_provider.calls == [0, 1]
    for member, (state, period) in zip(family.members, (seeds[0], seeds[1])):
        assert np.array_equal(member.initial_state, state)
        assert member.period == period
    assert [record.iteration_count for record in family.records] == [0, 0]
    # Identical seed positions give no direction to continue along
    assert result.termination is Termination.CORRECTION_FAILED


def test_stops_after_first_failed_stability_check():
    classifier = StubClassifier([False])
    result = _engine(classifier=classifier).run()

    assert len(result.family.members) == 3
    assert len(result.family.records) == 3
    assert len(classifier.calls) == 1
    assert result.termination is Termination.STABILITY


def test_correction_failure_ends_family(tmp_path):
    # Two seed corrections, then the third continuation correction fails
    corrector = IdentityCorrector(fail_on={5})
    engine = _engine(corrector=corrector)
    result = engine.run()

    assert len(result.family.members) == 4
    assert len(result.family.records) == 4
    assert corrector.calls == 5
    assert result.termination is Termination.CORRECTION_FAILED

    conditions, corrections = write_family(result.family, 1, OrbitType.HORIZONTAL, tmp_path)
    assert len(conditions.read_text().splitlines()) == 4
    assert len(corrections.read_text().splitlines()) == 4


def test_member_cap():
    result = _engine(max_members=10).run()
    assert len(result.family) == 10
    assert result.termination is Termination.MEMBER_LIMIT


def test_cap_reached_by_seeds():
    classifier = StubClassifier()
    result = _engine(max_members=2, classifier=classifier).run()
    assert len(result.family) == 2
    assert classifier.calls == []
    assert result.termination is Termination.MEMBER_LIMIT


def test_stability_failure_on_last_allowed_member():
    result = _engine(max_members=3, classifier=StubClassifier([False])).run()
    assert len(result.family) == 3
    assert result.termination is Termination.STABILITY


def test_predictor_steps_keep_constant_position_displacement():
    result = _engine(max_members=8).run()
    members = result.family.members

    for previous, latest in zip(members[1:], members[2:]):
        displacement = latest.initial_state[:3] - previous.initial_state[:3]
        assert np.linalg.norm(displacement) == pytest.approx(1e-4, rel=1e-9)

    # With an identity corrector every prediction lies on the seed secant
    direction = secant_direction(members[0], members[1])
    for member in members[2:]:
        offset = np.concatenate((member.initial_state, [member.period])) - \
                 np.concatenate((members[1].initial_state, [members[1].period]))
        assert np.allclose(np.cross(offset[:3], direction[:3]), 0.0, atol=1e-15)


def test_records_carry_energies():
    result = _engine(max_members=4).run()
    for member, record in zip(result.family.members, result.family.records):
        assert member.energy == pytest.approx(jacobi_energy(member.initial_state, MU))
        assert record.half_period_energy == pytest.approx(jacobi_energy(record.half_period_state, MU))
        assert record.elapsed_time == pytest.approx(member.period / 2)
        assert np.array_equal(member.monodromy, np.eye(6).ravel())


def test_relaxed_mode_for_l2_horizontal():
    classifier = StubClassifier([True, False])
    _engine(L_i=2, classifier=classifier).run()
    assert classifier.calls == [True, True]

    classifier = StubClassifier([False])
    _engine(L_i=2, orbit_type=OrbitType.HALO, classifier=classifier).run()
    assert classifier.calls == [False]


def test_seed_failure_is_fatal():
    with pytest.raises(SeedingError):
        _engine(corrector=IdentityCorrector(fail_on={2})).run()


@pytest.mark.parametrize("L_i, orbit_type, settings", [
    (3, OrbitType.HORIZONTAL, {}),
    (1, "butterfly", {}),
    (1, OrbitType.HALO, {"max_members": 1}),
    (1, OrbitType.HALO, {"arc_length": 0.0}),
])
def test_configuration_errors_before_seeding(L_i, orbit_type, settings):
    guesses = StubGuesses(_moving_seeds())
    with pytest.raises(ConfigurationError):
        ContinuationEngine(L_i, orbit_type, EARTH_MOON, guesses, IdentityCorrector(), stub_propagator,
                           StubClassifier(), ContinuationSettings(progress=False, **settings))
    assert guesses.calls == []


def test_engine_normalises_inputs():
    engine = _engine(orbit_type="vertical", L_i=2)
    assert engine.orbit_type is OrbitType.VERTICAL
    assert engine.mu == MU
    assert engine.label == "L2 vertical"


def test_secant_direction_is_exact_difference():
    previous = OrbitFamilyMember(3.1, 2.5, np.array([0.8, 0.0, 0.01, 0.0, 0.1, 0.0]), np.eye(6).ravel())
    latest = OrbitFamilyMember(3.0, 2.6, np.array([0.81, 0.0, 0.02, 0.0, 0.12, 0.0]), np.eye(6).ravel())

    delta = secant_direction(previous, latest)

    expected = np.array([0.81 - 0.8, 0.0, 0.02 - 0.01, 0.0, 0.12 - 0.1, 0.0, 2.6 - 2.5])
    assert np.array_equal(delta, expected)


@pytest.mark.parametrize("scale", [1e-9, 1e-4, 1.0, 1e3])
def test_step_normalization(scale):
    delta = scale * np.array([0.3, -0.2, 0.1, 5.0, 7.0, -1.0, 2.0])
    step = pseudo_arc_length_step(delta)
    assert step * np.linalg.norm(delta[:3]) == pytest.approx(1e-4, rel=1e-12)


def test_step_undefined_without_position_change():
    assert pseudo_arc_length_step(np.array([0, 0, 0, 1.0, 0, 0, 1.0])) is None


def test_family_appends_in_lockstep():
    family = OrbitFamily()
    member = OrbitFamilyMember(3.0, 2.7, REFERENCE_STATE, np.eye(6).ravel())
    record = CorrectionRecord(2, 3.0, 1.35, REFERENCE_STATE)
    family.append(member, record)
    assert len(family.members) == len(family.records) == len(family) == 1
    with pytest.raises(IndexError):
        family.last_two()


def test_identical_runs_write_identical_files(tmp_path):
    outputs = []
    for run in ("first", "second"):
        result = _engine(max_members=6).run()
        paths = write_family(result.family, 1, OrbitType.HORIZONTAL, tmp_path / run)
        outputs.append([path.read_bytes() for path in paths])
    assert outputs[0] == outputs[1]


def test_trajectories_are_requested_when_enabled(tmp_path):
    requested = []

    def recording_propagator(state, period, mu, **kwargs):
        requested.append(kwargs.get("trajectory_path"))
        return stub_propagator(state, period, mu)

    engine = _engine(max_members=3, save_trajectories=True, trajectory_dir=str(tmp_path))
    engine.propagator = recording_propagator
    engine.run()

    assert [path.name for path in requested] == [
        "L1_horizontal_0.txt", "L1_horizontal_1.txt", "L1_horizontal_2.txt"]


class FailingPropagator:
    """Stub propagator raising PropagationError on the calls listed in `fail_on`."""

    def __init__(self, fail_on):
        self.fail_on = set(fail_on)
        self.calls = 0

    def __call__(self, state, period, mu, **kwargs):
        self.calls += 1
        if self.calls in self.fail_on:
            raise PropagationError("step size too small")
        return stub_propagator(state, period, mu)


def test_seed_propagation_failure_is_fatal():
    engine = _engine()
    engine.propagator = FailingPropagator(fail_on={2})
    with pytest.raises(SeedingError):
        engine.run()


def test_propagation_failure_ends_family_without_partial_member():
    corrector = IdentityCorrector()
    engine = _engine(corrector=corrector)
    # Two seeds and two continuation steps, then the fifth propagation fails
    engine.propagator = FailingPropagator(fail_on={5})

    result = engine.run()

    assert corrector.calls == 5
    assert len(result.family.members) == 4
    assert len(result.family.records) == 4
    assert result.termination is Termination.CORRECTION_FAILED


def test_stability_indices_logged_at_end(caplog):
    caplog.set_level("INFO", logger="cr3bp_families.continuation")
    _engine(classifier=StubClassifier([False])).run()
    assert any("stability indices of the last member" in message for message in caplog.messages)
