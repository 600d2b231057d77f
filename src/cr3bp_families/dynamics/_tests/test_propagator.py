import numpy as np
import pytest

from cr3bp_families.core.energy import jacobi_energy
from cr3bp_families.dynamics.equations import crtbp_accel, jacobian_crtbp, variational_equations
from cr3bp_families.dynamics.propagator import propagate_full_period, find_half_period_crossing
from cr3bp_families.core.lagrange_points import get_lagrange_point

MU = 0.0121505856

# L1 planar Lyapunov orbit
LYAPUNOV_STATE = np.array([0.843995693043320, 0, 0, 0, -0.0565838306397683, 0])
LYAPUNOV_PERIOD = 2.70081224387894


def test_accel_vanishes_at_libration_point():
    L1 = get_lagrange_point(MU, 1)
    f = crtbp_accel(np.array([L1[0], 0, 0, 0, 0, 0]), MU)
    assert np.allclose(f, 0.0, atol=1e-12)


def test_jacobian_structure():
    A = jacobian_crtbp(0.8, 0.01, 0.02, MU)
    assert A.shape == (6, 6)
    assert np.array_equal(A[0:3, 3:6], np.eye(3))
    assert A[3, 4] == 2.0 and A[4, 3] == -2.0


def test_jacobian_matches_finite_differences():
    state = np.array([0.82, 0.03, -0.02, 0.01, 0.1, -0.05])
    A = jacobian_crtbp(state[0], state[1], state[2], MU)

    h = 1e-7
    numerical = np.empty((6, 6))
    for j in range(6):
        step = np.zeros(6)
        step[j] = h
        numerical[:, j] = (crtbp_accel(state + step, MU) - crtbp_accel(state - step, MU)) / (2 * h)
    assert np.allclose(A, numerical, atol=1e-6)


def test_variational_equations_layout():
    state = np.array([0.82, 0.03, -0.02, 0.01, 0.1, -0.05])
    y = np.concatenate((state, np.eye(6).ravel()))

    dy = variational_equations(0.0, y, MU)

    assert dy.shape == (42,)
    assert np.allclose(dy[:6], crtbp_accel(state, MU))
    assert np.allclose(dy[6:].reshape(6, 6), jacobian_crtbp(state[0], state[1], state[2], MU))


def test_propagate_full_period_shape():
    state_and_stm = propagate_full_period(LYAPUNOV_STATE, LYAPUNOV_PERIOD, MU)
    assert state_and_stm.shape == (42,)


def test_short_propagation_keeps_identity_stm():
    state_and_stm = propagate_full_period(LYAPUNOV_STATE, 1e-10, MU)
    assert np.allclose(state_and_stm[:6], LYAPUNOV_STATE, atol=1e-9)
    assert np.allclose(state_and_stm[6:].reshape(6, 6), np.eye(6), atol=1e-8)


def test_full_period_returns_to_initial_state():
    state_and_stm = propagate_full_period(LYAPUNOV_STATE, LYAPUNOV_PERIOD, MU)
    assert np.allclose(state_and_stm[:6], LYAPUNOV_STATE, atol=1e-6)

    # Hamiltonian flow: the monodromy matrix has unit determinant
    monodromy = state_and_stm[6:].reshape(6, 6)
    assert np.linalg.det(monodromy) == pytest.approx(1.0, rel=1e-6)
    assert jacobi_energy(state_and_stm[:6], MU) == pytest.approx(jacobi_energy(LYAPUNOV_STATE, MU), abs=1e-10)


def test_half_period_crossing():
    t_cross, state, stm = find_half_period_crossing(LYAPUNOV_STATE, MU, axis=1, max_time=LYAPUNOV_PERIOD)
    assert t_cross == pytest.approx(LYAPUNOV_PERIOD / 2, abs=1e-6)
    assert abs(state[1]) < 1e-12
    assert abs(state[3]) < 1e-6
    assert stm.shape == (6, 6)


def test_no_crossing_before_horizon():
    assert find_half_period_crossing(LYAPUNOV_STATE, MU, axis=1, max_time=0.1) is None


def test_no_crossing_without_normal_velocity():
    state = LYAPUNOV_STATE.copy()
    state[4] = 0.0
    assert find_half_period_crossing(state, MU, axis=1, max_time=LYAPUNOV_PERIOD) is None


def test_trajectory_is_persisted(tmp_path):
    path = tmp_path / "trajectories" / "orbit.txt"
    propagate_full_period(LYAPUNOV_STATE, LYAPUNOV_PERIOD, MU, trajectory_path=path, steps=50)
    rows = np.loadtxt(path)
    assert rows.shape == (50, 7)
    assert rows[0, 0] == 0.0
    assert rows[-1, 0] == pytest.approx(LYAPUNOV_PERIOD)


@pytest.mark.parametrize("state, period", [
    (np.zeros(5), 1.0),
    (LYAPUNOV_STATE, 0.0),
    (LYAPUNOV_STATE, -1.0),
])
def test_invalid_arguments(state, period):
    with pytest.raises(ValueError):
        propagate_full_period(state, period, MU)


def test_solver_defaults_allow_correction_tolerance():
    from cr3bp_families.config import INTEGRATOR_RTOL, INTEGRATOR_ATOL, POSITION_TOLERANCE
    from cr3bp_families.dynamics.propagator import _solver_defaults

    defaults = _solver_defaults({})
    assert defaults == {"method": "DOP853", "rtol": INTEGRATOR_RTOL, "atol": INTEGRATOR_ATOL}
    assert (INTEGRATOR_RTOL, INTEGRATOR_ATOL) == (3.0e-14, 1.0e-14)
    assert INTEGRATOR_ATOL < POSITION_TOLERANCE
    assert _solver_defaults({"rtol": 1e-10})["rtol"] == 1e-10
