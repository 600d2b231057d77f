"""
Equations of motion and variational equations of the CR3BP in the rotating frame.

All functions are compiled with Numba. The combined state + STM vector has the
same layout as the propagation results: [state (6), STM flattened row-major (36)].
"""

import numba
import numpy as np

from cr3bp_families.config import NUMBA_FASTMATH


@numba.njit(fastmath=NUMBA_FASTMATH, cache=True)
def _offsets(r, mu):
    """Position relative to the primary at (-mu, 0, 0) and the secondary at (1-mu, 0, 0)."""
    d1 = r.copy()
    d2 = r.copy()
    d1[0] += mu
    d2[0] -= 1.0 - mu
    return d1, d2


@numba.njit(fastmath=NUMBA_FASTMATH, cache=True)
def _gravity_gradient(d, gm):
    """Gradient of the point-mass attraction -gm d / |d|^3 with respect to position."""
    r2 = np.sum(d * d)
    r3 = r2 * np.sqrt(r2)
    return gm * (3.0 * np.outer(d, d) / (r2 * r3) - np.eye(3) / r3)


@numba.njit(fastmath=NUMBA_FASTMATH, cache=True)
def crtbp_accel(state, mu):
    """
    Time derivative [v, a] of a state [r, v] in the rotating frame.
    """
    r = state[:3]
    v = state[3:6]
    d1, d2 = _offsets(r, mu)
    r1 = np.sqrt(np.sum(d1 * d1))
    r2 = np.sqrt(np.sum(d2 * d2))

    gravity = -(1.0 - mu) * d1 / r1**3 - mu * d2 / r2**3

    f = np.empty(6, dtype=np.float64)
    f[:3] = v
    # Centrifugal and Coriolis terms act in the x-y plane only
    f[3] = gravity[0] + r[0] + 2.0 * v[1]
    f[4] = gravity[1] + r[1] - 2.0 * v[0]
    f[5] = gravity[2]
    return f


@numba.njit(fastmath=NUMBA_FASTMATH, cache=True)
def jacobian_crtbp(x, y, z, mu):
    """
    6x6 Jacobian of the CR3BP vector field at position (x, y, z).

        A = [[0,         I],
             [Omega_rr,  2 J]]

    with Omega_rr the Hessian of the effective potential and J the rotation
    generator [[0, 1, 0], [-1, 0, 0], [0, 0, 0]].
    """
    r = np.array([x, y, z], dtype=np.float64)
    d1, d2 = _offsets(r, mu)

    A = np.zeros((6, 6), dtype=np.float64)
    A[:3, 3:] = np.eye(3)
    A[3:, :3] = _gravity_gradient(d1, 1.0 - mu) + _gravity_gradient(d2, mu)
    A[3, 0] += 1.0
    A[4, 1] += 1.0
    A[3, 4] = 2.0
    A[4, 3] = -2.0
    return A


@numba.njit(fastmath=NUMBA_FASTMATH, cache=True)
def variational_equations(t, y, mu):
    """
    Right-hand side of the state and State Transition Matrix equations.

    Parameters
    ----------
    t : float
        Time (the system is autonomous)
    y : ndarray, shape (42,)
        [state (6), STM flattened row-major (36)]
    mu : float
        Mass parameter of the CR3BP system

    Returns
    -------
    ndarray, shape (42,)
        [state derivative (6), dPhi/dt = A(x) Phi flattened row-major (36)]
    """
    state = y[:6]
    Phi = np.ascontiguousarray(y[6:]).reshape((6, 6))

    dy = np.empty(42, dtype=np.float64)
    dy[:6] = crtbp_accel(state, mu)
    dy[6:] = np.dot(jacobian_crtbp(state[0], state[1], state[2], mu), Phi).ravel()
    return dy
