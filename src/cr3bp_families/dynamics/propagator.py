"""
Numerical propagation of CR3BP trajectories together with their State Transition Matrix.

This module provides the two integrations the family computations rely on:
- Full-period propagation of a periodic orbit, returning the final state and
  the monodromy matrix
- Propagation up to the half-period crossing of a symmetry plane, used by the
  differential corrector

Both integrate the variational equations from the identity STM at epoch 0
with scipy's solve_ivp.
"""

import logging

import numpy as np
from scipy.integrate import solve_ivp

from cr3bp_families.config import (
    INTEGRATOR_METHOD,
    INTEGRATOR_RTOL,
    INTEGRATOR_ATOL,
    TRAJECTORY_STEPS,
)
from cr3bp_families.exceptions import PropagationError
from cr3bp_families.dynamics.equations import variational_equations
from cr3bp_families.utils.io import write_rows

logger = logging.getLogger(__name__)


def _initial_phi(initial_state):
    """Build the 42-vector [state (6), identity STM (36)] at epoch 0."""
    return np.concatenate((initial_state, np.eye(6, dtype=np.float64).ravel()))


def _solver_defaults(solve_kwargs):
    solve_kwargs.setdefault('method', INTEGRATOR_METHOD)
    solve_kwargs.setdefault('rtol', INTEGRATOR_RTOL)
    solve_kwargs.setdefault('atol', INTEGRATOR_ATOL)
    return solve_kwargs


def propagate_full_period(initial_state, period, mu, trajectory_path=None,
                          steps=TRAJECTORY_STEPS, **solve_kwargs):
    """
    Propagate a periodic orbit and its STM over one full period.
    
    Parameters
    ----------
    initial_state : array_like
        Initial state vector [x, y, z, vx, vy, vz]
    period : float
        Orbital period (must be positive)
    mu : float
        Mass parameter of the CR3BP system (ratio of smaller to total mass)
    trajectory_path : str or Path, optional
        If given, the trajectory sampled at `steps` epochs is written to this
        file, one row [t, x, y, z, vx, vy, vz] per epoch.
    steps : int, optional
        Number of samples of the persisted trajectory. Default is 1000.
    **solve_kwargs
        Additional keyword arguments passed to scipy.integrate.solve_ivp
    
    Returns
    -------
    ndarray
        42-vector [final state (6), monodromy matrix flattened row-major (36)]
    
    Raises
    ------
    ValueError
        If the initial state does not have 6 components or the period is not positive
    PropagationError
        If the integrator fails before reaching the end of the period
    """
    initial_state = np.asarray(initial_state, dtype=np.float64)
    if initial_state.shape != (6,):
        raise ValueError(f"Initial state must have 6 components, got shape {initial_state.shape}")
    if not period > 0:
        raise ValueError(f"Period must be positive, got {period}")

    _solver_defaults(solve_kwargs)
    if trajectory_path is not None:
        solve_kwargs['t_eval'] = np.linspace(0.0, period, steps)

    def ode_fun(t, y):
        return variational_equations(t, y, mu)

    sol = solve_ivp(ode_fun, (0.0, period), _initial_phi(initial_state), **solve_kwargs)
    if not sol.success:
        raise PropagationError(f"Full-period propagation failed: {sol.message}")

    state_and_stm = sol.y[:, -1].copy()

    if trajectory_path is not None:
        rows = np.column_stack((sol.t, sol.y[:6, :].T))
        write_rows(trajectory_path, rows)
        logger.debug("Trajectory written to %s", trajectory_path)

    return state_and_stm


def find_half_period_crossing(initial_state, mu, axis, max_time, **solve_kwargs):
    """
    Integrate state and STM until the orbit returns to a symmetry plane.

    The orbit is assumed to start on the plane `state[axis] = 0`; the crossing
    searched for is the first one in the direction opposite to the initial
    velocity along `axis`, i.e. the return to the plane.

    Parameters
    ----------
    initial_state : array_like
        Initial state vector [x, y, z, vx, vy, vz], lying on the plane
    mu : float
        Mass parameter of the CR3BP system
    axis : int
        Position component defining the plane (1 for y = 0, 2 for z = 0)
    max_time : float
        Integration horizon; no crossing before it means no crossing at all
    **solve_kwargs
        Additional keyword arguments passed to scipy.integrate.solve_ivp

    Returns
    -------
    tuple or None
        (t_cross, state_cross, stm_cross) or None if the orbit does not
        return to the plane within max_time, leaves the plane with zero
        normal velocity, or the integration fails.
    """
    initial_state = np.asarray(initial_state, dtype=np.float64)
    normal_velocity = initial_state[axis + 3]
    if normal_velocity == 0.0 or not max_time > 0:
        return None

    _solver_defaults(solve_kwargs)
    def crossing(t, y):
        return y[axis]
    crossing.terminal = True
    crossing.direction = -np.sign(normal_velocity)

    def ode_fun(t, y):
        return variational_equations(t, y, mu)

    sol = solve_ivp(ode_fun, (0.0, max_time), _initial_phi(initial_state),
                    events=crossing, **solve_kwargs)
    if sol.status < 0 or len(sol.t_events[0]) == 0:
        return None

    t_cross = float(sol.t_events[0][0])
    PHI_cross = sol.y_events[0][0]
    return t_cross, PHI_cross[:6].copy(), PHI_cross[6:].reshape((6, 6)).copy()
