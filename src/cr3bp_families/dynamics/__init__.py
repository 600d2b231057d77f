"""
Dynamical equations for the Circular Restricted Three-Body Problem (CR3BP).

This package provides the equations of motion, the variational equations and
the propagation routines used by the corrector and the continuation engine.
"""

from .equations import crtbp_accel, jacobian_crtbp, variational_equations
from .propagator import propagate_full_period, find_half_period_crossing

__all__ = [
    'crtbp_accel',
    'jacobian_crtbp',
    'variational_equations',
    'propagate_full_period',
    'find_half_period_crossing',
]
