"""
Periodic orbit construction around the collinear libration points.

This package provides the analytic initial guesses, the differential
corrector and the monodromy stability tests used by the continuation engine.
"""

from .base import OrbitType, ShootingScheme, SHOOTING_SCHEMES, parse_orbit_type, check_libration_point
from .richardson import richardson_third_order_approximation
from .initial_guess import InitialGuessProvider, GuessParameters, SEED_TABLE, SEED_INDICES, guess_parameters
from .corrector import (OrbitCorrector, CorrectionOutcome, Converged, FAILED,
                        apply_differential_correction)
from .stability import (is_still_valid_family_member, relaxed_mode_for, stability_indices,
                        monodromy_from_state_and_stm)

__all__ = [
    'OrbitType',
    'ShootingScheme',
    'SHOOTING_SCHEMES',
    'parse_orbit_type',
    'check_libration_point',
    'richardson_third_order_approximation',
    'InitialGuessProvider',
    'GuessParameters',
    'SEED_TABLE',
    'SEED_INDICES',
    'guess_parameters',
    'OrbitCorrector',
    'CorrectionOutcome',
    'Converged',
    'FAILED',
    'apply_differential_correction',
    'is_still_valid_family_member',
    'relaxed_mode_for',
    'stability_indices',
    'monodromy_from_state_and_stm',
]
