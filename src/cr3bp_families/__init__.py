"""
Periodic orbit families of the Circular Restricted Three-Body Problem.

Families of horizontal Lyapunov, vertical Lyapunov and halo orbits around the
L1 and L2 libration points are computed by differential correction and
pseudo-arc-length continuation.
"""

from .core import PhysicalSystemConfig, EARTH_MOON, mass_parameter, jacobi_energy
from .orbits import OrbitType, OrbitCorrector, InitialGuessProvider, is_still_valid_family_member
from .continuation import ContinuationEngine, ContinuationSettings, ContinuationResult, Termination
from .exceptions import ContinuationError, ConfigurationError, SeedingError, PropagationError

__version__ = "0.1.0"

__all__ = [
    'PhysicalSystemConfig',
    'EARTH_MOON',
    'mass_parameter',
    'jacobi_energy',
    'OrbitType',
    'OrbitCorrector',
    'InitialGuessProvider',
    'is_still_valid_family_member',
    'ContinuationEngine',
    'ContinuationSettings',
    'ContinuationResult',
    'Termination',
    'ContinuationError',
    'ConfigurationError',
    'SeedingError',
    'PropagationError',
]
