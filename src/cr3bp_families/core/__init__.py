"""
Core mathematical functions for the Circular Restricted Three-Body Problem (CR3BP).

This package contains the physical system definition, the energy integral and
the libration point locations used throughout the family computations.
"""

from .system import PhysicalSystemConfig, EARTH_MOON, mass_parameter
from .energy import jacobi_energy
from .lagrange_points import get_lagrange_point, gamma_l, SUPPORTED_POINTS

__all__ = [
    'PhysicalSystemConfig',
    'EARTH_MOON',
    'mass_parameter',
    'jacobi_energy',
    'get_lagrange_point',
    'gamma_l',
    'SUPPORTED_POINTS',
]
