"""
Pseudo-arc-length continuation of libration point orbit families.
"""

from .records import OrbitFamilyMember, CorrectionRecord, OrbitFamily, ContinuationState
from .engine import (ContinuationEngine, ContinuationSettings, ContinuationResult, Termination,
                     secant_direction, pseudo_arc_length_step)

__all__ = [
    'OrbitFamilyMember',
    'CorrectionRecord',
    'OrbitFamily',
    'ContinuationState',
    'ContinuationEngine',
    'ContinuationSettings',
    'ContinuationResult',
    'Termination',
    'secant_direction',
    'pseudo_arc_length_step',
]
