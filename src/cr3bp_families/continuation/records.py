"""
Records accumulated while tracing an orbit family.
"""

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True, eq=False)
class OrbitFamilyMember:
    """
    One accepted periodic orbit of a family.

    Attributes
    ----------
    energy : float
        Jacobi constant at the full-period state
    period : float
        Orbital period
    initial_state : ndarray
        Initial state [x, y, z, vx, vy, vz] in the rotating frame
    monodromy : ndarray
        State Transition Matrix after one period, flattened row-major (36)
    """

    energy: float
    period: float
    initial_state: np.ndarray
    monodromy: np.ndarray

    def as_row(self):
        """The 44 numbers written for this member: energy, period, state, monodromy."""
        return np.concatenate(([self.energy, self.period], self.initial_state, self.monodromy))


@dataclass(frozen=True, eq=False)
class CorrectionRecord:
    """
    Diagnostics of the differential correction that produced a family member.

    Attributes
    ----------
    iteration_count : int
        Newton updates applied by the corrector
    half_period_energy : float
        Jacobi constant at the half-period state
    elapsed_time : float
        Integration time to the half-period crossing
    half_period_state : ndarray
        State at the half-period crossing
    """

    iteration_count: int
    half_period_energy: float
    elapsed_time: float
    half_period_state: np.ndarray

    def as_row(self):
        """The 9 numbers written for this record."""
        return np.concatenate(([self.iteration_count, self.half_period_energy, self.elapsed_time],
                               self.half_period_state))


@dataclass
class OrbitFamily:
    """
    Members of a family and their correction records, in continuation order.

    Both sequences only grow, and only together.
    """

    members: list = field(default_factory=list)
    records: list = field(default_factory=list)

    def append(self, member, record):
        self.members.append(member)
        self.records.append(record)

    def last_two(self):
        """The two most recent members, oldest first."""
        if len(self.members) < 2:
            raise IndexError("A secant needs at least two family members")
        return self.members[-2], self.members[-1]

    def __len__(self):
        return len(self.members)


@dataclass
class ContinuationState:
    """Transient state of one continuation run."""

    family: OrbitFamily
    step_size: float = 0.0
    active: bool = True
