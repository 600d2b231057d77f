"""
Monodromy eigenvalue tests deciding whether a family can be extended further.
"""

import logging

import numpy as np

from cr3bp_families.orbits.base import OrbitType, parse_orbit_type

logger = logging.getLogger(__name__)


def monodromy_from_state_and_stm(state_and_stm):
    """Extract the 6x6 monodromy matrix from a [state(6), STM(36)] vector."""
    state_and_stm = np.asarray(state_and_stm, dtype=np.float64)
    if state_and_stm.shape != (42,):
        raise ValueError(f"Expected a 42-vector [state, STM], got shape {state_and_stm.shape}")
    return state_and_stm[6:].reshape(6, 6)


def relaxed_mode_for(L_i, orbit_type):
    """The L2 horizontal family is traced with the looser unit-modulus test."""
    return L_i == 2 and parse_orbit_type(orbit_type) is OrbitType.HORIZONTAL


def is_still_valid_family_member(state_and_stm, eigenvalue_tolerance=1e-3, relaxed=False):
    """
    Check whether a family member still belongs to the family being traced.

    A periodic orbit has a pair of unit eigenvalues in its monodromy matrix.
    The family is extended while that pair can still be found.

    Parameters
    ----------
    state_and_stm : array_like, shape (42,)
        Final state and row-major monodromy matrix after one period
    eigenvalue_tolerance : float, optional
        Tolerance on the distance of the eigenvalue from the unit value
    relaxed : bool, optional
        If True, any eigenvalue on the unit circle keeps the family going;
        otherwise a real eigenvalue equal to one is required

    Returns
    -------
    bool
        True if the continuation should keep going
    """
    monodromy = monodromy_from_state_and_stm(state_and_stm)
    if not np.all(np.isfinite(monodromy)):
        return False
    eigenvalues = np.linalg.eigvals(monodromy)

    if relaxed:
        mask = np.abs(np.abs(eigenvalues) - 1.0) < eigenvalue_tolerance
    else:
        mask = (np.abs(eigenvalues.real - 1.0) < eigenvalue_tolerance) & \
               (np.abs(eigenvalues.imag) < eigenvalue_tolerance)

    if not np.any(mask):
        logger.debug("No unit eigenvalue within %.1e: %s", eigenvalue_tolerance, eigenvalues)
        return False
    return True


def stability_indices(monodromy):
    """
    Compute stability indices from the monodromy matrix eigenvalues.

    The two eigenvalues closest to one are discarded; the indices
    nu = (lambda + 1/lambda) / 2 are computed for the two largest of the
    remaining eigenvalues.

    Parameters
    ----------
    monodromy : ndarray
        6x6 monodromy matrix

    Returns
    -------
    nu : tuple of complex
        In-plane and out-of-plane stability indices
    eigenvalues : ndarray
        Eigenvalues of the monodromy matrix sorted by decreasing modulus
    """
    eigenvalues = np.linalg.eigvals(np.asarray(monodromy, dtype=np.float64))
    eigenvalues = eigenvalues[np.argsort(np.abs(eigenvalues))[::-1]]

    # Drop the two eigenvalues closest to one (periodicity and energy)
    trivial = np.argsort(np.abs(eigenvalues - 1.0))[:2]
    nontrivial = np.delete(eigenvalues, trivial)

    nu1 = 0.5 * (nontrivial[0] + 1 / nontrivial[0])
    nu2 = 0.5 * (nontrivial[1] + 1 / nontrivial[1])
    return (nu1, nu2), eigenvalues
