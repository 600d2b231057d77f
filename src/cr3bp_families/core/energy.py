"""
Energy computation functions for the Circular Restricted Three-Body Problem (CR3BP).

This module provides the Jacobi integral, the integral of motion used to label
every family member and correction record.
"""

import numpy as np


def jacobi_energy(state, mu):
    """
    Compute the Jacobi integral of a state in the CR3BP.

    Parameters
    ----------
    state : array_like
        State vector [x, y, z, vx, vy, vz] in the rotating frame
    mu : float
        Mass parameter of the CR3BP system (ratio of smaller to total mass)

    Returns
    -------
    float
        C = x² + y² + 2(1-μ)/r1 + 2μ/r2 - v²

    Notes
    -----
    r1 and r2 are the distances to the primaries located at (-μ, 0, 0) and
    (1-μ, 0, 0). The Jacobi integral is conserved along any trajectory, so
    it can be evaluated at any point of a periodic orbit.
    """
    x, y, z, vx, vy, vz = np.asarray(state, dtype=np.float64)[:6]
    r1 = np.sqrt((x + mu)**2 + y**2 + z**2)
    r2 = np.sqrt((x - 1.0 + mu)**2 + y**2 + z**2)

    v2 = vx*vx + vy*vy + vz*vz
    return float(x*x + y*y + 2.0*(1.0 - mu)/r1 + 2.0*mu/r2 - v2)
