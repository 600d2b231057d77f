"""
Computation of the collinear Lagrange (libration) points L1 and L2 in the CR3BP.

The points are located through the distance gamma between the libration
point and the secondary primary, which is the root of a quintic polynomial.
The root is bracketed with numpy and polished with mpmath at high precision.
"""

import numpy as np
import mpmath as mp

# Set mpmath precision to 50 digits for root polishing
mp.mp.dps = 50

SUPPORTED_POINTS = (1, 2)


def get_lagrange_point(mu, point_index):
    """
    Get the position of a collinear Lagrange point.
    
    Parameters
    ----------
    mu : float
        Mass parameter of the CR3BP system (ratio of smaller to total mass)
    point_index : int
        Lagrange point index (1 or 2)
        
    Returns
    -------
    ndarray
        3D vector [x, 0, 0] giving the position of the specified Lagrange point

    Raises
    ------
    ValueError
        If point_index is not 1 or 2
    """
    gamma = gamma_l(mu, point_index)
    if point_index == 1:
        x = 1.0 - mu - gamma
    else:
        x = 1.0 - mu + gamma
    return np.array([x, 0, 0], dtype=np.float64)


def gamma_l(mu, point_index):
    """
    Distance between a collinear libration point and the secondary primary.

    Parameters
    ----------
    mu : float
        Mass parameter of the CR3BP system
    point_index : int
        Lagrange point index (1 or 2)

    Returns
    -------
    float
        Normalized distance gamma, the length unit of Richardson's expansion

    Raises
    ------
    ValueError
        If point_index is not 1 or 2, or if no real root is found

    Notes
    -----
    The quintics below only provide a starting point; the libration point
    itself is the root of dOmega/dx on the x-axis, refined with mpmath:
    - L1: x^5 - (3-μ)x^4 + (3-2μ)x^3 - μx^2 + 2μx - μ = 0
    - L2: x^5 + (3-μ)x^4 + (3-2μ)x^3 - μx^2 - 2μx - μ = 0
    """
    if point_index == 1:
        coefficients = [1, -(3 - mu), (3 - 2*mu), -mu, 2*mu, -mu]
    elif point_index == 2:
        coefficients = [1, (3 - mu), (3 - 2*mu), -mu, -2*mu, -mu]
    else:
        raise ValueError(f"Invalid Lagrange point index {point_index}. Must be 1 or 2.")

    roots = np.roots(coefficients)
    real_roots = [r.real for r in roots if np.isreal(r) and r.real > 0]
    if not real_roots:
        raise ValueError(f"No real root found for L{point_index} with mu={mu}")

    side = -1 if point_index == 1 else 1
    x0 = (1 - mu) + side * min(real_roots)
    x = mp.findroot(lambda x: _dOmega_dx(x, mu), mp.mpf(x0))
    return float(side * (x - (1 - mu)))


def _dOmega_dx(x, mu):
    """
    Compute the derivative of the effective potential with respect to x on the x-axis.

    Vanishes at the collinear libration points.
    """
    r1 = abs(x + mu)
    r2 = abs(x - (1 - mu))
    return x - (1 - mu) * (x + mu) / (r1**3) - mu * (x - (1 - mu)) / (r2**3)
