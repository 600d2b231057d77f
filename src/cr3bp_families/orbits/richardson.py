"""
Richardson's third-order analytic approximation of libration point orbits.

The Lindstedt-Poincare expansion of Richardson (1980) describes periodic
motion about the collinear points L1 and L2 in a frame centred on the
libration point, with lengths scaled by gamma (the distance to the
secondary). Setting the out-of-plane amplitude to zero yields the planar
(horizontal) Lyapunov family, setting the in-plane amplitude to zero a
vertical orbit, and linking both amplitudes through the frequency constraint
yields a halo orbit.

References
----------
Richardson, D. L. (1980). "Analytic construction of periodic orbits about
the collinear points". Celestial Mechanics 22, 241-253.
"""

import logging

import numpy as np

from cr3bp_families.core.lagrange_points import gamma_l
from cr3bp_families.orbits.base import OrbitType, SHOOTING_SCHEMES, parse_orbit_type, check_libration_point

logger = logging.getLogger(__name__)


def _legendre_coefficients(mu, L_i, gamma):
    """Coefficients c2, c3, c4 of the Legendre expansion of the potential about L_i."""
    won = 1 if L_i == 1 else -1
    primary = 1 - mu

    c = [0.0, 0.0, 0.0, 0.0, 0.0]
    for N in [2, 3, 4]:
        c[N] = (1 / gamma**3) * (
            (won**N) * mu 
            + ((-1)**N)
            * (primary * gamma**(N + 1) / ((1 + (-won) * gamma)**(N + 1)))
        )
    return c


def richardson_third_order_approximation(orbit_type, L_i, mu, amplitude, halo_class=1):
    """
    Generate the analytic initial state and period of a libration point orbit.

    Parameters
    ----------
    orbit_type : OrbitType or str
        'horizontal', 'vertical' or 'halo'
    L_i : int
        Libration point index (1 or 2)
    mu : float
        Mass parameter of the CR3BP system
    amplitude : float
        In-plane amplitude Ax for horizontal orbits, out-of-plane amplitude
        Az for vertical and halo orbits, in units of gamma
    halo_class : int, optional
        Richardson's class n (1 or 3); the z-amplitude carries the sign
        delta_n = 2 - n. Default is 1.

    Returns
    -------
    state : ndarray
        6D state vector [x, y, z, vx, vy, vz] in the rotating frame, on the
        symmetry plane used by the differential corrector
    period : float
        Approximate orbital period T = 2 pi / (lambda nu)

    Raises
    ------
    ConfigurationError
        If the orbit type or libration point is not supported
    ValueError
        If the halo amplitude is below the minimum Az admitted by the
        amplitude constraint

    Notes
    -----
    Horizontal and halo orbits are evaluated at tau1 = 0, where they cross
    the x-z plane perpendicularly. Vertical orbits are evaluated at
    tau1 = pi/2, where they cross the x-axis.
    """
    orbit_type = parse_orbit_type(orbit_type)
    check_libration_point(L_i)

    gamma = gamma_l(mu, L_i)
    c = _legendre_coefficients(mu, L_i, gamma)

    # In-plane frequency, positive root of lambda^4 + (c2-2) lambda^2 - (c2-1)(1+2c2) = 0
    lam = np.sqrt(0.5 * ((2 - c[2]) + np.sqrt((c[2] - 2)**2 + 4 * (c[2] - 1) * (1 + 2 * c[2]))))

    k = 2 * lam / (lam**2 + 1 - c[2])
    delta = lam**2 - c[2]

    d1 = (3 * lam**2 / k) * (k * (6 * lam**2 - 1) - 2 * lam)
    d2 = (8 * lam**2 / k) * (k * (11 * lam**2 - 1) - 2 * lam)

    a21 = (3 * c[3] * (k**2 - 2)) / (4 * (1 + 2 * c[2]))
    a22 = (3 * c[3]) / (4 * (1 + 2 * c[2]))
    a23 = - (3 * c[3] * lam / (4 * k * d1)) * (
        3 * k**3 * lam - 6 * k * (k - lam) + 4
    )
    a24 = - (3 * c[3] * lam / (4 * k * d1)) * (2 + 3 * k * lam)

    b21 = - (3 * c[3] * lam / (2 * d1)) * (3 * k * lam - 4)
    b22 = (3 * c[3] * lam) / d1

    d21 = - c[3] / (2 * lam**2)

    a31 = (
        - (9 * lam / (4 * d2)) 
        * (4 * c[3] * (k * a23 - b21) + k * c[4] * (4 + k**2)) 
        + ((9 * lam**2 + 1 - c[2]) / (2 * d2)) 
        * (
            3 * c[3] * (2 * a23 - k * b21) 
            + c[4] * (2 + 3 * k**2)
        )
    )
    a32 = (
        - (1 / d2)
        * (
            (9 * lam / 4) * (4 * c[3] * (k * a24 - b22) + k * c[4]) 
            + 1.5 * (9 * lam**2 + 1 - c[2]) 
            * (c[3] * (k * b22 + d21 - 2 * a24) - c[4])
        )
    )

    b31 = (
        0.375 / d2
        * (
            8 * lam 
            * (3 * c[3] * (k * b21 - 2 * a23) - c[4] * (2 + 3 * k**2))
            + (9 * lam**2 + 1 + 2 * c[2])
            * (4 * c[3] * (k * a23 - b21) + k * c[4] * (4 + k**2))
        )
    )
    b32 = (
        (1 / d2)
        * (
            9 * lam 
            * (c[3] * (k * b22 + d21 - 2 * a24) - c[4])
            + 0.375 * (9 * lam**2 + 1 + 2 * c[2])
            * (4 * c[3] * (k * a24 - b22) + k * c[4])
        )
    )

    d31 = (3 / (64 * lam**2)) * (4 * c[3] * a24 + c[4])
    d32 = (3 / (64 * lam**2)) * (4 * c[3] * (a23 - d21) + c[4] * (4 + k**2))

    s1 = (
        1 
        / (2 * lam * (lam * (1 + k**2) - 2 * k))
        * (
            1.5 * c[3] 
            * (
                2 * a21 * (k**2 - 2) 
                - a23 * (k**2 + 2) 
                - 2 * k * b21
            )
            - 0.375 * c[4] * (3 * k**4 - 8 * k**2 + 8)
        )
    )
    s2 = (
        1 
        / (2 * lam * (lam * (1 + k**2) - 2 * k))
        * (
            1.5 * c[3] 
            * (
                2 * a22 * (k**2 - 2) 
                + a24 * (k**2 + 2) 
                + 2 * k * b22 
                + 5 * d21
            )
            + 0.375 * c[4] * (12 - k**2)
        )
    )

    a1 = -1.5 * c[3] * (2 * a21 + a23 + 5 * d21) - 0.375 * c[4] * (12 - k**2)
    a2 = 1.5 * c[3] * (a24 - 2 * a22) + 1.125 * c[4]

    l1 = a1 + 2 * lam**2 * s1
    l2 = a2 + 2 * lam**2 * s2

    deltan = 2 - halo_class

    if orbit_type is OrbitType.HORIZONTAL:
        Ax, Az = amplitude, 0.0
        tau1 = 0.0
    elif orbit_type is OrbitType.VERTICAL:
        Ax, Az = 0.0, amplitude
        tau1 = np.pi / 2
    else:
        Az = amplitude
        radicand = (-delta - l2 * Az**2) / l1
        if radicand < 0:
            raise ValueError(f"Az={Az} is below the minimum halo amplitude at L{L_i}")
        Ax = np.sqrt(radicand)
        tau1 = 0.0

    x = (
        a21 * Ax**2 + a22 * Az**2
        - Ax * np.cos(tau1)
        + (a23 * Ax**2 - a24 * Az**2) * np.cos(2 * tau1)
        + (a31 * Ax**3 - a32 * Ax * Az**2) * np.cos(3 * tau1)
    )
    y = (
        k * Ax * np.sin(tau1)
        + (b21 * Ax**2 - b22 * Az**2) * np.sin(2 * tau1)
        + (b31 * Ax**3 - b32 * Ax * Az**2) * np.sin(3 * tau1)
    )
    z = (
        deltan * Az * np.cos(tau1)
        + deltan * d21 * Ax * Az * (np.cos(2 * tau1) - 3)
        + deltan * (d32 * Az * Ax**2 - d31 * Az**3) * np.cos(3 * tau1)
    )

    xdot = (
        lam * Ax * np.sin(tau1)
        - 2 * lam * (a23 * Ax**2 - a24 * Az**2) * np.sin(2 * tau1)
        - 3 * lam * (a31 * Ax**3 - a32 * Ax * Az**2) * np.sin(3 * tau1)
    )
    ydot = (
        lam
        * (
            k * Ax * np.cos(tau1)
            + 2 * (b21 * Ax**2 - b22 * Az**2) * np.cos(2 * tau1)
            + 3 * (b31 * Ax**3 - b32 * Ax * Az**2) * np.cos(3 * tau1)
        )
    )
    zdot = (
        - lam * deltan * Az * np.sin(tau1)
        - 2 * lam * deltan * d21 * Ax * Az * np.sin(2 * tau1)
        - 3 * lam * deltan * (d32 * Az * Ax**2 - d31 * Az**3) * np.sin(3 * tau1)
    )

    # Scale back by gamma around the libration point
    won = 1 if L_i == 1 else -1
    state = np.array([
        (1 - mu) + gamma * (-won + x),
        gamma * y,
        gamma * z,
        gamma * xdot,
        gamma * ydot,
        gamma * zdot,
    ], dtype=np.float64)

    # Remove round-off from the components that vanish on the symmetry plane
    scheme = SHOOTING_SCHEMES[orbit_type]
    state[scheme.crossing_axis] = 0.0
    for index in scheme.targets:
        state[index] = 0.0

    nu = 1 + s1 * Ax**2 + s2 * Az**2
    period = 2 * np.pi / (lam * nu)

    logger.debug("Richardson %s L%d guess (Ax=%g, Az=%g): state=%s, period=%.12f",
                 orbit_type.value, L_i, Ax, Az, state, period)
    return state, float(period)
