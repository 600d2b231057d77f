"""
Orbit types of the libration point families and their symmetry properties.

Every family computed here is symmetric, so a periodic orbit is found by
shooting from one perpendicular crossing of a symmetry plane to the next one,
half a period later. This module records, per orbit type, which plane is
crossed, which half-period components must vanish and which initial
components the corrector is allowed to change.
"""

from dataclasses import dataclass
from enum import Enum

from cr3bp_families.core.lagrange_points import SUPPORTED_POINTS
from cr3bp_families.exceptions import ConfigurationError


class OrbitType(str, Enum):
    """Orbit families computed around L1 and L2."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    HALO = "halo"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class ShootingScheme:
    """
    Half-period shooting problem of a symmetric orbit type.

    Attributes
    ----------
    crossing_axis : int
        Position component whose zero defines the symmetry plane (1: y, 2: z)
    targets : tuple of int
        State components that must vanish at the half-period crossing
    free : tuple of int
        Initial state components adjusted by the Newton update
    """

    crossing_axis: int
    targets: tuple
    free: tuple


# x-z plane crossing: vx (and vz) vanish, x0 (for halo) and vy0 are free
# x-axis start for vertical orbits: return to z = 0 with y = vx = 0
SHOOTING_SCHEMES = {
    OrbitType.HORIZONTAL: ShootingScheme(crossing_axis=1, targets=(3,), free=(4,)),
    OrbitType.HALO: ShootingScheme(crossing_axis=1, targets=(3, 5), free=(0, 4)),
    OrbitType.VERTICAL: ShootingScheme(crossing_axis=2, targets=(1, 3), free=(0, 4)),
}


def parse_orbit_type(orbit_type):
    """
    Convert a string or OrbitType into an OrbitType.

    Raises
    ------
    ConfigurationError
        If the value names none of the supported orbit types
    """
    try:
        return OrbitType(orbit_type)
    except ValueError:
        raise ConfigurationError(
            f"Unsupported orbit type {orbit_type!r}; expected one of "
            f"{', '.join(t.value for t in OrbitType)}") from None


def check_libration_point(libration_point):
    """Raise ConfigurationError unless the libration point index is 1 or 2."""
    if libration_point not in SUPPORTED_POINTS:
        raise ConfigurationError(
            f"Unsupported libration point L{libration_point}; expected one of "
            f"{', '.join(f'L{i}' for i in SUPPORTED_POINTS)}")
    return libration_point
