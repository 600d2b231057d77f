"""
Seed guesses for the continuation of the six libration point families.

Each family is started from two corrected orbits, obtained from Richardson's
approximation at two different amplitudes. The amplitudes are tuned per
(orbit type, libration point) so that both seeds converge; they are looked up
in a fixed table rather than chosen at run time.
"""

from dataclasses import dataclass

from cr3bp_families.exceptions import ConfigurationError
from cr3bp_families.orbits.base import OrbitType, parse_orbit_type, check_libration_point
from cr3bp_families.orbits.richardson import richardson_third_order_approximation

SEED_INDICES = (0, 1)


@dataclass(frozen=True)
class GuessParameters:
    """Amplitude (units of gamma) and Richardson halo class of one seed."""

    amplitude: float
    halo_class: int = 1


SEED_TABLE = {
    (OrbitType.HORIZONTAL, 1, 0): GuessParameters(1.0e-3),
    (OrbitType.HORIZONTAL, 1, 1): GuessParameters(1.0e-4),
    (OrbitType.HORIZONTAL, 2, 0): GuessParameters(1.0e-4),
    (OrbitType.HORIZONTAL, 2, 1): GuessParameters(1.0e-3),
    (OrbitType.VERTICAL, 1, 0): GuessParameters(1.0e-1),
    (OrbitType.VERTICAL, 1, 1): GuessParameters(2.0e-1),
    (OrbitType.VERTICAL, 2, 0): GuessParameters(1.0e-1),
    (OrbitType.VERTICAL, 2, 1): GuessParameters(2.0e-1),
    (OrbitType.HALO, 1, 0): GuessParameters(1.1e-1, halo_class=3),
    (OrbitType.HALO, 1, 1): GuessParameters(1.2e-1, halo_class=3),
    (OrbitType.HALO, 2, 0): GuessParameters(1.5e-1),
    (OrbitType.HALO, 2, 1): GuessParameters(1.6e-1),
}


def guess_parameters(libration_point, orbit_type, seed_index):
    """
    Look up the seed parameters of one family.

    Raises
    ------
    ConfigurationError
        If the (orbit type, libration point, seed index) combination is not in the table
    """
    orbit_type = parse_orbit_type(orbit_type)
    check_libration_point(libration_point)
    try:
        return SEED_TABLE[(orbit_type, libration_point, seed_index)]
    except KeyError:
        raise ConfigurationError(
            f"No seed guess defined for {orbit_type.value} orbits at "
            f"L{libration_point} with seed index {seed_index!r}") from None


class InitialGuessProvider:
    """
    Analytic seed guesses for a given mass parameter.

    Parameters
    ----------
    mu : float
        Mass parameter of the CR3BP system
    """

    def __init__(self, mu):
        self.mu = mu

    def validate(self, libration_point, orbit_type):
        """Check that both seeds of a family are defined, without computing them."""
        for seed_index in SEED_INDICES:
            guess_parameters(libration_point, orbit_type, seed_index)

    def guess(self, libration_point, orbit_type, seed_index):
        """
        Initial state and period of one seed.

        Returns
        -------
        tuple
            (state, period) from Richardson's third-order approximation
        """
        parameters = guess_parameters(libration_point, orbit_type, seed_index)
        return richardson_third_order_approximation(
            orbit_type, libration_point, self.mu,
            parameters.amplitude, halo_class=parameters.halo_class)
