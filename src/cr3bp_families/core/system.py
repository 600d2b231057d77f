"""
Physical system definition for the Circular Restricted Three-Body Problem.

The only quantity the orbit family computations need from the two primaries
is the mass parameter mu = m2 / (m1 + m2), evaluated here from the
gravitational parameters of the primary and secondary bodies.
"""

from dataclasses import dataclass

from cr3bp_families.config import EARTH_GM, MOON_GM


def mass_parameter(primary_gm, secondary_gm):
    """
    Calculate the mass parameter μ for the CR3BP.
    
    The mass parameter μ is defined as the ratio of the secondary mass
    to the total system mass: μ = m₂/(m₁ + m₂). Since G cancels, the
    gravitational parameters can be used directly.
    
    Parameters
    ----------
    primary_gm : float
        Gravitational parameter of the primary body (m^3 s^-2)
    secondary_gm : float
        Gravitational parameter of the secondary body (m^3 s^-2)
    
    Returns
    -------
    float
        Mass parameter μ (dimensionless)
    
    Raises
    ------
    ValueError
        If either gravitational parameter is not strictly positive
    """
    if primary_gm <= 0 or secondary_gm <= 0:
        raise ValueError("Gravitational parameters must be strictly positive.")
    return float(secondary_gm / (primary_gm + secondary_gm))


@dataclass(frozen=True)
class PhysicalSystemConfig:
    """
    Read-only description of the two primaries, shared by every job of a run.

    Attributes
    ----------
    primary_gm : float
        Gravitational parameter of the larger primary (m^3 s^-2)
    secondary_gm : float
        Gravitational parameter of the smaller primary (m^3 s^-2)
    """

    primary_gm: float = float(EARTH_GM)
    secondary_gm: float = float(MOON_GM)

    def __post_init__(self):
        # Fail at construction rather than inside a worker
        mass_parameter(self.primary_gm, self.secondary_gm)

    @property
    def mass_parameter(self):
        """Mass parameter μ of the system."""
        return mass_parameter(self.primary_gm, self.secondary_gm)


EARTH_MOON = PhysicalSystemConfig()
