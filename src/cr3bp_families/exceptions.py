"""Exception hierarchy for orbit family computations."""


class ContinuationError(RuntimeError):
    """Base class for errors that abort a continuation job."""


class ConfigurationError(ContinuationError, ValueError):
    """Unsupported orbit type or libration point, detected before any iteration."""


class SeedingError(ContinuationError):
    """One of the two seed guesses could not be corrected into a periodic orbit."""


class PropagationError(ContinuationError):
    """The integrator could not propagate a corrected orbit over its period."""
