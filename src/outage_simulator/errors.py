"""Exception and warning types raised by the reliability engine."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Inputs that cannot describe a physical backup system.

    Not a ``ValueError`` subclass, so pydantic lets it propagate unwrapped
    from model validators.  Raised before any simulation runs.
    """


class NumericalWarning(UserWarning):
    """Non-fatal input inconsistency; the engine proceeds with adjusted values."""
