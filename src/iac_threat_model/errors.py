"""Exceptions raised by the threat model engine."""


class ThreatModelError(Exception):
    """Base class for threat model errors."""


class InvalidInputError(ThreatModelError, ValueError):
    """One of the input collections is not a well-formed array of facts.

    This is the only condition the engine raises; malformed individual
    resources are skipped instead.
    """
