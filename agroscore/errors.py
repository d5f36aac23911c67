"""
agroscore/errors.py
-------------------
Exceptions raised by the scoring engine.

    ScoringError           – base class for every engine error
    CatalogError           – an ideal-range catalog is malformed (load time)
    InsufficientDataError  – nothing could be scored from the given data
"""


class ScoringError(Exception):
    """Base class for scoring-engine errors."""


class CatalogError(ScoringError, ValueError):
    """An IdealRange catalog violates min < max or min <= ideal <= max."""


class InsufficientDataError(ScoringError):
    """Raised when a score is needed but no property could be scored."""

    def __init__(self, message: str = "Insufficient data to compute score"):
        super().__init__(message)
