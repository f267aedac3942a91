"""Exceptions raised by the duplicate detector."""


class DedupeError(Exception):
    """Base exception for household_dedupe"""

    pass


class DetectorConfigError(DedupeError, ValueError):
    """Detector was given an invalid window, threshold or metric"""

    pass


class InvalidDateRangeError(DedupeError, ValueError):
    """Date bounds could not be parsed or are out of order"""

    pass
