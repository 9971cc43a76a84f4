"""
Custom exceptions for pixelpheno.
"""


class PhenologyError(Exception):
    """Base exception for pixelpheno."""
    pass


class ConfigurationError(PhenologyError, ValueError):
    """Raised when configuration is invalid."""
    pass


class DataError(PhenologyError, ValueError):
    """Raised when input samples cannot be interpreted."""
    pass


class InsufficientDataError(PhenologyError, ValueError):
    """Raised when a series has fewer valid samples than the filter window needs."""

    def __init__(self, message: str, n_valid: int = 0, required: int = 0):
        super().__init__(message)
        self.n_valid = n_valid
        self.required = required


class DegenerateSeasonError(PhenologyError, ValueError):
    """Raised when a season has no range to normalize against."""

    def __init__(self, message: str, year: int = 0):
        super().__init__(message)
        self.year = year
