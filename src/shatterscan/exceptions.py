"""Custom exceptions for ShatterScan."""


class ShatterScanError(Exception):
    """Base exception for all ShatterScan errors."""

    pass


class ConfigError(ShatterScanError):
    """Raised when a configuration parameter is missing or out of range."""

    pass


class InvalidInputError(ShatterScanError):
    """Raised when input tables or a sample's breakpoint set are unusable."""

    def __init__(self, message="", sample=None):
        """Initialize InvalidInputError.

        Args:
            message: Error message
            sample: Sample identifier the error refers to, if any
        """
        super().__init__(message)
        self.sample = sample


class InsufficientDataError(ShatterScanError):
    """Raised when the cohort cannot support a recurrence test."""

    pass


class FileFormatError(ShatterScanError):
    """Raised when an input file cannot be parsed."""

    pass
