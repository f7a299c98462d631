"""Exception types raised by the ArthaVision analytics core."""

from typing import Optional


class ArthaVisionError(Exception):
    """Base class for all package errors."""
    pass


class ConfigurationError(ArthaVisionError):
    """Raised when an analysis is requested on an invalid setup, e.g. an empty peer panel."""
    pass


class ExternalServiceError(ArthaVisionError):
    """Raised when the AI service call fails for any reason."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
