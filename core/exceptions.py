"""
Custom exceptions for request-level failures.
Each exception carries the HTTP status code the API responds with.
"""
from typing import Any, Dict, Optional


class NoteIngestException(Exception):
    """Base exception for all note ingest errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.

        Args:
            message: Error message (safe to show to the caller)
            details: Additional error details for diagnostics
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(NoteIngestException):
    """Raised when the note text is missing or blank."""
    status_code = 400


class UnauthorizedError(NoteIngestException):
    """Raised when the bearer credential is missing or rejected."""
    status_code = 401


class ProviderError(NoteIngestException):
    """Raised when the extraction provider fails or returns a non-success status."""
    status_code = 502


class ProviderTimeoutError(NoteIngestException):
    """Raised when the extraction provider exceeds the time budget."""
    status_code = 504


class UnexpectedError(NoteIngestException):
    """Raised for failures that fit no other category."""
    status_code = 500


class ConfigurationError(NoteIngestException):
    """Raised when configuration is invalid."""
    pass
