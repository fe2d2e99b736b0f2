"""
Exception classes raised below the HTTP layer.

Adapters let SDK faults propagate untouched; these cover the faults the
service raises itself.
"""

from typing import Any, Dict, Optional


class BlobStorageApiException(Exception):
    """Base exception class for the Blob Storage API."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(BlobStorageApiException):
    """Raised when a backend is used without the settings it needs."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)
