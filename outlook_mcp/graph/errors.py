"""
Graph Error Types

Exceptions raised by the request layer. Tool handlers turn them into a single
human-readable message.
"""

from typing import Optional


class OutlookError(Exception):
    """Base class for all request layer errors."""


class AuthError(OutlookError):
    """No usable credential is available. The user must (re-)authenticate."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class RemoteError(OutlookError):
    """The Graph API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None) -> None:
        super().__init__(f"API call failed with status {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.code = code


class TransportError(OutlookError):
    """The request never produced an HTTP response (connection, DNS, timeout)."""


class ValidationError(OutlookError):
    """Required caller input is missing or malformed. Raised before any network call."""
