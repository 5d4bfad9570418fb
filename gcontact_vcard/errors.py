"""
Error types shared by all gcontact_vcard modules.

Every error raised on purpose by this package derives from
GContactVCardError so callers (and the CLI) can catch a single type:
- AuthError: credentials missing, expired without refresh token, refused
- TransportError: the remote service could not be reached
- RemoteApiError: the service answered with a non-success status
- StaleWriteError: an update carried an outdated etag
- NotFoundError / ConflictError: missing or duplicate resources
- ParseError: malformed JSON or card text
- UnsupportedMediaTypeError: photo type outside the allowed set
- ValidationError: a record or form violates field rules
"""

from __future__ import annotations


class GContactVCardError(Exception):
    """Base class for all gcontact_vcard errors."""

    pass


class AuthError(GContactVCardError):
    """Raised when no usable credentials are available."""

    pass


class TransportError(GContactVCardError):
    """Raised when the remote service cannot be reached."""

    pass


class RemoteApiError(GContactVCardError):
    """
    Raised when the remote service reports an error.

    Attributes:
        status_code: HTTP status code of the failed response
        status: Service status string (e.g., "FAILED_PRECONDITION")
        message: Human readable message reported by the service
    """

    def __init__(self, message: str, status_code: int = 0, status: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = status

    def __str__(self) -> str:
        parts = []
        if self.status_code:
            parts.append(str(self.status_code))
        if self.status:
            parts.append(self.status)
        prefix = f"[{' '.join(parts)}] " if parts else ""
        return f"{prefix}{self.message}"


class StaleWriteError(RemoteApiError):
    """Raised when an update is rejected because the etag is outdated."""

    pass


class NotFoundError(RemoteApiError):
    """Raised when a contact, group or photo source does not exist."""

    pass


class ConflictError(RemoteApiError):
    """Raised when a resource with the same unique name already exists."""

    pass


class ParseError(GContactVCardError):
    """Raised when JSON or vCard input cannot be parsed."""

    pass


class UnsupportedMediaTypeError(GContactVCardError):
    """Raised when a photo is not one of the supported image types."""

    pass


class ValidationError(GContactVCardError):
    """Raised when a contact or form input violates field rules."""

    pass


__all__ = [
    "GContactVCardError",
    "AuthError",
    "TransportError",
    "RemoteApiError",
    "StaleWriteError",
    "NotFoundError",
    "ConflictError",
    "ParseError",
    "UnsupportedMediaTypeError",
    "ValidationError",
]
