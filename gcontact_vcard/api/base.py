"""
Shared plumbing for the Google People API clients.

Provides the GoogleServiceClient base class used by the contact and group
clients for:
- Lazily building the People API discovery service
- Checking (and refreshing once) credentials before every remote call
- Translating HttpError and transport failures into gcontact_vcard errors

Calls are made once; failed calls are not retried.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import httplib2
from google.auth.exceptions import RefreshError
from google.auth.exceptions import TransportError as GoogleTransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gcontact_vcard.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    RemoteApiError,
    StaleWriteError,
    TransportError,
)

# Service status reported with 400 when an update carries an outdated etag
STATUS_FAILED_PRECONDITION = "FAILED_PRECONDITION"

logger = logging.getLogger(__name__)


def parse_http_error(error: HttpError) -> tuple[int, str, str]:
    """
    Extract status code, service status and message from an HttpError.

    Google APIs report errors as
    {"error": {"code": 400, "message": "...", "status": "FAILED_PRECONDITION"}}.
    Bodies that are not JSON fall back to the HTTP reason phrase.

    Returns:
        Tuple of (status_code, status, message)
    """
    status_code = int(getattr(error.resp, "status", 0) or 0)
    status = ""
    message = ""

    content = error.content
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        payload = json.loads(content) if content else {}
    except (ValueError, TypeError):
        payload = {}

    if isinstance(payload, dict):
        details = payload.get("error")
        if isinstance(details, dict):
            message = details.get("message", "")
            status = details.get("status", "")
        elif isinstance(details, str):
            status = details
            message = payload.get("error_description", "")

    if not message:
        message = getattr(error.resp, "reason", "") or str(error)
    return status_code, status, message


def map_http_error(error: HttpError, operation_name: str) -> RemoteApiError | AuthError:
    """Translate an HttpError into the matching gcontact_vcard error."""
    status_code, status, message = parse_http_error(error)
    text = f"{operation_name} failed: {message}"

    if status_code == 400 and status == STATUS_FAILED_PRECONDITION:
        return StaleWriteError(text, status_code, status)
    if status_code == 401:
        return AuthError(text)
    if status_code == 404:
        return NotFoundError(text, status_code, status)
    if status_code == 409:
        return ConflictError(text, status_code, status)
    return RemoteApiError(text, status_code, status)


class GoogleServiceClient:
    """
    Base class for clients talking to the People API discovery service.

    Attributes:
        credentials: Google OAuth2 credentials with contacts scope
        service: People API service resource (built on first access)
    """

    def __init__(self, credentials: Credentials | None, service: Any = None):
        """
        Initialize the client.

        Args:
            credentials: Credentials used to authorize requests
            service: Prebuilt service resource (tests pass a fake one)
        """
        self.credentials = credentials
        self._service = service

    @property
    def service(self) -> Any:
        """
        Get or create the Google API service object.

        Raises:
            TransportError: If the service cannot be created
        """
        if self._service is None:
            try:
                self._service = build(
                    "people", "v1", credentials=self.credentials, cache_discovery=False
                )
                logger.debug("Created People API service")
            except (httplib2.HttpLib2Error, OSError) as e:
                logger.error(f"Failed to create People API service: {e}")
                raise TransportError(f"Failed to create API service: {e}") from e
        return self._service

    def _ensure_credentials(self) -> None:
        """
        Make sure the credentials can authorize a request.

        Expired credentials are refreshed exactly once.

        Raises:
            AuthError: If credentials are missing or cannot be refreshed
        """
        creds = self.credentials
        if creds is None:
            raise AuthError("Not authenticated. Run 'gcontact-vcard auth' first.")
        if creds.valid:
            return
        if not creds.refresh_token:
            raise AuthError(
                "Access token expired and no refresh token is available. "
                "Run 'gcontact-vcard auth' again."
            )

        logger.debug("Refreshing expired access token")
        try:
            creds.refresh(Request())
        except RefreshError as e:
            raise AuthError(f"Failed to refresh access token: {e}") from e
        except GoogleTransportError as e:
            raise TransportError(f"Failed to refresh access token: {e}") from e

        if not creds.valid:
            raise AuthError("Access token is still invalid after refresh")

    def _execute(self, operation: Callable[[], Any], operation_name: str) -> Any:
        """
        Execute a single API request with error translation.

        Args:
            operation: Callable building and executing the request
            operation_name: Name for logging and error messages

        Returns:
            Decoded response of the request

        Raises:
            AuthError: For missing/invalid credentials or HTTP 401
            StaleWriteError: For 400 FAILED_PRECONDITION (outdated etag)
            NotFoundError: For HTTP 404
            ConflictError: For HTTP 409
            RemoteApiError: For any other error status
            TransportError: If the service cannot be reached
        """
        self._ensure_credentials()
        try:
            return operation()
        except HttpError as e:
            mapped = map_http_error(e, operation_name)
            logger.error(f"{operation_name} failed: {mapped}")
            raise mapped from e
        except RefreshError as e:
            raise AuthError(f"{operation_name} failed: {e}") from e
        except (httplib2.HttpLib2Error, GoogleTransportError, OSError) as e:
            logger.error(f"{operation_name} failed to reach the service: {e}")
            raise TransportError(f"{operation_name} failed: {e}") from e
