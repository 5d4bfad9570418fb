"""
Unit tests for the shared API client plumbing.

Tests service creation, credential checks and HttpError translation.
"""

from unittest.mock import MagicMock, patch

import httplib2
import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from conftest import make_http_error
from gcontact_vcard.api.base import (
    GoogleServiceClient,
    map_http_error,
    parse_http_error,
)
from gcontact_vcard.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    RemoteApiError,
    StaleWriteError,
    TransportError,
)


class TestServiceCreation:
    """Tests for the lazily built discovery service."""

    @patch("gcontact_vcard.api.base.build")
    def test_service_created_once(self, mock_build):
        """Test that the service is built on first access and cached."""
        mock_creds = MagicMock()
        client = GoogleServiceClient(mock_creds)

        first = client.service
        second = client.service

        mock_build.assert_called_once_with(
            "people", "v1", credentials=mock_creds, cache_discovery=False
        )
        assert first is second

    @patch("gcontact_vcard.api.base.build")
    def test_service_creation_failure(self, mock_build):
        """Test that network failures while building raise TransportError."""
        mock_build.side_effect = httplib2.ServerNotFoundError("no dns")
        client = GoogleServiceClient(MagicMock())

        with pytest.raises(TransportError, match="Failed to create API service"):
            _ = client.service

    def test_prebuilt_service(self):
        """Test that a passed service is used as-is."""
        service = MagicMock()
        assert GoogleServiceClient(MagicMock(), service=service).service is service


class TestEnsureCredentials:
    """Tests for credential checks before each call."""

    def test_missing_credentials(self):
        """Test that calls without credentials raise AuthError."""
        client = GoogleServiceClient(None, service=MagicMock())
        with pytest.raises(AuthError, match="Not authenticated"):
            client._execute(lambda: {}, "op")

    def test_expired_without_refresh_token(self):
        """Test that expired credentials without refresh token fail."""
        creds = MagicMock(valid=False, refresh_token=None)
        client = GoogleServiceClient(creds, service=MagicMock())
        with pytest.raises(AuthError, match="no refresh token"):
            client._execute(lambda: {}, "op")

    @patch("gcontact_vcard.api.base.Request")
    def test_refreshes_once(self, mock_request):
        """Test that expired credentials are refreshed before the call."""
        creds = MagicMock(valid=False, refresh_token="refresh")

        def refresh(request):
            creds.valid = True

        creds.refresh.side_effect = refresh
        client = GoogleServiceClient(creds, service=MagicMock())

        assert client._execute(lambda: {"ok": True}, "op") == {"ok": True}
        creds.refresh.assert_called_once()

    @patch("gcontact_vcard.api.base.Request")
    def test_refresh_refused(self, mock_request):
        """Test that a refused refresh raises AuthError."""
        creds = MagicMock(valid=False, refresh_token="refresh")
        creds.refresh.side_effect = RefreshError("invalid_grant")
        client = GoogleServiceClient(creds, service=MagicMock())

        with pytest.raises(AuthError, match="Failed to refresh"):
            client._execute(lambda: {}, "op")


class TestExecute:
    """Tests for error translation in _execute."""

    @pytest.fixture
    def client(self, credentials):
        return GoogleServiceClient(credentials, service=MagicMock())

    def test_success(self, client):
        """Test that the response is returned unchanged."""
        assert client._execute(lambda: {"a": 1}, "op") == {"a": 1}

    def test_http_error_mapped(self, client):
        """Test that HttpError is translated and chained."""

        def operation():
            raise make_http_error(404, "NOT_FOUND", "Requested entity was not found.")

        with pytest.raises(NotFoundError) as exc_info:
            client._execute(operation, "get_contact(people/c1)")

        assert exc_info.value.status_code == 404
        assert isinstance(exc_info.value.__cause__, HttpError)
        assert "get_contact(people/c1) failed" in str(exc_info.value)

    def test_transport_error(self, client):
        """Test that connection failures raise TransportError."""

        def operation():
            raise httplib2.ServerNotFoundError("Unable to find the server")

        with pytest.raises(TransportError):
            client._execute(operation, "op")

    def test_not_retried(self, client):
        """Test that failed calls are made exactly once."""
        operation = MagicMock(side_effect=make_http_error(503, "UNAVAILABLE"))

        with pytest.raises(RemoteApiError):
            client._execute(operation, "op")
        operation.assert_called_once()


class TestHttpErrorMapping:
    """Tests for parse_http_error and map_http_error."""

    def test_parse_google_error_body(self):
        """Test reading code, status and message from the JSON body."""
        error = make_http_error(400, "INVALID_ARGUMENT", "Bad field mask")
        assert parse_http_error(error) == (400, "INVALID_ARGUMENT", "Bad field mask")

    def test_parse_non_json_body(self):
        """Test the reason phrase fallback."""
        resp = MagicMock(status=502, reason="Bad Gateway")
        error = HttpError(resp, b"<html>oops</html>")
        assert parse_http_error(error) == (502, "", "Bad Gateway")

    @pytest.mark.parametrize(
        "status,status_str,expected",
        [
            (400, "FAILED_PRECONDITION", StaleWriteError),
            (400, "INVALID_ARGUMENT", RemoteApiError),
            (401, "UNAUTHENTICATED", AuthError),
            (404, "NOT_FOUND", NotFoundError),
            (409, "ALREADY_EXISTS", ConflictError),
            (500, "INTERNAL", RemoteApiError),
        ],
    )
    def test_mapping(self, status, status_str, expected):
        """Test the error class for each status."""
        mapped = map_http_error(make_http_error(status, status_str, "msg"), "op")
        assert type(mapped) is expected

    def test_status_in_message(self):
        """Test that code and status are part of the error text."""
        mapped = map_http_error(make_http_error(409, "ALREADY_EXISTS", "dup"), "op")
        assert str(mapped) == "[409 ALREADY_EXISTS] op failed: dup"
