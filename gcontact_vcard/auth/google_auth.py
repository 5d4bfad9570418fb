"""
OAuth2 authentication for the Google People API.

Provides OAuth 2.0 authentication with support for:
- Installed-app authorization code flow with a local redirect server
- Token storage in the configuration directory (owner-only permissions)
- Automatic, single-attempt refresh of expired access tokens
- Status reporting for the CLI
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from requests.exceptions import RequestException

from gcontact_vcard.errors import AuthError
from gcontact_vcard.utils.paths import ensure_private_dir, resolve_config_dir

# OAuth2 scopes required for Google Contacts access
SCOPES = [
    "https://www.googleapis.com/auth/contacts",
    "https://www.googleapis.com/auth/userinfo.email",
    "openid",  # Required by Google when requesting userinfo.email
]

CREDENTIALS_FILE = "credentials.json"
TOKEN_FILE = "token.json"

USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

# Default auth timeout for network requests (in seconds)
DEFAULT_AUTH_TIMEOUT = 10

logger = logging.getLogger(__name__)


class GoogleAuth:
    """
    OAuth2 authentication manager for a single Google account.

    Attributes:
        config_dir: Directory holding credentials.json and token.json
        credentials_path: Path to the OAuth client secrets file
        token_path: Path to the stored authorized-user token

    Usage:
        auth = GoogleAuth()

        # Interactive login (opens a browser)
        creds = auth.authenticate()

        # Later runs
        creds = auth.require_credentials()
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        auth_timeout: int = DEFAULT_AUTH_TIMEOUT,
    ):
        """
        Initialize the authentication manager.

        Args:
            config_dir: Directory for credentials and tokens. Defaults to
                $GCONTACT_VCARD_CONFIG_DIR or ~/.gcontact-vcard/
            auth_timeout: Timeout in seconds for network requests
        """
        self.config_dir = resolve_config_dir(config_dir)
        self.credentials_path = self.config_dir / CREDENTIALS_FILE
        self.token_path = self.config_dir / TOKEN_FILE
        self.auth_timeout = auth_timeout

    def _ensure_config_dir(self) -> None:
        if ensure_private_dir(self.config_dir):
            logger.debug(f"Created config directory: {self.config_dir}")

    def _load_credentials(self) -> Credentials | None:
        """Load credentials from the token file, if present and readable."""
        if not self.token_path.exists():
            logger.debug("No token file found")
            return None

        try:
            creds: Credentials = Credentials.from_authorized_user_file(
                str(self.token_path), SCOPES
            )
            logger.debug("Loaded stored credentials")
            return creds
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Invalid token file {self.token_path}: {e}")
            return None

    def _save_credentials(self, creds: Credentials, email: str | None = None) -> None:
        """Write credentials to the token file with 0600 permissions."""
        self._ensure_config_dir()

        token_data = json.loads(creds.to_json())
        if email:
            token_data["email"] = email
        elif self.token_path.exists():
            previous = self._read_token_data()
            if previous.get("email"):
                token_data["email"] = previous["email"]

        self.token_path.write_text(json.dumps(token_data))
        self.token_path.chmod(0o600)
        logger.debug(f"Saved credentials to {self.token_path}")

    def _read_token_data(self) -> dict[str, str]:
        try:
            data: dict[str, str] = json.loads(self.token_path.read_text())
            return data
        except (json.JSONDecodeError, OSError):
            return {}

    def _refresh_credentials(self, creds: Credentials) -> None:
        """
        Refresh expired credentials once.

        Raises:
            AuthError: If there is no refresh token or the refresh is refused
        """
        if not creds.refresh_token:
            raise AuthError(
                "Access token expired and no refresh token is stored. "
                "Run 'gcontact-vcard auth' again."
            )
        try:
            creds.refresh(Request())
        except (RefreshError, TransportError) as e:
            logger.warning(f"Failed to refresh credentials: {e}")
            raise AuthError(f"Failed to refresh access token: {e}") from e
        logger.debug("Successfully refreshed credentials")

    def _fetch_user_email(self, creds: Credentials) -> str | None:
        """Fetch the authenticated user's email address from Google."""
        try:
            session = AuthorizedSession(creds)
            response = session.get(USERINFO_URL, timeout=self.auth_timeout)
            if response.status_code == 401:
                logger.debug("Token missing email scope")
                return None
            response.raise_for_status()
            email: str | None = response.json().get("email")
            return email
        except (RequestException, ValueError) as e:
            logger.debug(f"Failed to fetch user email: {e}")
            return None

    def get_credentials(self) -> Credentials | None:
        """
        Get valid credentials if available, without user interaction.

        Expired credentials are refreshed once and stored again.

        Returns:
            Valid Credentials object, or None if not available
        """
        creds = self._load_credentials()
        if creds is None:
            return None
        if creds.valid:
            return creds

        try:
            self._refresh_credentials(creds)
        except AuthError:
            return None
        self._save_credentials(creds)
        return creds

    def require_credentials(self) -> Credentials:
        """
        Get valid credentials or fail.

        Raises:
            AuthError: If no token is stored or it cannot be refreshed
        """
        creds = self._load_credentials()
        if creds is None:
            raise AuthError("Not authenticated. Run 'gcontact-vcard auth' first.")
        if not creds.valid:
            self._refresh_credentials(creds)
            self._save_credentials(creds)
        return creds

    def authenticate(self, force_reauth: bool = False) -> Credentials:
        """
        Authenticate the Google account.

        Args:
            force_reauth: Ignore stored credentials and run the OAuth flow

        Returns:
            Valid Credentials object

        Raises:
            AuthError: If credentials.json is missing or the flow fails
        """
        if not force_reauth:
            creds = self.get_credentials()
            if creds is not None:
                logger.info("Using existing credentials")
                return creds

        if not self.credentials_path.exists():
            raise AuthError(
                f"OAuth credentials file not found: {self.credentials_path}\n"
                "Please download your OAuth client credentials from "
                "Google Cloud Console and save them to this location."
            )

        logger.info("Starting OAuth flow")
        try:
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self.credentials_path), SCOPES
            )
            new_creds: Credentials = flow.run_local_server(port=0)
        except (ValueError, OSError, RefreshError) as e:
            logger.error(f"Authentication failed: {e}")
            raise AuthError(f"Failed to authenticate: {e}") from e

        email = self._fetch_user_email(new_creds)
        self._save_credentials(new_creds, email=email)
        logger.info("Successfully authenticated")
        return new_creds

    def is_authenticated(self) -> bool:
        return self.get_credentials() is not None

    def clear_credentials(self) -> bool:
        """
        Remove the stored token.

        Returns:
            True if a token was removed, False if none existed
        """
        if self.token_path.exists():
            self.token_path.unlink()
            logger.info("Cleared stored credentials")
            return True
        return False

    def get_account_email(self) -> str | None:
        """Email address stored with the token, fetched once if missing."""
        if not self.token_path.exists():
            return None

        token_data = self._read_token_data()
        email = token_data.get("email")
        if not email:
            creds = self.get_credentials()
            if creds:
                email = self._fetch_user_email(creds)
                if email:
                    token_data["email"] = email
                    self.token_path.write_text(json.dumps(token_data))
                    logger.debug("Updated stored email")
        return email

    def get_auth_status(self) -> dict[str, object]:
        """
        Get authentication status.

        Returns:
            Dictionary with authenticated, email, token_path, token_exists,
            credentials_path, credentials_exist and config_dir
        """
        creds = self.get_credentials()
        return {
            "authenticated": creds is not None,
            "email": self.get_account_email() if creds else None,
            "token_path": str(self.token_path),
            "token_exists": self.token_path.exists(),
            "credentials_path": str(self.credentials_path),
            "credentials_exist": self.credentials_path.exists(),
            "config_dir": str(self.config_dir),
        }
