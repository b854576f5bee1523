"""Authentication module for WD Bridge (wdbridge)."""

import json
import requests

from wdbridge.core.config import (
    AUTH_URL,
    AUTH_CLIENT_ID,
    AUTH_CONNECTION,
    AUTH_DEVICE,
    AUTH_SCOPE,
)
from wdbridge.core.errors import AuthenticationError
from wdbridge.core.session import Credentials, Session
from wdbridge.utils.logger import get_api_logger

log = get_api_logger()


class WDAuth:
    """Exchanges username/password for a bearer token on the identity provider."""

    def __init__(self, session=None):
        """Initialize with the session that receives issued tokens."""
        self.session = session if session is not None else Session()

    def authenticate(self, username, password):
        """
        Log in with a password grant.

        Returns False when the credentials are rejected or the exchange fails
        for any other reason; on success the session token is replaced and the
        credentials are kept for later re-authentication.
        """
        body = {
            "client_id": AUTH_CLIENT_ID,
            "connection": AUTH_CONNECTION,
            "device": AUTH_DEVICE,
            "grant_type": "password",
            "password": password,
            "username": username,
            "scope": AUTH_SCOPE,
        }

        try:
            response = requests.post(
                AUTH_URL,
                data=json.dumps(body, separators=(",", ":")),
                headers={"content-type": "application/json"},
            )
            if response.status_code == 401:
                return False
            response.raise_for_status()
            id_token = response.json()["id_token"]
        except (
            requests.exceptions.RequestException,
            ValueError,
            KeyError,
            TypeError,
        ) as e:
            log.error("Error occurred while authenticating to server: %s", e)
            return False

        self.session.replace_token(id_token)
        self.session.credentials = Credentials(username, password)
        return True

    def reauthenticate(self):
        """Log in again with the cached credentials."""
        credentials = self.session.credentials
        if credentials is None:
            raise AuthenticationError(
                "Session expired and no credentials are cached; authenticate first"
            )

        log.warning("Re-authentication initiated")
        if not self.authenticate(credentials.username, credentials.password):
            raise AuthenticationError("Re-authentication with cached credentials failed")
