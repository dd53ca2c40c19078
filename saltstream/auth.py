"""
Login handshake against the Salt API.
"""
import logging

import httpx
from pydantic import ValidationError

from .errors import AuthError
from .models import Credentials, LoginResponse

logger = logging.getLogger(__name__)


class SessionAuthenticator:
    """
    Performs the POST /login handshake and extracts the session token.

    The HTTP client is supplied by the caller so the same connection settings
    (TLS verification, timeouts) apply to the login and to the event stream.
    """

    def __init__(self, credentials: Credentials, client: httpx.Client):
        self.credentials = credentials
        self._client = client

    @property
    def login_url(self) -> str:
        return f"{self.credentials.base_url}/login"

    def login(self) -> str:
        """
        Log in and return the session token.

        Returns:
            The token issued by the Salt API

        Raises:
            AuthError: If the request fails, the body is not JSON, or the
                token is missing or not a string
        """
        body = self.credentials.login_request().model_dump()
        logger.info(f"Logging in to {self.login_url} as {self.credentials.username} ({self.credentials.eauth})")

        try:
            response = self._client.post(
                self.login_url,
                json=body,
                headers={"Accept": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # InvalidURL is raised before anything is sent and is not an HTTPError
            raise AuthError(f"Login request failed: {e}") from e

        if not response.is_success:
            raise AuthError(
                f"Login failed: {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:200]},
            )

        try:
            result = LoginResponse.model_validate(response.json())
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            reason = "unexpected shape" if isinstance(e, ValidationError) else "not JSON"
            raise AuthError(f"Login response is {reason}") from e

        token = result.token
        logger.debug(f"Obtained session token {token[:6]}...")
        return token
