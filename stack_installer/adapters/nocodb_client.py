"""NocoDB account bootstrap client for signup and signin calls."""

from __future__ import annotations

import json
from typing import Final

import httpx

from stack_installer.config import get_logger
from stack_installer.domain import AuthTokenMissingError, SignupFailedError

from .interfaces import DataToolAuthPort

logger = get_logger(__name__)


class NocoDbAuthClient(DataToolAuthPort):
    """Client for the NocoDB `auth/user` endpoints used during install."""

    _SIGNUP_PATH: Final[str] = "/api/v1/auth/user/signup"
    _SIGNIN_PATH: Final[str] = "/api/v1/auth/user/signin"
    _NULL_TOKEN_LITERAL: Final[str] = "null"

    def __init__(self, base_url: str, client: httpx.Client):
        """Initialize NocoDB auth client.

        Args:
            base_url: NocoDB base URL, for example `http://localhost:8080`.
            client: Shared httpx client carrying timeout configuration.

        Raises:
            ValueError: Raised when base_url is blank or client is None.
        """

        normalized_base_url = base_url.strip().rstrip("/")
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if client is None:
            raise ValueError("client must not be None")
        self._base_url = normalized_base_url
        self._client = client

    def adapter_signup(self, email: str, password: str) -> str:
        """Create the demo user account.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            str: Raw response body for diagnostics.

        Raises:
            SignupFailedError: Raised on transport failure or an HTTP error status.
        """

        payload = {"email": email, "password": password, "roles": "user"}
        try:
            response = self._client.post(f"{self._base_url}{self._SIGNUP_PATH}", json=payload)
        except httpx.HTTPError as error:
            raise SignupFailedError(f"NocoDB user creation failed: {error}") from error

        logger.debug("nocodb_signup_response", status_code=response.status_code, body=response.text)
        if response.status_code >= 400:
            raise SignupFailedError(
                f"NocoDB user creation failed with HTTP {response.status_code}: {response.text.strip()}"
            )
        return response.text

    def adapter_signin(self, email: str, password: str) -> str:
        """Authenticate the demo user and extract the API token.

        Args:
            email: Account email.
            password: Account password.

        Returns:
            str: Non-empty API token.

        Raises:
            AuthTokenMissingError: Raised when the request fails or the token is absent, null or blank.
        """

        payload = {"email": email, "password": password}
        try:
            response = self._client.post(f"{self._base_url}{self._SIGNIN_PATH}", json=payload)
        except httpx.HTTPError as error:
            raise AuthTokenMissingError(f"NocoDB authentication failed: {error}") from error

        logger.debug("nocodb_signin_response", status_code=response.status_code)
        if response.status_code >= 400:
            raise AuthTokenMissingError(
                f"Failed to get authentication token: HTTP {response.status_code}: {response.text.strip()}"
            )
        return self._adapter_extract_token(response.text)

    def _adapter_extract_token(self, body: str) -> str:
        """Extract the `token` field from a signin response body.

        Args:
            body: Raw response text.

        Returns:
            str: Token value.

        Raises:
            AuthTokenMissingError: Raised when the body is not JSON or the token is unusable.
        """

        try:
            parsed = json.loads(body)
        except json.JSONDecodeError as error:
            raise AuthTokenMissingError(f"Failed to get authentication token. Response: {body}") from error

        token = parsed.get("token") if isinstance(parsed, dict) else None
        if token is None:
            raise AuthTokenMissingError(f"Failed to get authentication token. Response: {body}")

        token_text = str(token).strip()
        if not token_text or token_text == self._NULL_TOKEN_LITERAL:
            raise AuthTokenMissingError(f"Failed to get authentication token. Response: {body}")
        return token_text
