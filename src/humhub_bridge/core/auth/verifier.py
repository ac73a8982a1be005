"""HumHub credential verifier.

Checks a username/password pair against HumHub's /auth/current endpoint
using HTTP Basic authentication and maps the response to a
RemoteIdentityProfile.
"""

import logging
from typing import Optional

import httpx

from humhub_bridge.domain.models import RemoteIdentityProfile

logger = logging.getLogger(__name__)


class HumHubCredentialVerifier:
    """Remote credential check against the HumHub REST API.

    Every failure mode (transport error, timeout, non-200 status, body that
    is not a JSON object) is reported as None. Nothing is retried and
    nothing is cached.

    Configuration:
        HUMHUB_API_URL=https://humhub.example.org/api/v1/auth/current
        HUMHUB_CONNECT_TIMEOUT=5.0 (default)
        HUMHUB_READ_TIMEOUT=5.0 (default)
    """

    def __init__(
        self,
        api_url: str,
        connect_timeout: float = 5.0,
        read_timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize verifier.

        Args:
            api_url: Full URL of the credential check endpoint
            connect_timeout: Connect timeout in seconds
            read_timeout: Read timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.api_url = api_url
        self.timeout = httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=read_timeout,
            pool=connect_timeout,
        )
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def verify(self, login: str, password: str) -> Optional[RemoteIdentityProfile]:
        """Verify credentials with HumHub.

        Args:
            login: Username or email
            password: Plaintext password

        Returns:
            RemoteIdentityProfile on HTTP 200 with a JSON object body,
            None otherwise
        """
        logger.debug(f"Calling HumHub API for login '{login}'")
        try:
            response = await self._client.get(
                self.api_url,
                auth=httpx.BasicAuth(login, password),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"HumHub communication failed for '{login}': {e.__class__.__name__}: {e}")
            return None

        logger.debug(f"HumHub HTTP status: {response.status_code}")

        if response.status_code != 200:
            logger.warning(
                f"HumHub authentication failed for '{login}' (status {response.status_code})"
            )
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"HumHub error body: {response.text}")
            return None

        try:
            return RemoteIdentityProfile.from_api_payload(response.json())
        except (ValueError, RecursionError) as e:
            logger.warning(f"HumHub returned a malformed body for '{login}': {e}")
            return None

    async def aclose(self) -> None:
        """Close the underlying HTTP client"""
        await self._client.aclose()
