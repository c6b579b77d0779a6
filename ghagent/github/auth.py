"""
GitHub App authentication module.

Handles JWT generation for GitHub App authentication, installation
token exchange and enumeration of the App's installations.
"""

import logging
import time
from typing import Any, AsyncIterator, Dict

import httpx
import jwt

from ghagent.github.client import InstallationClient, github_headers

logger = logging.getLogger(__name__)


class GitHubAuthError(Exception):
    """Raised when GitHub rejects an installation token request."""

    def __init__(self, installation_id: int, status_code: int, response_body: str):
        self.installation_id = installation_id
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(
            f"Failed to get installation token for {installation_id}: "
            f"{status_code} {response_body}"
        )


class GitHubAppAuth:
    """
    GitHub App authentication handler.

    Manages:
    - JWT generation for GitHub App authentication
    - Installation access token exchange
    - Installation enumeration

    All requests go through one shared ``httpx.AsyncClient``; the
    installation handles it hands out reuse that same session.
    """

    def __init__(
        self,
        app_id: str,
        private_key: str,
        http: httpx.AsyncClient,
        api_url: str = "https://api.github.com",
    ):
        """
        Initialize GitHub App authentication.

        Args:
            app_id: GitHub App ID
            private_key: GitHub App private key (PEM format)
            http: Shared HTTP session
            api_url: GitHub API base URL
        """
        self.app_id = app_id
        self.private_key = private_key
        self.http = http
        self.api_url = api_url.rstrip("/")

    def generate_jwt(self, expiration_seconds: int = 600) -> str:
        """
        Generate JWT for GitHub App authentication.

        JWT is used to authenticate as the GitHub App itself,
        before requesting installation tokens.

        Args:
            expiration_seconds: JWT expiration time (max 600 seconds)

        Returns:
            str: Encoded JWT token
        """
        now = int(time.time())

        payload = {
            "iat": now - 60,  # Issued at (60 seconds in past to account for clock drift)
            "exp": now + expiration_seconds,
            "iss": str(self.app_id),
        }

        return jwt.encode(payload, self.private_key, algorithm="RS256")

    def _app_headers(self) -> Dict[str, str]:
        return github_headers(self.generate_jwt())

    async def get_installation_client(self, installation_id: int) -> InstallationClient:
        """
        Exchange the App identity for an installation-scoped handle.

        Args:
            installation_id: GitHub App installation ID

        Returns:
            InstallationClient: Handle authenticated with a fresh installation token

        Raises:
            GitHubAuthError: If GitHub does not issue the token
        """
        logger.info(
            "Requesting new installation token",
            extra={"installation_id": installation_id},
        )

        url = f"{self.api_url}/app/installations/{installation_id}/access_tokens"
        response = await self.http.post(url, headers=self._app_headers())

        if response.status_code != 201:
            logger.error(
                "Failed to get installation token",
                extra={
                    "installation_id": installation_id,
                    "status_code": response.status_code,
                },
            )
            raise GitHubAuthError(installation_id, response.status_code, response.text)

        data = response.json()

        logger.info(
            "Installation token retrieved",
            extra={
                "installation_id": installation_id,
                "expires_at": data.get("expires_at"),
            },
        )

        return InstallationClient(
            installation_id=installation_id,
            token=data["token"],
            http=self.http,
            api_url=self.api_url,
            expires_at=data.get("expires_at"),
        )

    async def iter_installations(self, per_page: int = 100) -> AsyncIterator[Dict[str, Any]]:
        """
        Iterate over every installation of this GitHub App.

        Follows page-number pagination until GitHub returns a short page.

        Yields:
            Dict: Installation objects as returned by GitHub
        """
        url = f"{self.api_url}/app/installations"
        page = 1

        while True:
            response = await self.http.get(
                url,
                headers=self._app_headers(),
                params={"per_page": per_page, "page": page},
            )
            response.raise_for_status()

            installations = response.json()
            for installation in installations:
                yield installation

            if len(installations) < per_page:
                break
            page += 1
