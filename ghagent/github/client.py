"""
Installation-scoped GitHub API handle.

An ``InstallationClient`` carries one installation access token and issues
REST and GraphQL requests with it over a shared HTTP session.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"


def github_headers(token: str) -> Dict[str, str]:
    """Request headers for a bearer token (JWT or installation token)."""
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": API_VERSION,
    }


class GitHubGraphQLError(Exception):
    """Raised when a GraphQL response carries an ``errors`` list."""

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        messages = "; ".join(e.get("message", str(e)) for e in errors)
        super().__init__(f"GitHub GraphQL error: {messages}")


class InstallationClient:
    """
    Authenticated API handle for one GitHub App installation.

    Errors from GitHub are not retried here; ``httpx.HTTPStatusError``
    and ``GitHubGraphQLError`` propagate to the caller.
    """

    def __init__(
        self,
        installation_id: int,
        token: str,
        http: httpx.AsyncClient,
        api_url: str = "https://api.github.com",
        expires_at: Optional[str] = None,
    ):
        self.installation_id = installation_id
        self.token = token
        self.http = http
        self.api_url = api_url.rstrip("/")
        self.expires_at = expires_at

    @property
    def graphql_url(self) -> str:
        """GraphQL endpoint; Enterprise Server serves it at /api/graphql, not /api/v3/graphql."""
        return re.sub(r"/api/v3$", "/api", self.api_url) + "/graphql"

    def __repr__(self) -> str:
        return f"InstallationClient(installation_id={self.installation_id})"

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Issue a REST request relative to the API base URL.

        Args:
            method: HTTP method
            path: Path beginning with "/"
            **kwargs: Passed through to ``httpx.AsyncClient.request``

        Returns:
            httpx.Response: Successful response

        Raises:
            httpx.HTTPStatusError: On any 4xx/5xx response
        """
        return await self._send(method, f"{self.api_url}{path}", **kwargs)

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        headers = github_headers(self.token)
        headers.update(kwargs.pop("headers", {}))

        response = await self.http.request(method, url, headers=headers, **kwargs)
        response.raise_for_status()
        return response

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a GraphQL operation.

        Args:
            query: GraphQL document
            variables: Operation variables

        Returns:
            Dict: The ``data`` member of the response

        Raises:
            GitHubGraphQLError: If GitHub reports errors
        """
        response = await self._send(
            "POST",
            self.graphql_url,
            json={"query": query, "variables": variables or {}},
        )
        payload = response.json()

        if payload.get("errors"):
            logger.error(
                "GraphQL request failed",
                extra={
                    "installation_id": self.installation_id,
                    "errors": payload["errors"],
                },
            )
            raise GitHubGraphQLError(payload["errors"])

        return payload.get("data") or {}
