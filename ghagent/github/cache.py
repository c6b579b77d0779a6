"""
Per-installation client cache.

Keeps one authenticated ``InstallationClient`` per installation id and
replaces it once its one-hour lifetime has passed.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ghagent.github.auth import GitHubAppAuth
from ghagent.github.client import InstallationClient

logger = logging.getLogger(__name__)

# Installation access tokens expire after one hour
TOKEN_TTL_MS = 60 * 60 * 1000


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class NotFoundError(Exception):
    """Raised when a client is requested for an installation that was never registered."""

    def __init__(self, installation_id: int):
        self.installation_id = installation_id
        super().__init__(f"Client not found with Installation ID: {installation_id}")


@dataclass
class CachedClient:
    """Cached handle and its expiration in epoch milliseconds."""

    client: InstallationClient
    expiration: int


class InstallationClientCache:
    """
    Maps installation ids to short-lived authenticated handles.

    Entries are created by ``refresh`` (directly, or in bulk by ``populate``
    at startup) and overwritten on expiry; they are never removed.
    The lookup-then-refresh path takes no lock, so two tasks hitting the
    same expired entry may both refresh it and the last write wins.
    """

    def __init__(self, auth: GitHubAppAuth, clock: Callable[[], int] = now_ms):
        """
        Args:
            auth: GitHub App authentication used to mint new handles
            clock: Zero-argument callable returning epoch milliseconds
        """
        self.auth = auth
        self.clock = clock
        self._clients: Dict[int, CachedClient] = {}

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, installation_id: int) -> bool:
        return installation_id in self._clients

    def get_entry(self, installation_id: int) -> Optional[CachedClient]:
        return self._clients.get(installation_id)

    async def get_client(self, installation_id: int) -> InstallationClient:
        """
        Return a non-expired handle for the installation.

        Args:
            installation_id: GitHub App installation ID

        Returns:
            InstallationClient: Cached handle, refreshed first if it has expired

        Raises:
            NotFoundError: If the installation has no cache entry
        """
        cached = self._clients.get(installation_id)

        if cached is None:
            raise NotFoundError(installation_id)

        if cached.expiration < self.clock():
            logger.debug(
                "Installation client expired",
                extra={"installation_id": installation_id},
            )
            cached = await self.refresh(installation_id)

        return cached.client

    async def refresh(self, installation_id: int) -> CachedClient:
        """
        Request a new handle and overwrite the cache entry.

        Args:
            installation_id: GitHub App installation ID

        Returns:
            CachedClient: The new entry, expiring one hour from now
        """
        client = await self.auth.get_installation_client(installation_id)
        cached = CachedClient(client=client, expiration=self.clock() + TOKEN_TTL_MS)

        self._clients[installation_id] = cached
        return cached

    async def populate(self) -> int:
        """
        Eagerly refresh every installation the App is registered for.

        Installations are processed one at a time; the first failure
        propagates and stops the sweep.

        Returns:
            int: Number of installations refreshed
        """
        count = 0
        async for installation in self.auth.iter_installations():
            await self.refresh(installation["id"])
            count += 1

        logger.info("Installation clients populated", extra={"installations": count})
        return count
