"""
GitHub agent service and its lifecycle entry points.

``start`` builds the service aggregate, warms the installation client
cache and wires the webhook handlers; ``stop`` shuts it down.
"""

import logging
from typing import Callable, Optional

import httpx
from fastapi import FastAPI

from ghagent.api.webhooks import WEBHOOK_PATH, router as webhooks_router
from ghagent.config import Settings, load_settings
from ghagent.github.auth import GitHubAppAuth
from ghagent.github.cache import InstallationClientCache, now_ms
from ghagent.github.resources import DiscussionsClient, IssuesClient
from ghagent.handlers import GitHubEventHandlers
from ghagent.runtime.base import AgentRuntime
from ghagent.webhooks.dispatcher import WebhookEventError, Webhooks

logger = logging.getLogger(__name__)


def log_webhook_error(error: WebhookEventError) -> None:
    """Error callback: log the failed delivery; the event is dropped."""
    logger.error(
        "Error processing the GitHub webhook",
        extra={
            "event": error.event,
            "delivery_id": error.delivery_id,
            "error": str(error.cause),
        },
        exc_info=error.cause,
    )


class GitHubAgentService:
    """
    Owns the installation client cache and everything that uses it.

    One instance per process; it is created by ``start`` and handed to
    the HTTP host through ``app.state.github_service``.
    """

    def __init__(
        self,
        runtime: AgentRuntime,
        settings: Settings,
        http: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            runtime: Agent runtime used by the issue handler
            settings: Application settings
            http: Shared HTTP session (created from settings when omitted)
            clock: Epoch-millisecond clock for cache expiry
        """
        self.runtime = runtime
        self.settings = settings
        private_key = settings.read_private_key()
        self.http = http or httpx.AsyncClient(timeout=settings.GITHUB_TIMEOUT_SECONDS)

        self.auth = GitHubAppAuth(
            app_id=settings.GITHUB_APP_ID,
            private_key=private_key,
            http=self.http,
            api_url=settings.GITHUB_API_URL,
        )
        self.clients = InstallationClientCache(self.auth, clock=clock)

        self.issues = IssuesClient(self.clients)
        self.discussions = DiscussionsClient(self.clients)

        self.handlers = GitHubEventHandlers(runtime, self.issues, self.discussions)

        self.webhooks = Webhooks(settings.GITHUB_WEBHOOK_SECRET)
        self.webhooks.on("issues.opened", self.handlers.handle_issue_opened)
        self.webhooks.on("discussion.created", self.handlers.handle_discussion_created)
        self.webhooks.on_error(log_webhook_error)

    async def retrieve_installations(self) -> int:
        """Refresh a client for every installation of the App."""
        return await self.clients.populate()

    def create_middleware(self) -> FastAPI:
        """ASGI app serving the webhook route, for a host server to mount."""
        app = FastAPI(docs_url=None, redoc_url=None)
        app.state.github_service = self
        app.include_router(webhooks_router, prefix=WEBHOOK_PATH)
        return app

    async def aclose(self) -> None:
        await self.http.aclose()


async def start(runtime: AgentRuntime, settings: Optional[Settings] = None) -> GitHubAgentService:
    """
    Start the GitHub client.

    Any failure while enumerating installations or fetching their tokens
    propagates and aborts startup.
    """
    settings = settings or load_settings()

    logger.info("GitHub client start", extra={"github_app_id": settings.GITHUB_APP_ID})

    service = GitHubAgentService(runtime, settings)
    try:
        await service.retrieve_installations()
    except Exception:
        await service.aclose()
        raise

    return service


async def stop(runtime: AgentRuntime, service: Optional[GitHubAgentService] = None) -> None:
    logger.info("GitHub client stop")

    if service is not None:
        await service.aclose()
