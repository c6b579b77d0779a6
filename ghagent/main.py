"""
FastAPI entrypoint for the GitHub agent client.

Builds the host application: health routes plus the GitHub webhook
route, with the GitHub service started on application startup.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from ghagent.api import health, webhooks
from ghagent.config import Settings, load_settings
from ghagent.llm.model import get_llm_client
from ghagent.observability.logging import setup_logging
from ghagent.runtime.agent import LLMAgentRuntime
from ghagent.runtime.base import AgentRuntime, Character
from ghagent.service import GitHubAgentService, start, stop

logger = logging.getLogger(__name__)


def build_runtime(settings: Settings) -> LLMAgentRuntime:
    """Agent runtime from the configured character and LLM provider."""
    return LLMAgentRuntime(
        character=Character.from_settings(settings),
        llm=get_llm_client(settings),
    )


def create_app(
    settings: Optional[Settings] = None,
    runtime: Optional[AgentRuntime] = None,
    service: Optional[GitHubAgentService] = None,
) -> FastAPI:
    """
    Create the host application.

    Args:
        settings: Application settings (loaded from the environment when omitted)
        runtime: Agent runtime (built from settings when omitted)
        service: An already started service; startup then skips ``start``
    """
    if settings is None:
        settings = service.settings if service is not None else load_settings()

    setup_logging(settings)

    app = FastAPI(
        title="GitHub Agent Client",
        description="Connects GitHub App webhooks to a conversational agent",
        version=health.VERSION,
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    )

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(webhooks.router, prefix=webhooks.WEBHOOK_PATH, tags=["webhooks"])

    if service is not None:
        app.state.github_service = service

    @app.on_event("startup")
    async def startup_event():
        if getattr(app.state, "github_service", None) is not None:
            return
        agent = runtime or build_runtime(settings)
        app.state.github_service = await start(agent, settings)
        logger.info(
            "GitHub agent client started",
            extra={
                "environment": settings.ENVIRONMENT,
                "installations": len(app.state.github_service.clients),
            },
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        started = getattr(app.state, "github_service", None)
        await stop(started.runtime if started else runtime, started)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "ghagent.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
    )
