"""
GitHub webhook receiver.

Verifies the delivery signature, acknowledges the delivery and hands the
payload to the webhook transport as a background task.
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from ghagent.webhooks.dispatcher import Webhooks

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/github/webhooks"

router = APIRouter()


def get_webhooks(request: Request) -> Webhooks:
    """
    Provides the webhook transport of the running service.

    Raises:
        HTTPException: 503 while the service has not started
    """
    service = getattr(request.app.state, "github_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="GitHub service not started")
    return service.webhooks


@router.post(
    "",
    status_code=202,
    summary="GitHub webhook receiver",
    description="Receives GitHub App webhook deliveries",
)
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: Optional[str] = Header(None),
    x_github_delivery: Optional[str] = Header(None),
    x_hub_signature_256: Optional[str] = Header(None),
    webhooks: Webhooks = Depends(get_webhooks),
):
    """
    GitHub webhook endpoint.

    Returns:
        JSONResponse: 202 when the delivery was queued, 200 for ping and
        events nobody handles
    """
    body = await request.body()

    if not x_hub_signature_256:
        raise HTTPException(status_code=401, detail="Missing X-Hub-Signature-256 header")

    if not webhooks.verify(body, x_hub_signature_256):
        logger.warning("Invalid webhook signature", extra={"delivery_id": x_github_delivery})
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    if not x_github_event:
        raise HTTPException(status_code=400, detail="Missing X-GitHub-Event header")

    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    action = payload.get("action") if isinstance(payload, dict) else None
    event = f"{x_github_event}.{action}" if action else x_github_event

    logger.info(
        "Received GitHub webhook",
        extra={"event": event, "delivery_id": x_github_delivery},
    )

    if x_github_event == "ping":
        return JSONResponse(status_code=200, content={"message": "pong"})

    if not webhooks.handles(event):
        logger.info("Ignoring unsupported event", extra={"event": event})
        return JSONResponse(
            status_code=200,
            content={"message": f"Event {event} not processed"},
        )

    background_tasks.add_task(webhooks.receive, event, payload, x_github_delivery)

    return JSONResponse(
        status_code=202,
        content={"message": "Event received", "delivery_id": x_github_delivery},
    )
