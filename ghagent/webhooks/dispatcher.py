"""
Webhook transport.

Verifies delivery signatures, decodes payloads into typed events and
dispatches them to the handlers registered for each event name. Any
exception raised while processing a delivery is reported to the error
callbacks and then dropped.
"""

import hashlib
import hmac
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ghagent.observability.logging import LogContext
from ghagent.webhooks.events import decode_event

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[Any]]
ErrorCallback = Callable[["WebhookEventError"], Any]


class WebhookEventError(Exception):
    """A failure while processing one webhook delivery."""

    def __init__(self, event: str, delivery_id: Optional[str], cause: BaseException):
        self.event = event
        self.delivery_id = delivery_id
        self.cause = cause
        super().__init__(f"Error handling {event} delivery {delivery_id}: {cause}")


class Webhooks:
    """Named-event dispatcher for GitHub webhook deliveries."""

    def __init__(self, secret: str):
        self._secret = secret.encode("utf-8")
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._error_callbacks: List[ErrorCallback] = []

    def sign(self, body: bytes) -> str:
        """Compute the ``X-Hub-Signature-256`` value for a body."""
        return "sha256=" + hmac.new(self._secret, body, hashlib.sha256).hexdigest()

    def verify(self, body: bytes, signature: Optional[str]) -> bool:
        """
        Check a delivery signature.

        Args:
            body: Raw request body bytes
            signature: ``X-Hub-Signature-256`` header value

        Returns:
            bool: True if the signature matches (constant-time comparison)
        """
        if not signature:
            return False
        return hmac.compare_digest(self.sign(body), signature)

    def on(self, event: str, handler: EventHandler) -> None:
        """Register a handler for an ``"{event}.{action}"`` name."""
        self._handlers.setdefault(event, []).append(handler)

    def on_error(self, callback: ErrorCallback) -> None:
        """Register a callback invoked with every ``WebhookEventError``."""
        self._error_callbacks.append(callback)

    def handles(self, event: str) -> bool:
        return event in self._handlers

    async def receive(self, event: str, payload: dict, delivery_id: Optional[str] = None) -> None:
        """
        Process one delivery.

        Never raises: failures are routed to the error callbacks.

        Args:
            event: Event name in ``"{event}.{action}"`` form
            payload: Parsed JSON payload
            delivery_id: ``X-GitHub-Delivery`` header value
        """
        with LogContext(delivery_id=delivery_id, event=event):
            handlers = self._handlers.get(event)
            if not handlers:
                logger.info("Ignoring event without handlers")
                return

            try:
                decoded = decode_event(event, payload)
                for handler in handlers:
                    await handler(decoded)
            except Exception as e:
                await self._report(WebhookEventError(event, delivery_id, e))
                return

            logger.info("Webhook event handled")

    async def _report(self, error: WebhookEventError) -> None:
        if not self._error_callbacks:
            logger.error(str(error), exc_info=error.cause)
            return

        for callback in self._error_callbacks:
            try:
                result = callback(error)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Webhook error callback failed")
