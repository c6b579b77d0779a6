"""
Webhook transport and typed event payloads.
"""

from ghagent.webhooks.dispatcher import Webhooks, WebhookEventError
from ghagent.webhooks.events import (
    DiscussionCreatedEvent,
    IssueOpenedEvent,
    MissingInstallationError,
    UnsupportedEventError,
    WebhookEvent,
    decode_event,
    require_installation,
)

__all__ = [
    "Webhooks",
    "WebhookEventError",
    "WebhookEvent",
    "IssueOpenedEvent",
    "DiscussionCreatedEvent",
    "MissingInstallationError",
    "UnsupportedEventError",
    "decode_event",
    "require_installation",
]
