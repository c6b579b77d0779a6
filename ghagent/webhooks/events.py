"""
Typed webhook payloads.

Inbound payloads are decoded once, at the transport boundary, into one
of the event models below. Only the fields the handlers read are
declared; everything else GitHub sends is ignored.
"""

from typing import Annotated, Dict, Literal, Optional, Type, Union

from pydantic import BaseModel, Field, TypeAdapter


class MissingInstallationError(Exception):
    """Raised when a webhook payload carries no GitHub App installation."""

    def __init__(self, event: str):
        self.event = event
        super().__init__(f"Missing repository GitHub App installation ({event})")


class UnsupportedEventError(Exception):
    """Raised when no payload model exists for an event name."""


class Installation(BaseModel):
    id: int
    node_id: Optional[str] = None


class User(BaseModel):
    id: int
    login: str
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.login


class RepositoryOwner(BaseModel):
    login: str


class Repository(BaseModel):
    id: int
    name: str
    full_name: Optional[str] = None
    owner: RepositoryOwner


class Issue(BaseModel):
    id: int
    node_id: Optional[str] = None
    number: int
    title: str
    body: Optional[str] = None
    url: str
    html_url: Optional[str] = None
    user: User


class Discussion(BaseModel):
    id: int
    node_id: str
    number: int
    title: str
    body: Optional[str] = None
    user: Optional[User] = None


class IssueOpenedEvent(BaseModel):
    """``issues`` event with action ``opened``."""

    kind: Literal["issues.opened"] = "issues.opened"
    action: Literal["opened"]
    issue: Issue
    repository: Repository
    installation: Optional[Installation] = None


class DiscussionCreatedEvent(BaseModel):
    """``discussion`` event with action ``created``."""

    kind: Literal["discussion.created"] = "discussion.created"
    action: Literal["created"]
    discussion: Discussion
    repository: Optional[Repository] = None
    installation: Optional[Installation] = None


WebhookEvent = Annotated[
    Union[IssueOpenedEvent, DiscussionCreatedEvent],
    Field(discriminator="kind"),
]

EVENT_MODELS: Dict[str, Type[BaseModel]] = {
    "issues.opened": IssueOpenedEvent,
    "discussion.created": DiscussionCreatedEvent,
}

WEBHOOK_EVENT_ADAPTER: TypeAdapter = TypeAdapter(WebhookEvent)


def decode_event(name: str, payload: dict) -> WebhookEvent:
    """
    Decode a raw payload into its event model.

    Args:
        name: Event name in ``"{event}.{action}"`` form
        payload: Parsed JSON payload

    Returns:
        The validated event model

    Raises:
        UnsupportedEventError: If no model is registered for ``name``
        pydantic.ValidationError: If the payload does not match the model
    """
    if name not in EVENT_MODELS:
        raise UnsupportedEventError(f"No payload model for event {name}")

    return WEBHOOK_EVENT_ADAPTER.validate_python({**payload, "kind": name})


def require_installation(event: WebhookEvent) -> Installation:
    """Return the event's installation or raise ``MissingInstallationError``."""
    if event.installation is None:
        raise MissingInstallationError(event.kind)
    return event.installation
