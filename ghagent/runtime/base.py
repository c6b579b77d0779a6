"""
Agent runtime boundary.

Types and the protocol the webhook handlers use to talk to a
conversational agent: connection bookkeeping, the message memory
store, state composition, response generation and evaluation.
"""

import json
import re
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field

from ghagent.config import Settings
from ghagent.llm.model import ModelClass

State = Dict[str, Any]

UUID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "ghagent")

_PLACEHOLDER = re.compile(r"{{(\w+)}}")


def string_to_uuid(value: Union[str, int]) -> uuid.UUID:
    """Deterministic UUID for a string or numeric identifier."""
    return uuid.uuid5(UUID_NAMESPACE, str(value))


def compose_context(state: State, template: str) -> str:
    """
    Fill ``{{name}}`` placeholders in ``template`` from ``state``.

    Missing or None values render as an empty string.
    """
    def replace(match: "re.Match[str]") -> str:
        value = state.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(replace, template)


class Content(BaseModel):
    """Message content. Extra keys (e.g. parsed JSON fields) are kept."""

    model_config = ConfigDict(extra="allow")

    text: str = ""
    source: Optional[str] = None
    url: Optional[str] = None
    in_reply_to: Optional[uuid.UUID] = None


class Memory(BaseModel):
    """A message stored in the agent's memory."""

    id: uuid.UUID
    user_id: uuid.UUID
    agent_id: uuid.UUID
    room_id: uuid.UUID
    content: Content
    created_at: int
    embedding: Optional[List[float]] = None


class Character(BaseModel):
    """Agent persona rendered into prompts."""

    name: str
    bio: Union[str, List[str]] = ""
    lore: List[str] = Field(default_factory=list)
    message_directions: List[str] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Character":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Character":
        if settings.AGENT_CHARACTER_FILE:
            return cls.from_file(settings.AGENT_CHARACTER_FILE)
        return cls(
            name=settings.AGENT_NAME,
            bio=settings.AGENT_BIO,
            lore=[line for line in settings.AGENT_LORE.split("\n") if line.strip()],
        )

    def render_bio(self) -> str:
        return self.bio if isinstance(self.bio, str) else "\n".join(self.bio)


class MemoryManager(Protocol):
    async def add_embedding_to_memory(self, memory: Memory) -> Memory: ...

    async def create_memory(self, memory: Memory, unique: bool = False) -> None: ...

    async def get_memories(self, room_id: uuid.UUID, count: int = 10) -> List[Memory]: ...


class AgentRuntime(Protocol):
    """What the webhook handlers need from an agent runtime."""

    agent_id: uuid.UUID
    character: Character
    message_manager: MemoryManager

    async def ensure_connection(
        self,
        user_id: uuid.UUID,
        room_id: uuid.UUID,
        user_name: Optional[str],
        user_screen_name: Optional[str],
        source: Optional[str],
    ) -> None: ...

    async def compose_state(self, message: Memory, additional_keys: Optional[State] = None) -> State: ...

    async def generate_response(self, context: str, model_class: ModelClass) -> Content: ...

    async def update_recent_message_state(self, state: State) -> State: ...

    async def evaluate(self, message: Memory, state: State) -> List[str]: ...
