"""
LLM-backed agent runtime.

A small conversational runtime: it tracks which users take part in which
rooms, keeps messages in a memory store, composes prompt state from the
character and recent messages, asks the LLM for a response and runs any
registered evaluators afterwards.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Set

from ghagent.llm.model import LLMClient, ModelClass, parse_json_object
from ghagent.runtime.base import Character, Content, Memory, MemoryManager, State, string_to_uuid
from ghagent.runtime.memory import MAX_ROOMS, InMemoryMemoryManager

logger = logging.getLogger(__name__)


class Evaluator(ABC):
    """
    Post-response hook.

    Subclasses override ``validate`` to decide whether they apply to a
    message and ``handler`` to act on it.
    """

    name = "evaluator"

    async def validate(self, runtime: "LLMAgentRuntime", message: Memory, state: State) -> bool:
        return True

    @abstractmethod
    async def handler(self, runtime: "LLMAgentRuntime", message: Memory, state: State) -> None:
        pass


class LLMAgentRuntime:
    """Agent runtime implementation on top of an ``LLMClient``."""

    def __init__(
        self,
        character: Character,
        llm: LLMClient,
        message_manager: Optional[MemoryManager] = None,
        evaluators: Sequence[Evaluator] = (),
        recent_message_count: int = 10,
        max_rooms: int = MAX_ROOMS,
        max_accounts: int = MAX_ROOMS,
    ):
        """
        Args:
            character: Persona the agent speaks as
            llm: Provider client
            message_manager: Memory store (a bounded in-process store when omitted)
            evaluators: Hooks run after each response
            recent_message_count: Messages of a room included in prompt state
            max_rooms: Rooms tracked before the least recently used is dropped
            max_accounts: User accounts tracked, not counting the agent
        """
        self.character = character
        self.llm = llm
        self.message_manager = message_manager or InMemoryMemoryManager(max_rooms=max_rooms)
        self.evaluators = list(evaluators)
        self.recent_message_count = recent_message_count
        self.max_rooms = max_rooms
        self.max_accounts = max_accounts
        self.agent_id = string_to_uuid(character.name)

        self.accounts: "OrderedDict[uuid.UUID, Dict[str, Optional[str]]]" = OrderedDict(
            [(self.agent_id, {"name": character.name, "username": character.name, "source": None})]
        )
        self.participants: "OrderedDict[uuid.UUID, Set[uuid.UUID]]" = OrderedDict()

    async def ensure_connection(
        self,
        user_id: uuid.UUID,
        room_id: uuid.UUID,
        user_name: Optional[str] = None,
        user_screen_name: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        """Register the user account and make both user and agent participants of the room."""
        if user_id not in self.accounts:
            self.accounts[user_id] = {
                "name": user_screen_name or user_name,
                "username": user_name,
                "source": source,
            }
            logger.debug("Account created", extra={"user_id": str(user_id), "source": source})
        self.accounts.move_to_end(user_id)

        room = self.participants.setdefault(room_id, set())
        room.update({user_id, self.agent_id})
        self.participants.move_to_end(room_id)

        while len(self.participants) > self.max_rooms:
            self.participants.popitem(last=False)
        while len(self.accounts) - 1 > self.max_accounts:
            stale = next(key for key in self.accounts if key != self.agent_id)
            del self.accounts[stale]

    def _display_name(self, user_id: uuid.UUID) -> str:
        account = self.accounts.get(user_id) or {}
        return account.get("name") or account.get("username") or "user"

    async def _recent_messages(self, room_id: uuid.UUID) -> List[Memory]:
        return await self.message_manager.get_memories(room_id, count=self.recent_message_count)

    def _format_messages(self, memories: List[Memory]) -> str:
        return "\n".join(
            f"{self._display_name(m.user_id)}: {m.content.text}" for m in memories
        )

    async def compose_state(self, message: Memory, additional_keys: Optional[State] = None) -> State:
        """
        Build the template variables for a message.

        ``additional_keys`` are applied last and override the defaults.
        """
        recent = await self._recent_messages(message.room_id)

        state: State = {
            "agentId": str(self.agent_id),
            "agentName": self.character.name,
            "bio": self.character.render_bio(),
            "lore": "\n".join(self.character.lore),
            "attachments": "",
            "messageDirections": "\n".join(self.character.message_directions),
            "senderName": self._display_name(message.user_id),
            "roomId": message.room_id,
            "recentMessagesData": recent,
            "recentMessages": self._format_messages(recent),
        }
        state.update(additional_keys or {})
        return state

    async def update_recent_message_state(self, state: State) -> State:
        recent = await self._recent_messages(state["roomId"])
        return {
            **state,
            "recentMessagesData": recent,
            "recentMessages": self._format_messages(recent),
        }

    async def generate_response(self, context: str, model_class: ModelClass = ModelClass.MEDIUM) -> Content:
        """
        Ask the LLM for a response to a composed context.

        When the response contains a JSON object its keys become content
        fields; otherwise the raw text is the content.
        """
        text = await self.llm.generate_text(context, model_class=model_class)

        data = parse_json_object(text)
        if data is None:
            logger.debug("Response is not a JSON object")
            return Content(text=text)

        data.setdefault("text", text)
        return Content.model_validate(data)

    async def evaluate(self, message: Memory, state: State) -> List[str]:
        """Run every evaluator whose ``validate`` accepts the message; return their names."""
        ran = []
        for evaluator in self.evaluators:
            if await evaluator.validate(self, message, state):
                await evaluator.handler(self, message, state)
                ran.append(evaluator.name)
        return ran
