"""
Conversational agent runtime used by the webhook handlers.
"""

from ghagent.runtime.agent import Evaluator, LLMAgentRuntime
from ghagent.runtime.base import (
    AgentRuntime,
    Character,
    Content,
    Memory,
    State,
    compose_context,
    string_to_uuid,
)
from ghagent.runtime.memory import InMemoryMemoryManager, zero_embedding

__all__ = [
    "AgentRuntime",
    "LLMAgentRuntime",
    "Evaluator",
    "Character",
    "Content",
    "Memory",
    "State",
    "compose_context",
    "string_to_uuid",
    "InMemoryMemoryManager",
    "zero_embedding",
]
