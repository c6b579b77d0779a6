"""
LLM integration module.

This module provides:
- LLM client abstraction (Anthropic/OpenAI)
- Structured schemas for LLM outputs
- Prompt templates
"""

from ghagent.llm.model import LLMClient, LLMError, ModelClass, get_llm_client
from ghagent.llm.schemas import LabelDecision

__all__ = [
    "LLMClient",
    "LLMError",
    "ModelClass",
    "get_llm_client",
    "LabelDecision",
]
