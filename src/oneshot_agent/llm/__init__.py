"""LLM provider abstraction: OpenAI, Anthropic, and OpenAI-compatible endpoints."""

from oneshot_agent.llm.base import (
    BaseLLMProvider,
    LLMMessage,
    LLMResponse,
    ToolCall,
    ToolDefinition,
)
from oneshot_agent.llm.router import LLMRouter

__all__ = [
    "BaseLLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMRouter",
    "ToolCall",
    "ToolDefinition",
]
