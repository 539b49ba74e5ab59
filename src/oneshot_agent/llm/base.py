"""Provider-neutral chat types shared by every LLM backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ToolDefinition:
    """A callable tool as advertised to the model (JSON Schema parameters)."""

    name: str
    description: str
    parameters: dict[str, Any]


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMMessage:
    """One turn of a conversation.

    ``role`` is ``system``, ``user``, ``assistant`` or ``tool``. Assistant
    turns that request tools carry ``tool_calls`` as plain dicts
    (``id``/``name``/``arguments``); tool turns answer one call via
    ``tool_call_id``.
    """

    role: str
    content: str = ""
    tool_calls: Optional[list[dict[str, Any]]] = None
    tool_call_id: Optional[str] = None


@dataclass
class LLMResponse:
    content: str = ""
    tool_calls: Optional[list[ToolCall]] = None
    usage: Optional[dict[str, int]] = None
    stop_reason: Optional[str] = None


class BaseLLMProvider(ABC):
    """Common constructor and interface for chat-completion backends."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = 4096,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.max_tokens = max_tokens

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponse:
        """Run one completion, possibly returning tool calls instead of text."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"
