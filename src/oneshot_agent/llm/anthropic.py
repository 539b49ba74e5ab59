"""Anthropic Messages API backend."""

from __future__ import annotations

import logging
from typing import Any

import anthropic

from oneshot_agent.llm.base import (
    BaseLLMProvider,
    LLMMessage,
    LLMResponse,
    ToolCall,
    ToolDefinition,
)

logger = logging.getLogger("oneshot_agent.llm.anthropic")


def _split_system(messages: list[LLMMessage]) -> tuple[str, list[LLMMessage]]:
    system = "\n".join(m.content for m in messages if m.role == "system")
    return system, [m for m in messages if m.role != "system"]


def _to_anthropic_message(msg: LLMMessage) -> dict[str, Any]:
    # Tool results go back as user turns holding a tool_result block.
    if msg.role == "tool":
        return {
            "role": "user",
            "content": [
                {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id or "",
                    "content": msg.content,
                }
            ],
        }
    if msg.role == "assistant" and msg.tool_calls:
        blocks: list[dict[str, Any]] = []
        if msg.content:
            blocks.append({"type": "text", "text": msg.content})
        for tc in msg.tool_calls:
            blocks.append({
                "type": "tool_use",
                "id": tc["id"],
                "name": tc["name"],
                "input": tc.get("arguments") or {},
            })
        return {"role": "assistant", "content": blocks}
    return {"role": msg.role, "content": msg.content}


class AnthropicProvider(BaseLLMProvider):
    """Backed by :class:`anthropic.AsyncAnthropic`."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = 4096,
        client: Any = None,
    ):
        super().__init__(api_key=api_key, model=model, base_url=base_url, max_tokens=max_tokens)
        if client is None:
            kwargs: dict[str, Any] = {"api_key": api_key}
            if base_url:
                kwargs["base_url"] = base_url
            client = anthropic.AsyncAnthropic(**kwargs)
        self._client = client

    @staticmethod
    def parse_response(response: Any) -> LLMResponse:
        text: list[str] = []
        calls: list[ToolCall] = []
        for block in response.content:
            if block.type == "text":
                text.append(block.text)
            elif block.type == "tool_use":
                args = block.input if isinstance(block.input, dict) else {}
                calls.append(ToolCall(id=block.id, name=block.name, arguments=args))

        usage = None
        if response.usage:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }
        return LLMResponse(
            content="\n".join(text),
            tool_calls=calls or None,
            usage=usage,
            stop_reason=response.stop_reason,
        )

    async def complete(
        self,
        messages: list[LLMMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponse:
        system, rest = _split_system(messages)
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [_to_anthropic_message(m) for m in rest],
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = [
                {"name": t.name, "description": t.description, "input_schema": t.parameters}
                for t in tools
            ]

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.AnthropicError as exc:
            logger.error("Anthropic request failed: %s", exc)
            raise
        return self.parse_response(response)
