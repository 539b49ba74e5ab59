"""OpenAI chat-completions backend (also serves OpenAI-compatible endpoints)."""

from __future__ import annotations

import json
import logging
from typing import Any

import openai

from oneshot_agent.llm.base import (
    BaseLLMProvider,
    LLMMessage,
    LLMResponse,
    ToolCall,
    ToolDefinition,
)

logger = logging.getLogger("oneshot_agent.llm.openai")


def _to_openai_message(msg: LLMMessage) -> dict[str, Any]:
    if msg.role == "tool":
        return {"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id or ""}
    if msg.role == "assistant" and msg.tool_calls:
        return {
            "role": "assistant",
            "content": msg.content or None,
            "tool_calls": [
                {
                    "id": tc["id"],
                    "type": "function",
                    "function": {
                        "name": tc["name"],
                        "arguments": json.dumps(tc.get("arguments") or {}),
                    },
                }
                for tc in msg.tool_calls
            ],
        }
    return {"role": msg.role, "content": msg.content}


def _to_openai_tool(tool: ToolDefinition) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        },
    }


class OpenAIProvider(BaseLLMProvider):
    """Backed by :class:`openai.AsyncOpenAI`; ``base_url`` targets compatible servers."""

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
            client = openai.AsyncOpenAI(**kwargs)
        self._client = client

    @staticmethod
    def parse_response(response: Any) -> LLMResponse:
        choice = response.choices[0]
        message = choice.message

        calls: list[ToolCall] = []
        for tc in message.tool_calls or []:
            try:
                arguments = json.loads(tc.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning("Model sent malformed arguments for %s", tc.function.name)
                arguments = {}
            calls.append(ToolCall(id=tc.id, name=tc.function.name, arguments=arguments))

        usage = None
        if response.usage:
            usage = {
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens,
            }
        return LLMResponse(
            content=message.content or "",
            tool_calls=calls or None,
            usage=usage,
            stop_reason=choice.finish_reason,
        )

    async def complete(
        self,
        messages: list[LLMMessage],
        tools: list[ToolDefinition] | None = None,
    ) -> LLMResponse:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [_to_openai_message(m) for m in messages],
        }
        if tools:
            kwargs["tools"] = [_to_openai_tool(t) for t in tools]

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            logger.error("OpenAI request failed: %s", exc)
            raise
        return self.parse_response(response)
