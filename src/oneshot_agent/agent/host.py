"""Agent host - the tool-calling loop between the LLM and the action registry."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Any

from oneshot_agent.actions.registry import ActionRegistry
from oneshot_agent.llm.base import BaseLLMProvider, LLMMessage

logger = logging.getLogger("oneshot_agent.agent")

DEFAULT_THREAD = "default"
MAX_THREADS = 256


class AgentHost:
    """Runs conversations against one provider and one action registry.

    Each ``thread_id`` keeps its own message history. A turn is only
    committed to the history once it completes, so a provider error never
    leaves a tool call without its result. At most ``max_threads`` threads
    are remembered; the least recently used idle one is dropped first.
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        registry: ActionRegistry,
        system_prompt: str,
        max_iterations: int = 15,
        resources: list[Any] | None = None,
        max_threads: int = MAX_THREADS,
    ):
        self.provider = provider
        self.registry = registry
        self.system_prompt = system_prompt
        self.max_iterations = max_iterations
        self.max_threads = max_threads
        self._threads: dict[str, list[LLMMessage]] = {}
        self._locks: OrderedDict[str, asyncio.Lock] = OrderedDict()
        # Objects with an async aclose(), released by aclose().
        self._resources = resources or []

    def history(self, thread_id: str = DEFAULT_THREAD) -> list[LLMMessage]:
        return list(self._threads.get(thread_id, []))

    def clear(self, thread_id: str = DEFAULT_THREAD) -> None:
        self._threads.pop(thread_id, None)

    def _thread_lock(self, thread_id: str) -> asyncio.Lock:
        lock = self._locks.get(thread_id)
        if lock is None:
            lock = self._locks[thread_id] = asyncio.Lock()
        self._locks.move_to_end(thread_id)

        excess = len(self._locks) - self.max_threads
        for stale in list(self._locks)[:-1]:
            if excess <= 0:
                break
            if self._locks[stale].locked():
                continue
            del self._locks[stale]
            self._threads.pop(stale, None)
            excess -= 1
        return lock

    async def chat(self, message: str, thread_id: str = DEFAULT_THREAD) -> str:
        """Answer *message* in *thread_id*, calling actions as the model asks."""
        lock = self._thread_lock(thread_id)
        async with lock:
            messages = self._threads.get(thread_id) or [
                LLMMessage(role="system", content=self.system_prompt)
            ]
            messages = [*messages, LLMMessage(role="user", content=message)]
            reply = await self._run(messages)
            self._threads[thread_id] = messages
            return reply

    async def _run(self, messages: list[LLMMessage]) -> str:
        tools = self.registry.tool_definitions()
        for iteration in range(self.max_iterations):
            response = await self.provider.complete(messages=messages, tools=tools)

            if not response.tool_calls:
                reply = response.content or "(no response)"
                messages.append(LLMMessage(role="assistant", content=reply))
                return reply

            if response.content:
                logger.info("Agent plan: %s", response.content[:200])
            messages.append(LLMMessage(
                role="assistant",
                content=response.content or "",
                tool_calls=[
                    {"id": tc.id, "name": tc.name, "arguments": tc.arguments}
                    for tc in response.tool_calls
                ],
            ))
            for tc in response.tool_calls:
                logger.info("[%d] calling %s", iteration + 1, tc.name)
                result = await self.registry.invoke(tc.name, tc.arguments)
                messages.append(LLMMessage(role="tool", content=result.to_json(), tool_call_id=tc.id))

        logger.warning("Stopped after %d tool-calling iterations", self.max_iterations)
        reply = "I could not finish this request within the allowed number of steps."
        messages.append(LLMMessage(role="assistant", content=reply))
        return reply

    async def aclose(self) -> None:
        for resource in self._resources:
            await resource.aclose()
        self._resources = []
