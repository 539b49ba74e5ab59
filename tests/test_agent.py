"""Tests for the agent host loop, the shared agent accessor, and the LLM adapters."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from oneshot_agent.actions.registry import Action, ActionRegistry, ActionResult
from oneshot_agent.actions.schemas import SearchPromptsInput
from oneshot_agent.agent import session
from oneshot_agent.agent.host import AgentHost
from oneshot_agent.agent.prompts import build_system_prompt
from oneshot_agent.config import AppConfig, LLMConfig, LLMProviderConfig, OneShotConfig, WalletConfig
from oneshot_agent.exceptions import ConfigurationError
from oneshot_agent.llm.anthropic import AnthropicProvider
from oneshot_agent.llm.base import BaseLLMProvider, LLMResponse, ToolCall
from oneshot_agent.llm.openai import OpenAIProvider

from conftest import TEST_PRIVATE_KEY


class ScriptedProvider(BaseLLMProvider):
    def __init__(self, responses):
        super().__init__(api_key="test", model="scripted")
        self.responses = list(responses)
        self.seen = []

    async def complete(self, messages, tools=None):
        self.seen.append((list(messages), tools))
        return self.responses.pop(0)


def _search_registry(calls):
    async def search(args):
        calls.append(args.query)
        return ActionResult.ok([], count=0)

    registry = ActionRegistry()
    registry.register(Action("search-prompts", "Search prompts", SearchPromptsInput, search))
    return registry


def test_tool_call_is_dispatched_and_result_fed_back():
    calls = []
    provider = ScriptedProvider([
        LLMResponse(tool_calls=[ToolCall(id="call-1", name="search-prompts", arguments={"query": "usdc"})]),
        LLMResponse(content="No contracts matched."),
    ])
    host = AgentHost(provider, _search_registry(calls), "system prompt")

    reply = asyncio.run(host.chat("find me a usdc contract"))

    assert reply == "No contracts matched."
    assert calls == ["usdc"]
    tool_msg = host.history()[-2]
    assert tool_msg.role == "tool"
    assert tool_msg.tool_call_id == "call-1"
    assert json.loads(tool_msg.content) == {"success": True, "result": [], "count": 0}
    assert provider.seen[0][1][0].name == "search-prompts"


def test_threads_keep_separate_memory():
    provider = ScriptedProvider([LLMResponse(content="a"), LLMResponse(content="b"), LLMResponse(content="c")])
    host = AgentHost(provider, ActionRegistry(), "sys")

    async def scenario():
        await host.chat("one", thread_id="t1")
        await host.chat("two", thread_id="t2")
        await host.chat("three", thread_id="t1")

    asyncio.run(scenario())

    assert [m.content for m in host.history("t1")] == ["sys", "one", "a", "three", "c"]
    assert [m.content for m in host.history("t2")] == ["sys", "two", "b"]


def test_failed_turn_is_not_committed():
    class Broken(ScriptedProvider):
        async def complete(self, messages, tools=None):
            raise RuntimeError("llm down")

    host = AgentHost(Broken([]), ActionRegistry(), "sys")

    with pytest.raises(RuntimeError):
        asyncio.run(host.chat("hello"))
    assert host.history() == []


def test_least_recently_used_thread_is_forgotten():
    provider = ScriptedProvider([LLMResponse(content=str(i)) for i in range(4)])
    host = AgentHost(provider, ActionRegistry(), "sys", max_threads=2)

    async def scenario():
        await host.chat("one", thread_id="t1")
        await host.chat("two", thread_id="t2")
        await host.chat("again", thread_id="t1")
        await host.chat("three", thread_id="t3")

    asyncio.run(scenario())

    assert host.history("t2") == []
    assert [m.content for m in host.history("t1")] == ["sys", "one", "0", "again", "2"]
    assert [m.content for m in host.history("t3")] == ["sys", "three", "3"]


def test_iteration_limit_stops_loop():
    looping = [LLMResponse(tool_calls=[ToolCall(id=str(i), name="search-prompts", arguments={"query": "q"})]) for i in range(3)]
    host = AgentHost(ScriptedProvider(looping), _search_registry([]), "sys", max_iterations=3)

    reply = asyncio.run(host.chat("loop"))

    assert "could not finish" in reply


def test_system_prompt_names_wallet_and_workflow():
    prompt = build_system_prompt("base-sepolia", 84532, "0xabc")

    assert "chain ID 84532" in prompt
    assert "0xabc" in prompt
    assert "search-prompts" in prompt and "assure-contract-methods" in prompt


# ------------------------------------------------------------------
# get_agent / reset_agent
# ------------------------------------------------------------------


def _config(openai_key="sk-test"):
    return AppConfig(
        oneshot=OneShotConfig(api_key="k", api_secret="s", business_id="b"),
        llm=LLMConfig(openai=LLMProviderConfig(api_key=openai_key, model="gpt-4o-mini")),
        wallet=WalletConfig(chain="base-sepolia", private_key=TEST_PRIVATE_KEY),
    )


def test_get_agent_is_a_lazy_singleton():
    async def scenario():
        first, second = await asyncio.gather(session.get_agent(_config()), session.get_agent(_config()))
        third = await session.get_agent()
        await session.reset_agent()
        fourth = await session.get_agent(_config())
        await session.reset_agent()
        return first, second, third, fourth

    first, second, third, fourth = asyncio.run(scenario())

    assert first is second is third
    assert fourth is not first
    assert len(first.registry) == 11


def test_get_agent_without_llm_key_is_configuration_error():
    async def scenario():
        try:
            await session.get_agent(_config(openai_key=""))
        finally:
            await session.reset_agent()

    with pytest.raises(ConfigurationError):
        asyncio.run(scenario())


# ------------------------------------------------------------------
# Provider response parsing
# ------------------------------------------------------------------


def test_openai_response_parsing():
    call = SimpleNamespace(id="c1", function=SimpleNamespace(name="list-chains", arguments='{"page": 2}'))
    response = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=None, tool_calls=[call]), finish_reason="tool_calls")],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5),
    )

    parsed = OpenAIProvider.parse_response(response)

    assert parsed.tool_calls == [ToolCall(id="c1", name="list-chains", arguments={"page": 2})]
    assert parsed.usage == {"input_tokens": 10, "output_tokens": 5}


def test_anthropic_response_parsing():
    response = SimpleNamespace(
        content=[
            SimpleNamespace(type="text", text="Checking chains."),
            SimpleNamespace(type="tool_use", id="t1", name="list-chains", input={}),
        ],
        usage=SimpleNamespace(input_tokens=3, output_tokens=4),
        stop_reason="tool_use",
    )

    parsed = AnthropicProvider.parse_response(response)

    assert parsed.content == "Checking chains."
    assert parsed.tool_calls[0].name == "list-chains"
    assert parsed.stop_reason == "tool_use"


def test_unexpanded_private_key_disables_local_wallet_only():
    config = _config()
    config.wallet.private_key = "${PRIVATE_KEY}"

    runtime = session.build_runtime(config)
    try:
        assert runtime.signer is None
        assert len(runtime.registry) == 11
    finally:
        asyncio.run(runtime.client.aclose())
