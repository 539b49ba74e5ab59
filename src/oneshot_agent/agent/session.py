"""Process-wide agent: built lazily on first use, torn down explicitly."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from oneshot_agent.actions.provider import build_registry
from oneshot_agent.actions.registry import ActionRegistry
from oneshot_agent.agent.host import AgentHost
from oneshot_agent.agent.prompts import build_system_prompt
from oneshot_agent.config import AppConfig, resolve_config
from oneshot_agent.delegation.builder import DelegationBuilder
from oneshot_agent.delegation.environment import DelegationEnvironment
from oneshot_agent.exceptions import ConfigurationError
from oneshot_agent.execution.lifecycle import PollingPolicy, TransactionLifecycle
from oneshot_agent.llm.router import LLMRouter
from oneshot_agent.oneshot.client import OneShotClient
from oneshot_agent.wallet.chains import Chain, get_chain
from oneshot_agent.wallet.signer import LocalSigner

logger = logging.getLogger("oneshot_agent.agent.session")

_agent: AgentHost | None = None
_lock: asyncio.Lock | None = None


@dataclass
class Runtime:
    """Everything the actions need, without an LLM attached."""

    chain: Chain
    client: OneShotClient
    signer: LocalSigner | None
    registry: ActionRegistry


def build_runtime(config: AppConfig, require_credentials: bool = True) -> Runtime:
    """Wire client, signer, lifecycle and delegation builder into a registry."""
    if require_credentials:
        config.oneshot.require_credentials()

    try:
        chain = get_chain(config.wallet.chain)
    except KeyError as exc:
        raise ConfigurationError(str(exc)) from exc

    signer = None
    if config.wallet.has_signing_key:
        signer = LocalSigner.from_config(config.wallet)
    else:
        logger.warning("No local wallet key configured; local-wallet actions are disabled")

    client = OneShotClient(
        api_key=config.oneshot.api_key,
        api_secret=config.oneshot.api_secret,
        business_id=config.oneshot.business_id,
        base_url=config.oneshot.base_url,
        timeout=config.oneshot.timeout_seconds,
    )
    lifecycle = TransactionLifecycle(
        client, signer=signer, policy=PollingPolicy.from_config(config.polling)
    )
    delegations = DelegationBuilder(
        client, signer, DelegationEnvironment.from_config(config.delegation)
    )
    registry = build_registry(client, lifecycle, delegations)
    return Runtime(chain=chain, client=client, signer=signer, registry=registry)


def build_agent(config: AppConfig) -> AgentHost:
    """Build the runtime and attach the configured LLM provider."""
    provider = LLMRouter(config.llm).get_provider()
    runtime = build_runtime(config)

    signer = runtime.signer
    prompt = build_system_prompt(
        runtime.chain.name, runtime.chain.chain_id, signer.address if signer else None
    )
    logger.info(
        "Agent ready on %s (chain %s) with %d actions",
        runtime.chain.name,
        runtime.chain.chain_id,
        len(runtime.registry),
    )
    return AgentHost(
        provider,
        runtime.registry,
        prompt,
        max_iterations=config.llm.max_iterations,
        resources=[runtime.client],
    )


async def get_agent(config: AppConfig | None = None) -> AgentHost:
    """Return the shared agent, building it on the first call.

    Concurrent first calls build exactly one agent. *config* only matters on
    the call that builds it.
    """
    global _agent, _lock
    if _agent is not None:
        return _agent
    if _lock is None:
        _lock = asyncio.Lock()
    async with _lock:
        if _agent is None:
            _agent = build_agent(config or resolve_config())
    return _agent


async def reset_agent() -> None:
    """Close and forget the shared agent (the next get_agent() rebuilds it)."""
    global _agent, _lock
    agent, _agent, _lock = _agent, None, None
    if agent is not None:
        await agent.aclose()
