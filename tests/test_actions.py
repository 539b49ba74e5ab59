"""Tests for the action registry and the 1Shot action set."""

import asyncio
import json

import pytest

from oneshot_agent.actions.provider import build_registry
from oneshot_agent.actions.registry import Action, ActionRegistry, ActionResult
from oneshot_agent.actions.schemas import SearchPromptsInput
from oneshot_agent.delegation.builder import DelegationBuilder
from oneshot_agent.execution.lifecycle import TransactionLifecycle

from conftest import BUSINESS_ID, METHOD_ID, VIEW_METHOD_ID, WALLET_ID, method_json, tx_json, wallet_json

EXPECTED_ACTIONS = {
    "list-chains",
    "list-wallets",
    "list-contract-methods",
    "list-delegations",
    "get-wallet",
    "search-prompts",
    "assure-contract-methods",
    "execute-contract-method-with-local-wallet",
    "execute-contract-method-with-1shot-wallet",
    "read-contract-method",
    "delegate-to-1shot-wallet",
}


async def _no_sleep(_):
    return None


@pytest.fixture
def registry(client, signer):
    lifecycle = TransactionLifecycle(client, signer=signer, sleep=_no_sleep)
    return build_registry(client, lifecycle, DelegationBuilder(client, signer))


def test_all_actions_registered_with_camel_case_schemas(registry):
    assert set(registry.list_names()) == EXPECTED_ACTIONS

    params = registry.get("execute-contract-method-with-1shot-wallet").parameters
    assert {"contractMethodId", "params", "walletId", "memo"} <= set(params["properties"])
    assert set(params["required"]) == {"contractMethodId", "params"}


def test_search_with_no_hits_is_success(api, registry):
    api.add("POST", "/prompts/search", [])

    result = asyncio.run(registry.invoke("search-prompts", {"query": "swap usdc for weth"}))

    assert result.success
    assert result.count == 0
    assert result.result == []
    assert json.loads(result.to_json()) == {"success": True, "result": [], "count": 0}


def test_assure_returns_count_and_same_ids_on_repeat(api, registry):
    api.add("POST", f"/business/{BUSINESS_ID}/methods/prompt", [method_json(), method_json(VIEW_METHOD_ID, "view")])
    args = {"promptId": "usdc", "chainId": 84532}

    first = asyncio.run(registry.invoke("assure-contract-methods", args))
    second = asyncio.run(registry.invoke("assure-contract-methods", args))

    assert first.count == 2
    assert [m["id"] for m in first.result] == [m["id"] for m in second.result]
    assert first.result[0]["stateMutability"] == "nonpayable"


def test_invalid_input_is_validation_error_envelope(api, registry):
    result = asyncio.run(registry.invoke(
        "read-contract-method", {"contractMethodId": "not-a-uuid", "params": {}}
    ))

    assert not result.success
    assert result.error_type == "ValidationError"
    assert api.requests == []


def test_unknown_action(registry):
    result = asyncio.run(registry.invoke("transfer-everything", {}))

    assert not result.success
    assert result.error_type == "UnknownAction"


def test_read_on_mutating_method_is_failure_envelope(api, registry):
    api.add("GET", f"/methods/{METHOD_ID}", method_json())

    result = asyncio.run(registry.invoke(
        "read-contract-method", {"contractMethodId": METHOD_ID, "params": {}}
    ))

    assert not result.success
    assert result.error_type == "StateMutabilityMismatch"


def test_execute_with_1shot_wallet_returns_terminal_transaction(api, registry):
    api.add("GET", f"/methods/{METHOD_ID}", method_json())
    api.add("POST", f"/methods/{METHOD_ID}/execute", tx_json("Pending"))
    api.add("GET", "/transactions/d0000000-0000-4000-8000-000000000005", tx_json("Failed", failureReason="reverted"))

    result = asyncio.run(registry.invoke(
        "execute-contract-method-with-1shot-wallet",
        {"contractMethodId": METHOD_ID, "params": {"amount": "5", "nested": {"ok": True}}, "memo": "m"},
    ))

    assert result.success
    assert result.result["status"] == "Failed"
    assert result.result["failureReason"] == "reverted"


def test_get_wallet_not_found_is_failure_envelope(registry):
    result = asyncio.run(registry.invoke("get-wallet", {"walletId": WALLET_ID}))

    assert not result.success
    assert result.error_type == "WalletNotFound"


def test_delegate_result_uses_envelope(api, registry):
    api.add("GET", f"/wallets/{WALLET_ID}", wallet_json())
    api.add("POST", f"/wallets/{WALLET_ID}/delegations", {"id": "rec-9", "walletId": WALLET_ID})

    result = asyncio.run(registry.invoke("delegate-to-1shot-wallet", {"walletId": WALLET_ID, "endTime": 2000000000}))

    assert result.success
    assert result.result["id"] == "rec-9"


def test_unexpected_exception_becomes_failure_envelope():
    async def explode(args):
        raise RuntimeError("boom")

    registry = ActionRegistry()
    registry.register(Action("search-prompts", "search", SearchPromptsInput, explode))

    result = asyncio.run(registry.invoke("search-prompts", {"query": "x"}))

    assert result == ActionResult(success=False, error="boom", error_type="RuntimeError")


def test_duplicate_registration_is_rejected():
    async def handler(args):
        return ActionResult.ok()

    registry = ActionRegistry()
    registry.register(Action("a", "", SearchPromptsInput, handler))
    with pytest.raises(ValueError):
        registry.register(Action("a", "", SearchPromptsInput, handler))
