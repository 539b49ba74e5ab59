"""Tests for the 1Shot API client."""

import asyncio

import httpx
import pytest

from oneshot_agent.exceptions import RemoteServiceError, RemoteStoreError, WalletNotFound
from oneshot_agent.oneshot.models import StateMutability, TransactionStatus

from conftest import (
    BUSINESS_ID,
    METHOD_ID,
    WALLET_ADDRESS,
    WALLET_ID,
    method_json,
    tx_json,
    wallet_json,
)


def test_list_wallets_sends_filters_and_parses_page(api, client):
    api.add("GET", f"/business/{BUSINESS_ID}/wallets", {
        "response": [wallet_json()],
        "page": 1,
        "pageSize": 25,
        "totalResults": 30,
    })

    page = asyncio.run(client.list_wallets(chain_id=84532))

    assert page.response[0].account_address == WALLET_ADDRESS
    assert page.has_more
    request = api.calls("GET")[0]
    assert request.url.params["chainId"] == "84532"
    assert "name" not in request.url.params
    assert request.headers["Authorization"] == "Bearer test-token"


def test_token_is_cached_between_requests(api, client):
    api.add("GET", "/chains", {"response": [], "page": 1, "pageSize": 100, "totalResults": 0})

    async def scenario():
        await client.list_chains()
        await client.list_chains()

    asyncio.run(scenario())
    assert api.token_requests == 1
    assert len(api.calls("GET", "/chains")) == 2


def test_get_wallet_404_raises_wallet_not_found(api, client):
    with pytest.raises(WalletNotFound):
        asyncio.run(client.get_wallet(WALLET_ID))


def test_server_error_carries_status_and_body(api, client):
    api.add("GET", f"/transactions/{METHOD_ID}", httpx.Response(503, text="upstream down"))

    with pytest.raises(RemoteServiceError) as info:
        asyncio.run(client.get_transaction(METHOD_ID))

    assert info.value.status_code == 503
    assert "upstream down" in str(info.value)


def test_create_delegation_failure_is_remote_store_error(api, client):
    api.add("POST", f"/wallets/{WALLET_ID}/delegations", httpx.Response(500, text="db error"))

    with pytest.raises(RemoteStoreError) as info:
        asyncio.run(client.create_delegation(WALLET_ID, "{}", start_time=1))

    assert info.value.status_code == 500


def test_contract_methods_are_cached_after_assure(api, client):
    api.add("POST", f"/business/{BUSINESS_ID}/methods/prompt", [method_json()])

    async def scenario():
        assured = await client.assure_contract_methods("prompt-1", 84532)
        cached = await client.get_contract_method(METHOD_ID)
        return assured, cached

    assured, cached = asyncio.run(scenario())

    assert cached is assured[0]
    assert cached.state_mutability is StateMutability.NONPAYABLE
    assert api.calls("GET") == []
    body = api.body(api.calls("POST")[0])
    assert body == {"promptId": "prompt-1", "chainId": 84532}


def test_execute_drops_unset_options(api, client):
    api.add("POST", f"/methods/{METHOD_ID}/execute", tx_json("Pending"))

    tx = asyncio.run(client.execute(METHOD_ID, {"to": WALLET_ADDRESS}, memo="pay rent"))

    assert tx.status is TransactionStatus.PENDING
    assert not tx.is_terminal
    assert api.body(api.calls("POST")[0]) == {"params": {"to": WALLET_ADDRESS}, "memo": "pay rent"}
