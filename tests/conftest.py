"""Shared fixtures: a scripted 1Shot API behind httpx.MockTransport and a throwaway key."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from eth_account import Account

from oneshot_agent.oneshot.client import OneShotClient
from oneshot_agent.wallet.chains import get_chain
from oneshot_agent.wallet.signer import LocalSigner

BASE_URL = "https://api.test/v0"
BUSINESS_ID = "b0000000-0000-4000-8000-000000000001"
WALLET_ID = "a0000000-0000-4000-8000-000000000002"
METHOD_ID = "c0000000-0000-4000-8000-000000000003"
VIEW_METHOD_ID = "c0000000-0000-4000-8000-000000000004"
TX_ID = "d0000000-0000-4000-8000-000000000005"

WALLET_ADDRESS = "0x1111111111111111111111111111111111111111"
CONTRACT_ADDRESS = "0x036cbd53842c5426634e7929541ec2318f3dcf7e"

# Well-known test key; never holds funds.
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


class FakeOneShotAPI:
    """Routes (method, path) to scripted responses and records every API call.

    Token requests are answered automatically and are not recorded. A route
    given several responses returns them in order and then keeps repeating
    the last one.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.requests: list[httpx.Request] = []
        self.token_requests = 0

    def add(self, method: str, path: str, *responses: Any) -> FakeOneShotAPI:
        self.routes[(method, path)] = list(responses)
        return self

    def calls(self, method: str | None = None, path: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or _path(r) == path)
        ]

    def body(self, request: httpx.Request) -> Any:
        return json.loads(request.content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = _path(request)
        if path == "/token":
            self.token_requests += 1
            return httpx.Response(200, json={"access_token": "test-token", "expires_in": 3600})

        self.requests.append(request)
        queue = self.routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"error": f"no route for {request.method} {path}"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(item):
            return item(request)
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _path(request: httpx.Request) -> str:
    return request.url.path.removeprefix("/v0")


def wallet_json(wallet_id: str = WALLET_ID, address: str = WALLET_ADDRESS, chain_id: int = 84532) -> dict:
    return {
        "id": wallet_id,
        "accountAddress": address,
        "chainId": chain_id,
        "businessId": BUSINESS_ID,
        "name": "Escrow",
        "description": "",
    }


def method_json(
    method_id: str = METHOD_ID,
    state_mutability: str = "nonpayable",
    function_name: str = "transfer",
) -> dict:
    return {
        "id": method_id,
        "chainId": 84532,
        "contractAddress": CONTRACT_ADDRESS,
        "functionName": function_name,
        "stateMutability": state_mutability,
        "walletId": WALLET_ID,
        "name": f"USDC {function_name}",
        "description": "",
        "inputs": [],
        "outputs": [],
    }


def tx_json(status: str, tx_id: str = TX_ID, **extra: Any) -> dict:
    return {"id": tx_id, "status": status, "contractMethodId": METHOD_ID, "chainId": 84532, **extra}


@pytest.fixture
def api() -> FakeOneShotAPI:
    return FakeOneShotAPI()


@pytest.fixture
def client(api: FakeOneShotAPI) -> OneShotClient:
    return OneShotClient(
        api_key="key",
        api_secret="secret",
        business_id=BUSINESS_ID,
        base_url=BASE_URL,
        transport=api.transport(),
    )


@pytest.fixture
def account():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def signer(account) -> LocalSigner:
    return LocalSigner(account, get_chain("base-sepolia"))
