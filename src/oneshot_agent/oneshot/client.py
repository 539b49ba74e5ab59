"""Async client for the 1Shot transaction-execution API.

Uses 1Shot's REST API directly via httpx. Authentication is the OAuth2
client-credentials flow: the API key/secret pair is exchanged for a bearer
token that is cached until shortly before it expires.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from oneshot_agent.exceptions import RemoteServiceError, RemoteStoreError, WalletNotFound
from oneshot_agent.oneshot.models import (
    ChainInfo,
    ContractMethod,
    DelegationRecord,
    PagedResponse,
    Prompt,
    Transaction,
    Wallet,
)

logger = logging.getLogger("oneshot_agent.oneshot.client")

DEFAULT_BASE_URL = "https://api.1shotapi.com/v0"

# Refresh the bearer token this many seconds before it actually expires.
_TOKEN_SKEW_SECONDS = 30


def _clean(params: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


class OneShotClient:
    """Typed entry point to the remote execution service.

    Contract methods are immutable once they exist, so every method this
    client sees (via ``get``, ``list`` or ``assure``) is cached by id and
    later lookups through :meth:`get_contract_method` are served locally.

    Parameters
    ----------
    api_key, api_secret:
        Client credentials issued by 1Shot.
    business_id:
        The business whose wallets and contract methods are listed.
    base_url:
        API root, including the version segment.
    transport:
        Optional httpx transport (used by tests to fake the API).
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        business_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.business_id = business_id
        self._api_key = api_key
        self._api_secret = api_secret
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._methods: dict[str, ContractMethod] = {}

    async def __aenter__(self) -> OneShotClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token
        try:
            resp = await self._http.post(
                "/token",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._api_key,
                    "client_secret": self._api_secret,
                },
            )
        except httpx.HTTPError as exc:
            raise RemoteServiceError(f"1Shot token request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise RemoteServiceError(
                "1Shot authentication failed", resp.status_code, resp.text
            )
        payload = resp.json()
        self._token = payload["access_token"]
        expires_in = float(payload.get("expires_in", 3600))
        self._token_expires_at = time.monotonic() + max(expires_in - _TOKEN_SKEW_SECONDS, 0)
        logger.debug("Obtained 1Shot access token (expires in %ss)", expires_in)
        return self._token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        error_cls: type[RemoteServiceError] = RemoteServiceError,
        not_found_cls: type[RemoteServiceError] | None = None,
    ) -> Any:
        token = await self._access_token()
        try:
            resp = await self._http.request(
                method,
                path,
                params=_clean(params or {}),
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.error("1Shot %s %s failed: %s", method, path, exc)
            raise error_cls(f"1Shot {method} {path} failed: {exc}") from exc

        if resp.status_code == 404 and not_found_cls is not None:
            raise not_found_cls(f"Not found: {path}", resp.status_code, resp.text)
        if resp.status_code >= 400:
            logger.warning("1Shot %s %s -> %s", method, path, resp.status_code)
            raise error_cls(f"1Shot {method} {path} failed", resp.status_code, resp.text)
        if not resp.content:
            return None
        return resp.json()

    def _remember(self, methods: list[ContractMethod]) -> list[ContractMethod]:
        for m in methods:
            self._methods[m.id] = m
        return methods

    # ------------------------------------------------------------------
    # Chains
    # ------------------------------------------------------------------

    async def list_chains(self, page: int = 1, page_size: int = 100) -> PagedResponse[ChainInfo]:
        data = await self._request("GET", "/chains", params={"page": page, "pageSize": page_size})
        return PagedResponse[ChainInfo].model_validate(data)

    # ------------------------------------------------------------------
    # Wallets and delegations
    # ------------------------------------------------------------------

    async def list_wallets(
        self,
        chain_id: int | None = None,
        name: str | None = None,
        page: int = 1,
        page_size: int = 25,
    ) -> PagedResponse[Wallet]:
        data = await self._request(
            "GET",
            f"/business/{self.business_id}/wallets",
            params={"chainId": chain_id, "name": name, "page": page, "pageSize": page_size},
        )
        return PagedResponse[Wallet].model_validate(data)

    async def get_wallet(self, wallet_id: str, include_balances: bool = False) -> Wallet:
        data = await self._request(
            "GET",
            f"/wallets/{wallet_id}",
            params={"includeBalances": "true" if include_balances else None},
            not_found_cls=WalletNotFound,
        )
        return Wallet.model_validate(data)

    async def list_delegations(
        self, wallet_id: str, page: int = 1, page_size: int = 25
    ) -> PagedResponse[DelegationRecord]:
        data = await self._request(
            "GET",
            f"/wallets/{wallet_id}/delegations",
            params={"page": page, "pageSize": page_size},
            not_found_cls=WalletNotFound,
        )
        return PagedResponse[DelegationRecord].model_validate(data)

    async def create_delegation(
        self,
        wallet_id: str,
        delegation_data: str,
        start_time: int | None = None,
        end_time: int | None = None,
        contract_addresses: list[str] | None = None,
    ) -> DelegationRecord:
        body = _clean({
            "delegationData": delegation_data,
            "startTime": start_time,
            "endTime": end_time,
            "contractAddresses": contract_addresses,
        })
        data = await self._request(
            "POST",
            f"/wallets/{wallet_id}/delegations",
            json=body,
            error_cls=RemoteStoreError,
        )
        return DelegationRecord.model_validate(data)

    # ------------------------------------------------------------------
    # Contract methods and prompts
    # ------------------------------------------------------------------

    async def list_contract_methods(
        self,
        chain_id: int | None = None,
        contract_address: str | None = None,
        name: str | None = None,
        prompt_id: str | None = None,
        page: int = 1,
        page_size: int = 25,
    ) -> PagedResponse[ContractMethod]:
        data = await self._request(
            "GET",
            f"/business/{self.business_id}/methods",
            params={
                "chainId": chain_id,
                "contractAddress": contract_address,
                "name": name,
                "promptId": prompt_id,
                "page": page,
                "pageSize": page_size,
            },
        )
        result = PagedResponse[ContractMethod].model_validate(data)
        self._remember(result.response)
        return result

    async def get_contract_method(self, method_id: str, use_cache: bool = True) -> ContractMethod:
        if use_cache and method_id in self._methods:
            return self._methods[method_id]
        data = await self._request("GET", f"/methods/{method_id}")
        method = ContractMethod.model_validate(data)
        self._remember([method])
        return method

    async def search_prompts(self, query: str) -> list[Prompt]:
        data = await self._request("POST", "/prompts/search", json={"query": query})
        return [Prompt.model_validate(p) for p in data or []]

    async def assure_contract_methods(
        self,
        prompt_id: str,
        chain_id: int,
        wallet_id: str | None = None,
        contract_address: str | None = None,
    ) -> list[ContractMethod]:
        """Idempotently create the prompt's contract methods in the business."""
        body = _clean({
            "promptId": prompt_id,
            "chainId": chain_id,
            "walletId": wallet_id,
            "contractAddress": contract_address,
        })
        data = await self._request(
            "POST", f"/business/{self.business_id}/methods/prompt", json=body
        )
        methods = [ContractMethod.model_validate(m) for m in data or []]
        return self._remember(methods)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def encode(
        self,
        method_id: str,
        params: dict[str, Any],
        value: str | None = None,
        authorization_list: list[dict[str, Any]] | None = None,
    ) -> str:
        """Return the hex call-data for invoking *method_id* with *params*."""
        body = _clean({
            "params": params,
            "value": value,
            "authorizationList": authorization_list,
        })
        data = await self._request("POST", f"/methods/{method_id}/encode", json=body)
        return data["data"]

    async def execute(
        self,
        method_id: str,
        params: dict[str, Any],
        wallet_id: str | None = None,
        memo: str | None = None,
        value: str | None = None,
        authorization_list: list[dict[str, Any]] | None = None,
        contract_address: str | None = None,
    ) -> Transaction:
        body = _clean({
            "params": params,
            "walletId": wallet_id,
            "memo": memo,
            "value": value,
            "authorizationList": authorization_list,
            "contractAddress": contract_address,
        })
        data = await self._request("POST", f"/methods/{method_id}/execute", json=body)
        return Transaction.model_validate(data)

    async def read(self, method_id: str, params: dict[str, Any]) -> Any:
        return await self._request("POST", f"/methods/{method_id}/read", json={"params": params})

    async def get_transaction(self, transaction_id: str) -> Transaction:
        data = await self._request("GET", f"/transactions/{transaction_id}")
        return Transaction.model_validate(data)
