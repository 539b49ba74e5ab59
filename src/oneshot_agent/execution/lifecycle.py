"""Transaction lifecycle: drive a contract-method call to a terminal outcome.

Two submission paths end in the same place:

* **local wallet** - the call data is encoded by 1Shot, then the local
  signer submits it and blocks until the receipt is available;
* **1Shot wallet** - 1Shot executes the call with a custodial wallet and the
  returned Transaction is polled until it is ``Completed`` or ``Failed``.

Reads of ``view``/``pure`` methods are a single remote call and never poll.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

from oneshot_agent.config import PollingConfig
from oneshot_agent.exceptions import (
    ActionValidationError,
    ConfigurationError,
    PollingCancelled,
    PollingExhausted,
    StateMutabilityMismatch,
)
from oneshot_agent.oneshot.client import OneShotClient
from oneshot_agent.oneshot.models import MUTATING, READ_ONLY, ContractMethod, Transaction

logger = logging.getLogger("oneshot_agent.execution")

Sleep = Callable[[float], Awaitable[Any]]


class TransactionSigner(Protocol):
    """What the local-wallet path needs from a signing identity."""

    address: str

    def send_transaction(self, to: str, data: str, value: int | None = None) -> str: ...

    def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]: ...


@dataclass(frozen=True)
class PollingPolicy:
    """How long to wait for a remotely executed transaction.

    ``max_attempts`` counts status re-fetches; ``0`` disables a bound.
    """

    interval: float = 2.0
    max_attempts: int = 150
    max_elapsed: float = 0.0

    @classmethod
    def from_config(cls, config: PollingConfig) -> PollingPolicy:
        return cls(
            interval=config.interval_seconds,
            max_attempts=config.max_attempts,
            max_elapsed=config.max_elapsed_seconds,
        )


async def wait_for_terminal(
    fetch: Callable[[str], Awaitable[Transaction]],
    tx: Transaction,
    policy: PollingPolicy = PollingPolicy(),
    cancel: asyncio.Event | None = None,
    sleep: Sleep = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Transaction:
    """Poll *tx* until its status is terminal.

    Stops at the first terminal status it sees, so a terminal Transaction is
    never re-fetched. ``Failed`` is returned, not raised.

    Raises
    ------
    PollingExhausted
        The attempt or elapsed-time bound was reached first.
    PollingCancelled
        *cancel* was set before a terminal status was observed.
    """
    started = clock()
    attempts = 0
    while not tx.is_terminal:
        if policy.max_attempts and attempts >= policy.max_attempts:
            raise PollingExhausted(
                f"Transaction {tx.id} still '{tx.status.value}' after {attempts} status checks",
                transaction_id=tx.id,
                last_status=tx.status.value,
            )
        if policy.max_elapsed and clock() - started >= policy.max_elapsed:
            raise PollingExhausted(
                f"Transaction {tx.id} still '{tx.status.value}' after {policy.max_elapsed:.0f}s",
                transaction_id=tx.id,
                last_status=tx.status.value,
            )
        if cancel is not None and cancel.is_set():
            raise PollingCancelled(
                f"Stopped waiting for transaction {tx.id}",
                transaction_id=tx.id,
                last_status=tx.status.value,
            )

        await sleep(policy.interval)
        tx = await fetch(tx.id)
        attempts += 1
        logger.debug("Transaction %s status: %s (check %d)", tx.id, tx.status.value, attempts)

    return tx


def _parse_value(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value, 0)
    except ValueError as exc:
        raise ActionValidationError(f"value must be an integer amount in wei, got {value!r}") from exc


class TransactionLifecycle:
    """Submits contract-method calls and waits for them to finish.

    Parameters
    ----------
    client:
        The 1Shot API client.
    signer:
        Local signing identity; only needed for the local-wallet path.
    policy:
        Polling bounds for the 1Shot-wallet path.
    sleep:
        Awaitable used between status checks (tests pass a recorder).
    """

    def __init__(
        self,
        client: OneShotClient,
        signer: TransactionSigner | None = None,
        policy: PollingPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.signer = signer
        self.policy = policy or PollingPolicy()
        self._sleep = sleep

    async def _require(self, method_id: str, allowed: tuple[str, ...]) -> ContractMethod:
        method = await self.client.get_contract_method(method_id)
        if method.state_mutability.value not in allowed:
            raise StateMutabilityMismatch(method_id, method.state_mutability.value, allowed)
        return method

    async def execute_with_local_wallet(
        self,
        method_id: str,
        params: dict[str, Any],
        value: str | None = None,
        authorization_list: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Encode via 1Shot, submit with the local key, and return the receipt."""
        if self.signer is None:
            raise ConfigurationError("No local wallet configured for direct execution")
        method = await self._require(method_id, MUTATING)
        wei = _parse_value(value)

        call_data = await self.client.encode(
            method_id, params, value=value, authorization_list=authorization_list
        )
        logger.debug("Encoded %s.%s: %s", method.contract_address, method.function_name, call_data)

        # web3 calls block; keep them off the event loop.
        tx_hash = await asyncio.to_thread(
            self.signer.send_transaction, method.contract_address, call_data, value=wei
        )
        receipt = await asyncio.to_thread(self.signer.wait_for_receipt, tx_hash)
        logger.info("Local-wallet execution of %s mined: %s", method_id, tx_hash)
        return receipt

    async def execute_with_remote_wallet(
        self,
        method_id: str,
        params: dict[str, Any],
        wallet_id: str | None = None,
        memo: str | None = None,
        value: str | None = None,
        authorization_list: list[dict[str, Any]] | None = None,
        contract_address: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Transaction:
        """Execute through a 1Shot wallet and return the terminal Transaction."""
        await self._require(method_id, MUTATING)
        _parse_value(value)

        tx = await self.client.execute(
            method_id,
            params,
            wallet_id=wallet_id,
            memo=memo,
            value=value,
            authorization_list=authorization_list,
            contract_address=contract_address,
        )
        logger.info("1Shot accepted execution of %s as transaction %s (%s)", method_id, tx.id, tx.status.value)

        final = await wait_for_terminal(
            self.client.get_transaction,
            tx,
            policy=self.policy,
            cancel=cancel,
            sleep=self._sleep,
        )
        logger.info("Transaction %s finished: %s", final.id, final.status.value)
        return final

    async def read(self, method_id: str, params: dict[str, Any]) -> Any:
        """Read a ``view``/``pure`` method; one remote call once the method is known."""
        await self._require(method_id, READ_ONLY)
        return await self.client.read(method_id, params)
