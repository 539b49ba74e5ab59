"""Build, sign, and store delegations to 1Shot custodial wallets."""

from __future__ import annotations

import logging

from oneshot_agent.delegation.caveats import build_caveats
from oneshot_agent.delegation.environment import DelegationEnvironment
from oneshot_agent.delegation.models import Delegation, create_delegation
from oneshot_agent.delegation.smart_account import TypedDataSigner, to_smart_account
from oneshot_agent.oneshot.client import OneShotClient
from oneshot_agent.oneshot.models import DelegationRecord

logger = logging.getLogger("oneshot_agent.delegation")


class DelegationBuilder:
    """Grants a 1Shot wallet scoped permission to act through the local key.

    Nothing here is retried: wallet lookup, signing, and remote storage
    failures all propagate as their own exception types.
    """

    def __init__(
        self,
        client: OneShotClient,
        signer: TypedDataSigner | None,
        environment: DelegationEnvironment | None = None,
    ) -> None:
        self.client = client
        self.signer = signer
        self.environment = environment or DelegationEnvironment()

    async def prepare(
        self,
        wallet_id: str,
        start_time: int | None = None,
        end_time: int | None = None,
        contract_addresses: list[str] | None = None,
        methods: list[str] | None = None,
        salt: str | None = None,
    ) -> Delegation:
        """Resolve the wallet, build the caveats, and return a signed delegation."""
        wallet = await self.client.get_wallet(wallet_id)
        account = to_smart_account(self.signer, wallet.chain_id, self.environment)

        caveats = build_caveats(
            account.environment,
            contract_addresses=contract_addresses,
            methods=methods,
            start_time=start_time,
            end_time=end_time,
        )
        delegation = create_delegation(
            from_address=account.address,
            to_address=wallet.account_address,
            caveats=caveats,
            salt=salt,
        )
        signed = delegation.with_signature(account.sign_delegation(delegation))
        logger.info(
            "Signed delegation %s -> %s with %d caveat(s)",
            signed.delegator,
            signed.delegate,
            len(signed.caveats),
        )
        return signed

    async def delegate(
        self,
        wallet_id: str,
        start_time: int | None = None,
        end_time: int | None = None,
        contract_addresses: list[str] | None = None,
        methods: list[str] | None = None,
    ) -> DelegationRecord:
        """Sign a delegation to *wallet_id* and have 1Shot store it."""
        signed = await self.prepare(
            wallet_id,
            start_time=start_time,
            end_time=end_time,
            contract_addresses=contract_addresses,
            methods=methods,
        )
        return await self.client.create_delegation(
            wallet_id,
            signed.to_json(),
            start_time=start_time,
            end_time=end_time,
            contract_addresses=contract_addresses,
        )
