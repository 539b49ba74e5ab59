"""Stateless smart-account view of the local signer.

With EIP-7702 the local EOA itself acts as the delegator account, so no
deployment happens: the smart account has the key's existing address and
signs delegations for the delegation manager on the target chain.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from eth_utils import is_address

from oneshot_agent.delegation.environment import DelegationEnvironment
from oneshot_agent.delegation.models import Delegation
from oneshot_agent.exceptions import SignatureRejected, SigningIdentityUnavailable

logger = logging.getLogger("oneshot_agent.delegation.smart_account")


class TypedDataSigner(Protocol):
    address: str

    def sign_typed_data(self, typed_data: dict[str, Any]) -> str: ...


@dataclass(frozen=True)
class StatelessSmartAccount:
    address: str
    chain_id: int
    environment: DelegationEnvironment
    signer: TypedDataSigner

    def sign_delegation(self, delegation: Delegation) -> str:
        if delegation.delegator != self.address:
            raise SignatureRejected(
                f"Delegation is from {delegation.delegator}, not this account ({self.address})"
            )
        typed = delegation.typed_data(self.chain_id, self.environment.delegation_manager)
        signature = self.signer.sign_typed_data(typed)
        if not signature or signature == "0x":
            raise SignatureRejected("Signer returned an empty signature")
        return signature


def to_smart_account(
    signer: TypedDataSigner | None,
    chain_id: int,
    environment: DelegationEnvironment,
) -> StatelessSmartAccount:
    """Bind *signer* to a stateless smart account on *chain_id*."""
    if signer is None:
        raise SigningIdentityUnavailable("No local signing key is configured")
    address = getattr(signer, "address", None)
    if not address or not is_address(address):
        raise SigningIdentityUnavailable(f"Local signer has no usable address: {address!r}")
    if not callable(getattr(signer, "sign_typed_data", None)):
        raise SigningIdentityUnavailable("Local signer cannot sign typed data")
    if chain_id <= 0:
        raise SigningIdentityUnavailable(f"Invalid chain id for smart account: {chain_id}")
    logger.debug("Using stateless smart account %s on chain %s", address, chain_id)
    return StatelessSmartAccount(
        address=address,
        chain_id=chain_id,
        environment=environment,
        signer=signer,
    )
