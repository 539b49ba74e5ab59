"""The delegation object and its EIP-712 typed-data form."""

from __future__ import annotations

import json
import secrets
from typing import Any

from eth_utils import to_checksum_address
from pydantic import BaseModel, ConfigDict

from oneshot_agent.delegation.caveats import Caveat

# bytes32 of all ones: a delegation granted directly by the delegator's own authority.
ROOT_AUTHORITY = "0x" + "ff" * 32

EMPTY_SIGNATURE = "0x"

EIP712_TYPES: dict[str, list[dict[str, str]]] = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "Delegation": [
        {"name": "delegate", "type": "address"},
        {"name": "delegator", "type": "address"},
        {"name": "authority", "type": "bytes32"},
        {"name": "caveats", "type": "Caveat[]"},
        {"name": "salt", "type": "uint256"},
    ],
    "Caveat": [
        {"name": "enforcer", "type": "address"},
        {"name": "terms", "type": "bytes"},
    ],
}


class Delegation(BaseModel):
    """A caveat-scoped grant from ``delegator`` to ``delegate``.

    Frozen: the caveat set cannot change after construction, and signing
    produces a new object via :meth:`with_signature`.
    """

    model_config = ConfigDict(frozen=True)

    delegate: str
    delegator: str
    authority: str = ROOT_AUTHORITY
    caveats: tuple[Caveat, ...] = ()
    salt: str
    signature: str = EMPTY_SIGNATURE

    @property
    def is_signed(self) -> bool:
        return self.signature != EMPTY_SIGNATURE

    def with_signature(self, signature: str) -> Delegation:
        return self.model_copy(update={"signature": signature})

    def typed_data(self, chain_id: int, delegation_manager: str) -> dict[str, Any]:
        """Full EIP-712 message for signing against *delegation_manager*."""
        return {
            "types": EIP712_TYPES,
            "primaryType": "Delegation",
            "domain": {
                "name": "DelegationManager",
                "version": "1",
                "chainId": chain_id,
                "verifyingContract": delegation_manager,
            },
            "message": {
                "delegate": self.delegate,
                "delegator": self.delegator,
                "authority": bytes.fromhex(self.authority[2:]),
                "caveats": [
                    {"enforcer": c.enforcer, "terms": c.terms_bytes} for c in self.caveats
                ],
                "salt": int(self.salt, 16),
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"))


def create_delegation(
    from_address: str,
    to_address: str,
    caveats: tuple[Caveat, ...] = (),
    salt: str | None = None,
) -> Delegation:
    """Construct an unsigned root delegation."""
    return Delegation(
        delegator=to_checksum_address(from_address),
        delegate=to_checksum_address(to_address),
        caveats=tuple(caveats),
        salt=salt or "0x" + secrets.token_hex(32),
    )
