"""Delegation framework contract addresses.

The framework is deployed with CREATE2, so the same addresses are valid on
every supported chain. Each can be overridden in the ``delegation:`` config
section for private deployments.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_utils import to_checksum_address

from oneshot_agent.config import DelegationConfig

# Delegation Framework v1.3.0
DELEGATION_MANAGER = "0xdb9B1e94B5b69Df7e401DDbedE43491141047dB3"
ALLOWED_TARGETS_ENFORCER = "0x7F20f61b1f09b08D970938F6fa563634d65c4EeB"
ALLOWED_METHODS_ENFORCER = "0x2c21fD0Cb9DC8445CB3fb0DC5E7Bb0Aca01842B5"
TIMESTAMP_ENFORCER = "0x1046bb45C8d673d4ea75321280DB34899413c069"
STATELESS_7702_IMPLEMENTATION = "0x63c0c19a282a1B52b07dD5a65b58948A07DAE32B"


def _checksum(address: str) -> str:
    return to_checksum_address(address.lower())


@dataclass(frozen=True)
class DelegationEnvironment:
    """Addresses a delegation is signed against and enforced by."""

    delegation_manager: str = DELEGATION_MANAGER
    allowed_targets_enforcer: str = ALLOWED_TARGETS_ENFORCER
    allowed_methods_enforcer: str = ALLOWED_METHODS_ENFORCER
    timestamp_enforcer: str = TIMESTAMP_ENFORCER

    def __post_init__(self) -> None:
        for name in (
            "delegation_manager",
            "allowed_targets_enforcer",
            "allowed_methods_enforcer",
            "timestamp_enforcer",
        ):
            object.__setattr__(self, name, _checksum(getattr(self, name)))

    @classmethod
    def from_config(cls, config: DelegationConfig) -> DelegationEnvironment:
        overrides = {k: v for k, v in config.model_dump().items() if v}
        return cls(**overrides)
