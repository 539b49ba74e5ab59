"""Scoped, signed delegations from the local key to 1Shot wallets."""

from oneshot_agent.delegation.builder import DelegationBuilder
from oneshot_agent.delegation.caveats import Caveat, CaveatBuilder, build_caveats
from oneshot_agent.delegation.environment import DelegationEnvironment
from oneshot_agent.delegation.models import Delegation, create_delegation
from oneshot_agent.delegation.smart_account import StatelessSmartAccount, to_smart_account

__all__ = [
    "Caveat",
    "CaveatBuilder",
    "Delegation",
    "DelegationBuilder",
    "DelegationEnvironment",
    "StatelessSmartAccount",
    "build_caveats",
    "create_delegation",
    "to_smart_account",
]
