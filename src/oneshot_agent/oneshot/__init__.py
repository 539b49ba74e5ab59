"""Client and resource models for the 1Shot execution API."""

from oneshot_agent.oneshot.client import OneShotClient
from oneshot_agent.oneshot.models import (
    ChainInfo,
    ContractMethod,
    DelegationRecord,
    PagedResponse,
    Prompt,
    StateMutability,
    Transaction,
    TransactionStatus,
    Wallet,
)

__all__ = [
    "ChainInfo",
    "ContractMethod",
    "DelegationRecord",
    "OneShotClient",
    "PagedResponse",
    "Prompt",
    "StateMutability",
    "Transaction",
    "TransactionStatus",
    "Wallet",
]
