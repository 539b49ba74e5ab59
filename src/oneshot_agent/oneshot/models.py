"""Pydantic models for 1Shot API resources.

Field names follow the API's camelCase wire format through aliases; Python
code uses snake_case. Unknown fields are kept so nothing the API returns is
lost when a model is handed back to the agent.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class _ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class StateMutability(str, Enum):
    PURE = "pure"
    VIEW = "view"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"


READ_ONLY = (StateMutability.VIEW.value, StateMutability.PURE.value)
MUTATING = (StateMutability.NONPAYABLE.value, StateMutability.PAYABLE.value)


class TransactionStatus(str, Enum):
    PENDING = "Pending"
    SUBMITTED = "Submitted"
    RETRYING = "Retrying"
    COMPLETED = "Completed"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.COMPLETED, TransactionStatus.FAILED)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class ChainInfo(_ApiModel):
    chain_id: int
    name: str
    type: Optional[str] = None
    average_block_movement_time: Optional[str] = None
    native_currency: Optional[dict[str, Any]] = None


class AccountBalance(_ApiModel):
    balance: str
    chain_id: Optional[int] = None
    decimals: Optional[int] = None


class Wallet(_ApiModel):
    """A custodial EOA held by 1Shot."""

    id: str
    account_address: str
    chain_id: int
    business_id: Optional[str] = None
    name: str = ""
    description: str = ""
    account_balance_details: Optional[AccountBalance] = None


class MethodParam(_ApiModel):
    name: str = ""
    type: str = ""
    index: Optional[int] = None
    description: Optional[str] = None
    type_size: Optional[int] = None
    is_array: bool = False
    type_struct: Optional[dict[str, Any]] = None


class ContractMethod(_ApiModel):
    """A callable smart-contract function registered with 1Shot."""

    id: str
    chain_id: int
    contract_address: str
    function_name: str
    state_mutability: StateMutability
    wallet_id: Optional[str] = None
    name: str = ""
    description: str = ""
    inputs: list[MethodParam] = Field(default_factory=list)
    outputs: list[MethodParam] = Field(default_factory=list)
    prompt_id: Optional[str] = None


class PromptFunction(_ApiModel):
    name: str
    description: str = ""


class Prompt(_ApiModel):
    """A curated description of a smart contract and its useful methods."""

    id: str
    name: str = ""
    description: str = ""
    contract_address: Optional[str] = None
    chain_id: Optional[int] = None
    functions: list[PromptFunction] = Field(default_factory=list)


class Transaction(_ApiModel):
    """The execution record of one contract-method invocation."""

    id: str
    status: TransactionStatus
    contract_method_id: Optional[str] = None
    chain_id: Optional[int] = None
    params: Optional[dict[str, Any]] = None
    memo: Optional[str] = None
    transaction_hash: Optional[str] = None
    failure_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class DelegationRecord(_ApiModel):
    """A delegation as stored by 1Shot."""

    id: str
    wallet_id: str
    delegation_data: str = ""
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    contract_addresses: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)
    created: Optional[int] = None


class PagedResponse(_ApiModel, Generic[T]):
    response: list[T] = Field(default_factory=list)
    page: int = 1
    page_size: int = 25
    total_results: int = 0

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total_results
