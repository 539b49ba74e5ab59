"""Input models for the agent actions.

Field names are exposed in camelCase, which is what the model sees in the
tool schemas and what the 1Shot API expects on the wire.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

_Scalar = Union[str, bool]
_ParamValue = Union[_Scalar, dict[str, _Scalar], list[Union[_Scalar, dict[str, _Scalar]]]]
ContractMethodParams = dict[str, _ParamValue]


class _ActionInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Erc7702Authorization(_ActionInput):
    """A signed EIP-7702 authorization tuple."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    address: str
    nonce: int
    chain_id: int
    signature: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ListChainsInput(_ActionInput):
    page: int = Field(default=1, ge=1, description="Which page to return")
    page_size: int = Field(default=100, ge=1, le=100, description="Number of chains per page")


class ListWalletsInput(_ActionInput):
    chain_id: Optional[int] = Field(default=None, description="Only return wallets on this chain")
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=25, ge=1, le=100)
    name: Optional[str] = Field(default=None, description="Filter by wallet name")


class ListContractMethodsInput(_ActionInput):
    chain_id: Optional[int] = Field(default=None, description="Only return methods on this chain")
    contract_address: Optional[str] = Field(default=None, description="Only return methods on this contract")
    name: Optional[str] = Field(default=None, description="Filter by contract method name")
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=25, ge=1, le=100)
    prompt_id: Optional[str] = Field(default=None, description="Only return methods created from this prompt")


class ListDelegationsInput(_ActionInput):
    wallet_id: str = Field(pattern=UUID_PATTERN, description="The 1Shot Wallet whose delegations to list")
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=25, ge=1, le=100)


class GetWalletInput(_ActionInput):
    wallet_id: str = Field(pattern=UUID_PATTERN, description="The ID of the 1Shot Wallet")
    include_balances: bool = Field(
        default=False, description="Whether to include the wallet's native token balance"
    )


class SearchPromptsInput(_ActionInput):
    query: str = Field(min_length=1, description="Description of the action you want to perform")


class AssureContractMethodsInput(_ActionInput):
    prompt_id: str = Field(description="The ID of the chosen 1Shot Prompt")
    chain_id: int = Field(description="The chain to create the contract methods on")
    wallet_id: Optional[str] = Field(
        default=None,
        pattern=UUID_PATTERN,
        description="The 1Shot Wallet to associate with the contract methods",
    )
    contract_address: Optional[str] = Field(
        default=None, description="Override the contract address from the prompt"
    )


class ExecuteWithLocalWalletInput(_ActionInput):
    """Parameters for encoding a contractMethod and sending it from the local wallet."""

    contract_method_id: str = Field(
        pattern=UUID_PATTERN,
        description="The ID of the contractMethod to encode. Identifies which contractMethod to encode",
    )
    params: ContractMethodParams = Field(description="The parameters to pass to the contractMethod")
    authorization_list: Optional[list[Erc7702Authorization]] = Field(
        default=None,
        description=(
            "A list of authorizations for the contractMethod. If you are using "
            "ERC-7702, you must provide at least one authorization"
        ),
    )
    value: Optional[str] = Field(
        default=None,
        description=(
            "The amount of native token to send along with the contractMethod. This is only "
            "applicable for contractMethods that are payable. Including this value for a "
            "nonpayable method will result in an error"
        ),
    )


class ExecuteWith1ShotWalletInput(_ActionInput):
    """Parameters required to execute a contractMethod through a 1Shot Wallet."""

    contract_method_id: str = Field(
        pattern=UUID_PATTERN,
        description="The ID of the contractMethod to execute. Identifies which contractMethod to run",
    )
    params: ContractMethodParams = Field(description="The parameters to pass to the contractMethod")
    wallet_id: Optional[str] = Field(
        default=None,
        pattern=UUID_PATTERN,
        description=(
            "The ID of the escrow wallet that will execute the contractMethod. If not "
            "provided, the default escrow wallet for the contractMethod will be used"
        ),
    )
    memo: Optional[str] = Field(
        default=None,
        description=(
            "Optional text supplied when the contractMethod is executed. This can be a note "
            "to the user about why the execution was done, or formatted information such as "
            "JSON that can be used by the user's system"
        ),
    )
    authorization_list: Optional[list[Erc7702Authorization]] = Field(
        default=None,
        description=(
            "A list of authorizations for the contractMethod. If you are using "
            "ERC-7702, you must provide at least one authorization"
        ),
    )
    value: Optional[str] = Field(
        default=None,
        description=(
            "The amount of native token to send along with the contractMethod. This is only "
            "applicable for contractMethods that are payable"
        ),
    )
    contract_address: Optional[str] = Field(
        default=None,
        description="The address of the smart contract. Can be overridden for this specific execution",
    )


class ReadContractMethodInput(_ActionInput):
    """Parameters for reading a view or pure contractMethod."""

    contract_method_id: str = Field(
        pattern=UUID_PATTERN,
        description="The ID of the contractMethod to read. Identifies which contractMethod to query",
    )
    params: ContractMethodParams = Field(description="The parameters to pass to the contractMethod")


class DelegateTo1ShotWalletInput(_ActionInput):
    wallet_id: str = Field(pattern=UUID_PATTERN, description="The 1Shot Wallet to delegate to")
    start_time: Optional[int] = Field(
        default=None, ge=0, description="Unix timestamp (seconds) when the delegation becomes valid"
    )
    end_time: Optional[int] = Field(
        default=None, ge=0, description="Unix timestamp (seconds) when the delegation expires"
    )
    contract_addresses: Optional[list[str]] = Field(
        default=None, description="Restrict the delegation to these contract addresses"
    )
    methods: Optional[list[str]] = Field(
        default=None,
        description="Restrict the delegation to these methods, as selectors or signatures like transfer(address,uint256)",
    )


def authorization_wire(items: list[Erc7702Authorization] | None) -> list[dict[str, Any]] | None:
    if items is None:
        return None
    return [item.to_wire() for item in items]
