"""The 1Shot action set: builds the registry the agent host talks to."""

from __future__ import annotations

import logging

from oneshot_agent.actions.registry import Action, ActionRegistry, ActionResult
from oneshot_agent.actions.schemas import (
    AssureContractMethodsInput,
    DelegateTo1ShotWalletInput,
    ExecuteWith1ShotWalletInput,
    ExecuteWithLocalWalletInput,
    GetWalletInput,
    ListChainsInput,
    ListContractMethodsInput,
    ListDelegationsInput,
    ListWalletsInput,
    ReadContractMethodInput,
    SearchPromptsInput,
    authorization_wire,
)
from oneshot_agent.delegation.builder import DelegationBuilder
from oneshot_agent.execution.lifecycle import TransactionLifecycle
from oneshot_agent.oneshot.client import OneShotClient

logger = logging.getLogger("oneshot_agent.actions.provider")


class OneShotActions:
    """Handlers for every action, bound to one client, lifecycle and builder."""

    def __init__(
        self,
        client: OneShotClient,
        lifecycle: TransactionLifecycle,
        delegations: DelegationBuilder,
    ) -> None:
        self.client = client
        self.lifecycle = lifecycle
        self.delegations = delegations

    async def list_chains(self, args: ListChainsInput) -> ActionResult:
        page = await self.client.list_chains(page=args.page, page_size=args.page_size)
        return ActionResult.ok(page)

    async def list_wallets(self, args: ListWalletsInput) -> ActionResult:
        page = await self.client.list_wallets(
            chain_id=args.chain_id, name=args.name, page=args.page, page_size=args.page_size
        )
        return ActionResult.ok(page)

    async def list_contract_methods(self, args: ListContractMethodsInput) -> ActionResult:
        page = await self.client.list_contract_methods(
            chain_id=args.chain_id,
            contract_address=args.contract_address,
            name=args.name,
            prompt_id=args.prompt_id,
            page=args.page,
            page_size=args.page_size,
        )
        return ActionResult.ok(page)

    async def list_delegations(self, args: ListDelegationsInput) -> ActionResult:
        page = await self.client.list_delegations(
            args.wallet_id, page=args.page, page_size=args.page_size
        )
        return ActionResult.ok(page)

    async def get_wallet(self, args: GetWalletInput) -> ActionResult:
        wallet = await self.client.get_wallet(args.wallet_id, include_balances=args.include_balances)
        return ActionResult.ok(wallet)

    async def search_prompts(self, args: SearchPromptsInput) -> ActionResult:
        prompts = await self.client.search_prompts(args.query)
        return ActionResult.ok(prompts, count=len(prompts))

    async def assure_contract_methods(self, args: AssureContractMethodsInput) -> ActionResult:
        methods = await self.client.assure_contract_methods(
            args.prompt_id,
            args.chain_id,
            wallet_id=args.wallet_id,
            contract_address=args.contract_address,
        )
        return ActionResult.ok(methods, count=len(methods))

    async def execute_with_local_wallet(self, args: ExecuteWithLocalWalletInput) -> ActionResult:
        receipt = await self.lifecycle.execute_with_local_wallet(
            args.contract_method_id,
            args.params,
            value=args.value,
            authorization_list=authorization_wire(args.authorization_list),
        )
        return ActionResult.ok(receipt)

    async def execute_with_1shot_wallet(self, args: ExecuteWith1ShotWalletInput) -> ActionResult:
        tx = await self.lifecycle.execute_with_remote_wallet(
            args.contract_method_id,
            args.params,
            wallet_id=args.wallet_id,
            memo=args.memo,
            value=args.value,
            authorization_list=authorization_wire(args.authorization_list),
            contract_address=args.contract_address,
        )
        return ActionResult.ok(tx)

    async def read_contract_method(self, args: ReadContractMethodInput) -> ActionResult:
        value = await self.lifecycle.read(args.contract_method_id, args.params)
        return ActionResult.ok(value)

    async def delegate_to_1shot_wallet(self, args: DelegateTo1ShotWalletInput) -> ActionResult:
        record = await self.delegations.delegate(
            args.wallet_id,
            start_time=args.start_time,
            end_time=args.end_time,
            contract_addresses=args.contract_addresses,
            methods=args.methods,
        )
        return ActionResult.ok(record)


def build_registry(
    client: OneShotClient,
    lifecycle: TransactionLifecycle,
    delegations: DelegationBuilder,
) -> ActionRegistry:
    """Register every 1Shot action and return the populated registry."""
    h = OneShotActions(client, lifecycle, delegations)
    registry = ActionRegistry()

    registry.register(Action(
        name="list-chains",
        description=(
            "Returns a paged list of the chains that are supported by 1Shot API. "
            "The page size is 100 and the page is 1 by default and should list all chains."
        ),
        input_model=ListChainsInput,
        handler=h.list_chains,
    ))
    registry.register(Action(
        name="list-wallets",
        description=(
            "Returns a filtered, paged list of the Wallets in the user's 1Shot business. "
            "Wallets are custodial EOAs controlled by 1Shot. All Contract Methods are associated "
            "with a Wallet. Only provide a chainId as a filter unless you know for sure a specific "
            "value for the other filters. This is a paged list, so if you do not find the Wallet "
            "you are looking for but there are more pages, use the tool again."
        ),
        input_model=ListWalletsInput,
        handler=h.list_wallets,
    ))
    registry.register(Action(
        name="list-contract-methods",
        description=(
            "Returns a filtered, paged list of the Contract Methods in the user's 1Shot business. "
            "Contract Methods are functions on the underlying smart contract that can be executed "
            "or manipulated via 1Shot. Only provide a chainId or contractAddress as a filter unless "
            "you know for sure a specific value for the other filters. This is a paged list, so if "
            "you do not find the Contract Method you are looking for but there are more pages, use "
            "the tool again."
        ),
        input_model=ListContractMethodsInput,
        handler=h.list_contract_methods,
    ))
    registry.register(Action(
        name="list-delegations",
        description=(
            "Returns a paged list of the Delegations granted to a 1Shot Wallet. Delegations "
            "represent permissions granted to a 1Shot Wallet, enabling it to use the local "
            "wallet's funds."
        ),
        input_model=ListDelegationsInput,
        handler=h.list_delegations,
    ))
    registry.register(Action(
        name="get-wallet",
        description=(
            "Returns a single 1Shot Wallet object, optionally including the balance of native "
            "token held by the Wallet. 1Shot Wallets are custodial EOAs controlled by 1Shot, and "
            "may be used to execute Contract Methods via 1Shot."
        ),
        input_model=GetWalletInput,
        handler=h.get_wallet,
    ))
    registry.register(Action(
        name="search-prompts",
        description=(
            "Search 1Shot Prompts to find Smart Contracts that will fulfill the user's request. "
            "A 1Shot Prompt contains information about the smart contract, including which methods "
            "are important and how to properly use the contract. Once you have chosen a Prompt to "
            "use, be sure to call the assure-contract-methods action to ensure that all the "
            "Contract Methods in the prompt are available."
        ),
        input_model=SearchPromptsInput,
        handler=h.search_prompts,
    ))
    registry.register(Action(
        name="assure-contract-methods",
        description=(
            "Given a selected 1Shot Prompt Id, this assures that all the Contract Methods in the "
            "prompt are available, creating them if required. It returns a list of the contract "
            "methods for the prompt. You do not need to call list-contract-methods after calling "
            "this action. You do need to call list-wallets to get the walletId of the 1Shot Wallet "
            "to use for the Contract Methods."
        ),
        input_model=AssureContractMethodsInput,
        handler=h.assure_contract_methods,
    ))
    registry.register(Action(
        name="execute-contract-method-with-local-wallet",
        description=(
            "This method will submit a transaction to the blockchain using the local wallet. The "
            "transaction will use 1Shot to verify the parameters are correct, but it will not be "
            "executed via 1Shot API's infrastructure. The \"params\" object is the parameters for "
            "the contract method, which may be nested. Only use this action if the contract "
            "method's stateMutability is \"nonpayable\" or \"payable\". Do not provide a value for "
            "the authorizationList parameter. Do not provide a value parameter unless the contract "
            "method is payable."
        ),
        input_model=ExecuteWithLocalWalletInput,
        handler=h.execute_with_local_wallet,
    ))
    registry.register(Action(
        name="execute-contract-method-with-1shot-wallet",
        description=(
            "This method will execute a Contract Method using its associated 1Shot Wallet. It will "
            "poll the Transaction's status until it is either completed or failed and return the "
            "final Transaction object. Only use this action if the contract method's "
            "stateMutability is \"nonpayable\" or \"payable\". Always provide a memo parameter, but "
            "do not provide any other optional parameters unless they are specifically needed. "
            "Specifically, do not provide a value for the authorizationList parameter."
        ),
        input_model=ExecuteWith1ShotWalletInput,
        handler=h.execute_with_1shot_wallet,
    ))
    registry.register(Action(
        name="read-contract-method",
        description=(
            "This will return the value of a Contract Method by reading the blockchain. You can "
            "only use this with Contract Methods whose stateMutability is either \"view\" or \"pure\"."
        ),
        input_model=ReadContractMethodInput,
        handler=h.read_contract_method,
    ))
    registry.register(Action(
        name="delegate-to-1shot-wallet",
        description=(
            "This method will have the local wallet sign an ERC-7710 Delegation to a 1Shot Wallet. "
            "This will allow the 1Shot Wallet to execute Contract Methods using funds in the local "
            "wallet, without giving the 1Shot Wallet access to the local wallet's private key."
        ),
        input_model=DelegateTo1ShotWalletInput,
        handler=h.delegate_to_1shot_wallet,
    ))

    logger.debug("Registered %d actions", len(registry))
    return registry
