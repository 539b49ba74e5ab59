"""Local signing identity: sends transactions and signs typed data."""

from __future__ import annotations

import json
import logging
from typing import Any

from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from oneshot_agent.config import WalletConfig
from oneshot_agent.exceptions import ConfigurationError, SignatureRejected, SigningError
from oneshot_agent.wallet.chains import Chain, get_chain
from oneshot_agent.wallet.keystore import load_account

logger = logging.getLogger("oneshot_agent.wallet.signer")

RECEIPT_TIMEOUT_SECONDS = 120


class LocalSigner:
    """A locally held key bound to one EVM chain.

    Parameters
    ----------
    account:
        The unlocked ``eth_account`` account.
    chain:
        Chain the signer transacts on.
    rpc_url:
        Overrides ``chain.rpc_url``.
    web3:
        Pre-built Web3 instance (tests inject a mock here).
    """

    def __init__(
        self,
        account: LocalAccount,
        chain: Chain,
        rpc_url: str | None = None,
        web3: Web3 | None = None,
    ) -> None:
        self._account = account
        self.chain = chain
        self._rpc_url = rpc_url or chain.rpc_url
        self._w3 = web3

    @classmethod
    def from_config(cls, config: WalletConfig) -> LocalSigner:
        """Unlock the configured key and bind it to the configured chain."""
        try:
            chain = get_chain(config.chain)
        except KeyError as exc:
            raise ConfigurationError(str(exc)) from exc
        return cls(load_account(config), chain, rpc_url=config.rpc_url)

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        return self.chain.chain_id

    def get_web3(self) -> Web3:
        """Return a (cached) Web3 instance for the signer's chain.

        Injects POA middleware for non-mainnet chains.
        """
        if self._w3 is None:
            w3 = Web3(Web3.HTTPProvider(self._rpc_url))
            if not self.chain.is_mainnet:
                w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            self._w3 = w3
        return self._w3

    def send_transaction(self, to: str, data: str, value: int | None = None) -> str:
        """Build, sign, and send a contract call.

        Uses EIP-1559 fee parameters with a legacy gas price fallback.

        Returns the transaction hash as a hex string.
        """
        w3 = self.get_web3()
        tx: dict[str, Any] = {
            "from": self.address,
            "to": Web3.to_checksum_address(to),
            "data": data,
            "value": value or 0,
            "nonce": w3.eth.get_transaction_count(self.address),
            "chainId": self.chain_id,
        }

        try:
            latest = w3.eth.get_block("latest")
            base_fee = latest.get("baseFeePerGas")
            if base_fee is None:
                raise ValueError("No baseFeePerGas")
            max_priority = Web3.to_wei(1.5, "gwei")
            tx["maxFeePerGas"] = base_fee * 2 + max_priority
            tx["maxPriorityFeePerGas"] = max_priority
        except ValueError:
            tx["gasPrice"] = w3.eth.gas_price
        tx["gas"] = w3.eth.estimate_gas(tx)

        try:
            signed = self._account.sign_transaction(tx)
        except Exception as exc:
            raise SigningError(f"Local key refused to sign transaction: {exc}") from exc

        tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hex = HexBytes(tx_hash).to_0x_hex()
        logger.info("Transaction sent from %s to %s: %s", self.address, to, tx_hex)
        return tx_hex

    def wait_for_receipt(self, tx_hash: str, timeout: float = RECEIPT_TIMEOUT_SECONDS) -> dict[str, Any]:
        """Block until *tx_hash* is mined and return its receipt as plain JSON data."""
        w3 = self.get_web3()
        receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        # Web3's encoder flattens AttributeDict logs and HexBytes fields.
        return json.loads(Web3.to_json(receipt))

    def sign_typed_data(self, typed_data: dict[str, Any]) -> str:
        """Sign an EIP-712 message given as a full ``{types, domain, primaryType, message}`` dict."""
        try:
            signable = encode_typed_data(full_message=typed_data)
            signed = self._account.sign_message(signable)
        except Exception as exc:
            raise SignatureRejected(f"Typed-data signing failed: {exc}") from exc
        return HexBytes(signed.signature).to_0x_hex()
