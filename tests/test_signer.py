"""Tests for the local signer's transaction building and receipt handling."""

import json
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3
from web3.datastructures import AttributeDict

from oneshot_agent.actions.registry import ActionResult
from oneshot_agent.exceptions import SignatureRejected
from oneshot_agent.wallet.chains import get_chain
from oneshot_agent.wallet.signer import LocalSigner

from conftest import CONTRACT_ADDRESS

TX_HASH = HexBytes("0x" + "12" * 32)


def _web3(block):
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 3
    w3.eth.get_block.return_value = block
    w3.eth.gas_price = 7
    w3.eth.estimate_gas.return_value = 60000
    w3.eth.send_raw_transaction.return_value = TX_HASH
    return w3


def test_send_transaction_uses_eip1559_fees(account):
    w3 = _web3({"baseFeePerGas": 1_000_000_000})
    signer = LocalSigner(account, get_chain("base-sepolia"), web3=w3)

    tx_hash = signer.send_transaction(CONTRACT_ADDRESS, "0xa9059cbb00", value=16)

    assert tx_hash == TX_HASH.to_0x_hex()
    tx = w3.eth.estimate_gas.call_args.args[0]
    priority = Web3.to_wei(1.5, "gwei")
    assert tx["maxPriorityFeePerGas"] == priority
    assert tx["maxFeePerGas"] == 2_000_000_000 + priority
    assert "gasPrice" not in tx
    assert tx["to"] == Web3.to_checksum_address(CONTRACT_ADDRESS)
    assert tx["nonce"] == 3
    assert tx["chainId"] == 84532

    raw = w3.eth.send_raw_transaction.call_args.args[0]
    assert Account.recover_transaction(raw) == account.address


def test_send_transaction_falls_back_to_gas_price(account):
    w3 = _web3({})
    signer = LocalSigner(account, get_chain("base-sepolia"), web3=w3)

    signer.send_transaction(CONTRACT_ADDRESS, "0xa9059cbb00")

    tx = w3.eth.estimate_gas.call_args.args[0]
    assert tx["gasPrice"] == 7
    assert tx["value"] == 0
    assert "maxFeePerGas" not in tx
    raw = w3.eth.send_raw_transaction.call_args.args[0]
    assert Account.recover_transaction(raw) == account.address


def test_receipt_logs_come_back_as_plain_json(account):
    receipt = AttributeDict({
        "status": 1,
        "transactionHash": TX_HASH,
        "logs": [AttributeDict({
            "address": "0x1111111111111111111111111111111111111111",
            "topics": [HexBytes("0x" + "cd" * 32)],
            "data": HexBytes("0x01"),
        })],
    })
    w3 = MagicMock()
    w3.eth.wait_for_transaction_receipt.return_value = receipt
    signer = LocalSigner(account, get_chain("base-sepolia"), web3=w3)

    envelope = json.loads(ActionResult.ok(signer.wait_for_receipt(TX_HASH.to_0x_hex())).to_json())

    log = envelope["result"]["logs"][0]
    assert log["topics"] == ["0x" + "cd" * 32]
    assert log["data"] == "0x01"
    assert envelope["result"]["transactionHash"] == TX_HASH.to_0x_hex()


def test_malformed_typed_data_is_signature_rejected(signer):
    with pytest.raises(SignatureRejected):
        signer.sign_typed_data({"primaryType": "Delegation"})
