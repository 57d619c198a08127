"""
Tests for the EVM off-chain library

Receipt decoding, ABI loading, chain context helpers and failure mapping.
No RPC node is contacted: provider calls are replaced with AsyncMock.
"""

import json
from unittest.mock import AsyncMock, Mock

import pytest
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TimeExhausted

from evm_offchain import (
    ZERO_ADDRESS,
    ConfirmationTimeoutError,
    EvmChainContext,
    InvalidAddressError,
    LedgerError,
    LedgerEvent,
    MetaverseObjectsContract,
    PendingTransaction,
    Receipt,
    TransactionRevertedError,
    TransactionSubmissionError,
    load_abi,
)


CONTRACT_ADDRESS = "0x" + "c" * 40
RECIPIENT = "0x" + "1" * 40
OTHER = "0x" + "2" * 40
TX_HASH = "0x" + "ab" * 32

# Well-known throwaway key (hardhat account #0)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


def _address_topic(address: str) -> bytes:
    return bytes(12) + bytes.fromhex(address[2:])


def _uint_topic(value: int) -> bytes:
    return value.to_bytes(32, "big")


def _transfer_log(from_address: str, to_address: str, token_id: int, log_index: int, emitter: str = CONTRACT_ADDRESS):
    return {
        "address": Web3.to_checksum_address(emitter),
        "topics": [
            HexBytes(Web3.keccak(text="Transfer(address,address,uint256)")),
            HexBytes(_address_topic(from_address)),
            HexBytes(_address_topic(to_address)),
            HexBytes(_uint_topic(token_id)),
        ],
        "data": HexBytes(b""),
        "logIndex": log_index,
        "transactionIndex": 0,
        "transactionHash": HexBytes(TX_HASH),
        "blockHash": HexBytes("0x" + "22" * 32),
        "blockNumber": 100,
    }


def _raw_receipt(logs: list[dict], status: int = 1) -> dict:
    return {
        "transactionHash": HexBytes(TX_HASH),
        "status": status,
        "blockNumber": 100,
        "logs": logs,
    }


@pytest.fixture
def chain_context():
    return EvmChainContext(
        rpc_url="http://127.0.0.1:8545",
        private_key=TEST_PRIVATE_KEY,
        chain_id=31337,
        explorer_url="https://sepolia.etherscan.io/",
    )


@pytest.fixture
def contract(chain_context):
    return MetaverseObjectsContract(chain_context, CONTRACT_ADDRESS)


class TestReceipt:
    """Test mint event extraction from decoded receipts"""

    def test_mint_transfers_only_from_zero_address(self):
        receipt = Receipt(
            transaction_hash=TX_HASH,
            status=1,
            events=[
                LedgerEvent("Transfer", (ZERO_ADDRESS, RECIPIENT, 1), 0),
                LedgerEvent("Approval", (RECIPIENT, OTHER, 1), 1),
                LedgerEvent("Transfer", (RECIPIENT, OTHER, 1), 2),
                LedgerEvent("Transfer", (ZERO_ADDRESS, RECIPIENT, 2), 3),
            ],
        )

        assert [event.args[2] for event in receipt.mint_transfers()] == [1, 2]
        assert len(receipt.events_named("Transfer")) == 3

    def test_zero_address_comparison_ignores_case(self):
        receipt = Receipt(
            transaction_hash=TX_HASH,
            status=1,
            events=[LedgerEvent("Transfer", ("0x" + "0" * 40, RECIPIENT, 5))],
        )

        assert len(receipt.mint_transfers()) == 1

    def test_no_events(self):
        assert Receipt(transaction_hash=TX_HASH, status=1).mint_transfers() == []


class TestLoadAbi:
    """Test ABI loading"""

    def test_bundled_abi(self):
        abi = load_abi()
        names = {entry.get("name") for entry in abi}

        assert {"mintObject", "mintBatch", "ownerOf", "isOwner", "transferFrom", "Transfer"} <= names

    def test_artifact_with_abi_key(self, tmp_path):
        artifact = tmp_path / "MetaverseObjects.json"
        artifact.write_text(json.dumps({"contractName": "MetaverseObjects", "abi": load_abi()}))

        assert load_abi(artifact) == load_abi()


class TestEvmChainContext:
    """Test chain context helpers"""

    def test_explorer_url(self, chain_context):
        assert chain_context.get_explorer_url(TX_HASH) == f"https://sepolia.etherscan.io/tx/{TX_HASH}"

    def test_explorer_url_not_configured(self):
        context = EvmChainContext(rpc_url="http://127.0.0.1:8545")
        assert context.get_explorer_url(TX_HASH) is None

    def test_signer_address(self, chain_context):
        assert chain_context.signer_address == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

    def test_missing_private_key(self):
        context = EvmChainContext(rpc_url="http://127.0.0.1:8545")
        with pytest.raises(ValueError):
            context.get_account()

    def test_rpc_url_required(self):
        with pytest.raises(ValueError):
            EvmChainContext(rpc_url="")

    def test_network_info(self, chain_context):
        info = chain_context.get_network_info()

        assert info["chain_id"] == 31337
        assert info["signer"] == chain_context.signer_address


class TestMetaverseObjectsContract:
    """Test receipt decoding and input validation of the contract wrapper"""

    def test_address_is_checksummed(self, contract):
        assert contract.address == Web3.to_checksum_address(CONTRACT_ADDRESS)

    def test_decode_batch_receipt(self, contract):
        raw = _raw_receipt(
            [
                _transfer_log(ZERO_ADDRESS, RECIPIENT, 11, log_index=0),
                _transfer_log(ZERO_ADDRESS, RECIPIENT, 12, log_index=1),
            ]
        )

        receipt = contract.decode_receipt(raw)

        assert receipt.transaction_hash == TX_HASH
        assert receipt.status == 1
        assert receipt.block_number == 100
        assert [event.args[2] for event in receipt.mint_transfers()] == [11, 12]
        assert receipt.mint_transfers()[0].args[1].lower() == RECIPIENT

    def test_decode_ignores_other_emitters(self, contract):
        raw = _raw_receipt(
            [
                _transfer_log(ZERO_ADDRESS, RECIPIENT, 11, log_index=0, emitter="0x" + "d" * 40),
                _transfer_log(ZERO_ADDRESS, RECIPIENT, 12, log_index=1),
            ]
        )

        receipt = contract.decode_receipt(raw)

        assert [event.args[2] for event in receipt.mint_transfers()] == [12]

    def test_decode_keeps_log_order(self, contract):
        raw = _raw_receipt(
            [
                _transfer_log(ZERO_ADDRESS, RECIPIENT, 12, log_index=5),
                _transfer_log(ZERO_ADDRESS, RECIPIENT, 11, log_index=2),
            ]
        )

        receipt = contract.decode_receipt(raw)

        assert [event.log_index for event in receipt.events] == [2, 5]
        assert [event.args[2] for event in receipt.mint_transfers()] == [11, 12]

    @pytest.mark.asyncio
    async def test_invalid_recipient(self, contract):
        with pytest.raises(InvalidAddressError):
            await contract.submit_mint("not-an-address", "ipfs://a", "did:mynft:00")

    @pytest.mark.asyncio
    async def test_batch_length_mismatch(self, contract):
        with pytest.raises(ValueError):
            await contract.submit_batch_mint(RECIPIENT, ["ipfs://a", "ipfs://b"], ["did:mynft:00"])

    def test_explorer_url(self, contract):
        assert contract.get_explorer_url(TX_HASH) == f"https://sepolia.etherscan.io/tx/{TX_HASH}"


def _signable_function():
    """Contract function stand-in whose build_transaction needs no node"""

    async def build_transaction(params):
        return {
            **params,
            "to": Web3.to_checksum_address(CONTRACT_ADDRESS),
            "value": 0,
            "gas": 200000,
            "gasPrice": 10**9,
            "data": "0x",
        }

    function = Mock()
    function.build_transaction = AsyncMock(side_effect=build_transaction)
    return function


class TestSubmission:
    """Test how node failures during submission are reported"""

    @pytest.mark.asyncio
    async def test_broadcast(self, contract, chain_context, monkeypatch):
        monkeypatch.setattr(contract.web3.eth, "get_transaction_count", AsyncMock(return_value=7))
        send = AsyncMock(return_value=HexBytes(TX_HASH))
        monkeypatch.setattr(contract.web3.eth, "send_raw_transaction", send)

        pending = await contract._send(_signable_function())

        assert pending.transaction_hash == TX_HASH
        assert pending.timeout == contract.confirmation_timeout
        send.assert_awaited_once()
        contract.web3.eth.get_transaction_count.assert_awaited_once_with(chain_context.signer_address, "pending")

    @pytest.mark.asyncio
    async def test_broadcast_rejected(self, contract, monkeypatch):
        monkeypatch.setattr(contract.web3.eth, "get_transaction_count", AsyncMock(return_value=7))
        monkeypatch.setattr(
            contract.web3.eth, "send_raw_transaction", AsyncMock(side_effect=ValueError("nonce too low"))
        )

        with pytest.raises(TransactionSubmissionError, match="nonce too low"):
            await contract._send(_signable_function())

    @pytest.mark.asyncio
    async def test_node_unreachable(self, contract, monkeypatch):
        monkeypatch.setattr(
            contract.web3.eth, "get_transaction_count", AsyncMock(side_effect=ConnectionError("refused"))
        )

        with pytest.raises(TransactionSubmissionError):
            await contract.submit_mint(RECIPIENT, "ipfs://a", "did:mynft:00")

    @pytest.mark.asyncio
    async def test_lock_released_after_failure(self, contract, monkeypatch):
        monkeypatch.setattr(
            contract.web3.eth, "get_transaction_count", AsyncMock(side_effect=ConnectionError("refused"))
        )

        with pytest.raises(TransactionSubmissionError):
            await contract._send(_signable_function())

        assert not contract._send_lock.locked()


class TestWaitForReceipt:
    """Test how confirmation outcomes are reported"""

    @pytest.mark.asyncio
    async def test_confirmed(self, contract, monkeypatch):
        raw = _raw_receipt([_transfer_log(ZERO_ADDRESS, RECIPIENT, 3, log_index=0)])
        monkeypatch.setattr(contract.web3.eth, "wait_for_transaction_receipt", AsyncMock(return_value=raw))

        receipt = await contract.wait_for_receipt(TX_HASH)

        assert receipt.status == 1
        assert [event.args[2] for event in receipt.mint_transfers()] == [3]

    @pytest.mark.asyncio
    async def test_timeout(self, contract, monkeypatch):
        monkeypatch.setattr(
            contract.web3.eth, "wait_for_transaction_receipt", AsyncMock(side_effect=TimeExhausted("no receipt"))
        )

        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await contract.wait_for_receipt(TX_HASH, timeout=5)

        assert exc_info.value.transaction_hash == TX_HASH
        assert exc_info.value.timeout == 5

    @pytest.mark.asyncio
    async def test_reverted(self, contract, monkeypatch):
        monkeypatch.setattr(
            contract.web3.eth, "wait_for_transaction_receipt", AsyncMock(return_value=_raw_receipt([], status=0))
        )

        with pytest.raises(TransactionRevertedError) as exc_info:
            await contract.wait_for_receipt(TX_HASH)

        assert exc_info.value.transaction_hash == TX_HASH

    @pytest.mark.asyncio
    async def test_rpc_failure(self, contract, monkeypatch):
        monkeypatch.setattr(
            contract.web3.eth, "wait_for_transaction_receipt", AsyncMock(side_effect=ConnectionError("reset"))
        )

        with pytest.raises(LedgerError) as exc_info:
            await contract.wait_for_receipt(TX_HASH)

        assert not isinstance(exc_info.value, (ConfirmationTimeoutError, TransactionRevertedError))

    @pytest.mark.asyncio
    async def test_pending_transaction_uses_its_timeout(self, contract, monkeypatch):
        wait = AsyncMock(return_value=_raw_receipt([]))
        monkeypatch.setattr(contract.web3.eth, "wait_for_transaction_receipt", wait)

        await PendingTransaction(contract, TX_HASH, timeout=9).wait()

        wait.assert_awaited_once_with(TX_HASH, timeout=9, poll_latency=contract.poll_latency)
