"""
Metaverse Objects Contract

Async wrapper around the MetaverseObjects ERC-721 contract.
Builds, signs and broadcasts transactions with the chain context's account,
and decodes confirmed receipts into plain event records.
"""

import asyncio
import json
import pathlib
from dataclasses import dataclass, field
from typing import Any

from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted
from web3.logs import DISCARD

from evm_offchain.chain_context import EvmChainContext


DEFAULT_ABI_PATH = pathlib.Path(__file__).parent / "abi" / "MetaverseObjectsABI.json"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
TRANSFER_EVENT = "Transfer"


# ============================================================================
# Exceptions
# ============================================================================


class LedgerError(Exception):
    """Base exception for ledger (contract) failures"""

    pass


class TransactionSubmissionError(LedgerError):
    """Transaction could not be built, signed or broadcast"""

    pass


class ConfirmationTimeoutError(LedgerError):
    """Transaction was broadcast but no receipt arrived in time"""

    def __init__(self, transaction_hash: str, timeout: float):
        super().__init__(f"Transaction {transaction_hash} not confirmed after {timeout}s")
        self.transaction_hash = transaction_hash
        self.timeout = timeout


class TransactionRevertedError(LedgerError):
    """Transaction was mined with a failed status"""

    def __init__(self, transaction_hash: str):
        super().__init__(f"Transaction {transaction_hash} reverted")
        self.transaction_hash = transaction_hash


class LedgerQueryError(LedgerError):
    """Read-only contract call failed"""

    pass


class InvalidAddressError(LedgerError):
    """Address is not a valid EVM address"""

    pass


# ============================================================================
# Receipt types
# ============================================================================


@dataclass(frozen=True)
class LedgerEvent:
    """A decoded contract event, arguments kept in ABI order"""

    name: str
    args: tuple
    log_index: int = 0


@dataclass(frozen=True)
class Receipt:
    """Confirmed transaction receipt"""

    transaction_hash: str
    status: int
    block_number: int | None = None
    events: list[LedgerEvent] = field(default_factory=list)

    def events_named(self, name: str) -> list[LedgerEvent]:
        """Events of one kind, in emission order"""
        return [event for event in self.events if event.name == name]

    def mint_transfers(self) -> list[LedgerEvent]:
        """Transfer events whose source is the zero address (fresh mints), in emission order"""
        return [
            event
            for event in self.events_named(TRANSFER_EVENT)
            if str(event.args[0]).lower() == ZERO_ADDRESS
        ]


class PendingTransaction:
    """A broadcast transaction whose confirmation can be awaited"""

    def __init__(self, contract: "MetaverseObjectsContract", transaction_hash: str, timeout: float):
        self._contract = contract
        self.transaction_hash = transaction_hash
        self.timeout = timeout

    async def wait(self) -> Receipt:
        """
        Wait for the transaction to be mined.

        Returns:
            Decoded Receipt

        Raises:
            ConfirmationTimeoutError: No receipt within the timeout
            TransactionRevertedError: Receipt status is 0
            LedgerError: RPC failure while polling
        """
        return await self._contract.wait_for_receipt(self.transaction_hash, self.timeout)

    def __repr__(self) -> str:
        return f"PendingTransaction({self.transaction_hash})"


# ============================================================================
# Contract wrapper
# ============================================================================


def load_abi(abi_path: str | pathlib.Path | None = None) -> list[dict[str, Any]]:
    """
    Load a contract ABI from a JSON file.

    Accepts either a bare ABI list or a compiler artifact with an "abi" key.

    Args:
        abi_path: Path to the JSON file (defaults to the bundled MetaverseObjects ABI)

    Returns:
        ABI as a list of entries
    """
    path = pathlib.Path(abi_path) if abi_path else DEFAULT_ABI_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data["abi"]
    return data


class MetaverseObjectsContract:
    """Ledger operations on the MetaverseObjects contract"""

    def __init__(
        self,
        chain_context: EvmChainContext,
        contract_address: str,
        abi: list[dict[str, Any]] | None = None,
        confirmation_timeout: float = 120,
        poll_latency: float = 1.0,
    ):
        """
        Initialize contract wrapper

        Args:
            chain_context: EvmChainContext with provider and signing account
            contract_address: Deployed contract address
            abi: Contract ABI (bundled ABI when omitted)
            confirmation_timeout: Seconds to wait for a receipt
            poll_latency: Seconds between receipt polls
        """
        self.chain_context = chain_context
        self.web3: AsyncWeb3 = chain_context.get_web3()
        self.address = chain_context.to_checksum_address(contract_address)
        self.abi = abi if abi is not None else load_abi()
        self.contract = self.web3.eth.contract(address=self.address, abi=self.abi)
        self.confirmation_timeout = confirmation_timeout
        self.poll_latency = poll_latency

        self._event_args = {
            entry["name"]: [arg["name"] for arg in entry["inputs"]]
            for entry in self.abi
            if entry.get("type") == "event"
        }
        # One signer, one nonce sequence
        self._send_lock = asyncio.Lock()

    def _checksum(self, address: str) -> str:
        try:
            return self.chain_context.to_checksum_address(address)
        except (ValueError, TypeError) as e:
            raise InvalidAddressError(f"Invalid address: {address}") from e

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    async def submit_mint(self, recipient: str, token_uri: str, issued_identifier: str) -> PendingTransaction:
        """
        Broadcast mintObject(recipient, token_uri, issued_identifier).

        Returns:
            PendingTransaction for the broadcast transaction
        """
        function = self.contract.functions.mintObject(
            self._checksum(recipient), token_uri, issued_identifier
        )
        return await self._send(function)

    async def submit_batch_mint(
        self, recipient: str, token_uris: list[str], issued_identifiers: list[str]
    ) -> PendingTransaction:
        """
        Broadcast mintBatch(recipient, token_uris, issued_identifiers).

        Returns:
            PendingTransaction for the broadcast transaction
        """
        if len(token_uris) != len(issued_identifiers):
            raise ValueError("token_uris and issued_identifiers must have the same length")

        function = self.contract.functions.mintBatch(
            self._checksum(recipient), list(token_uris), list(issued_identifiers)
        )
        return await self._send(function)

    async def transfer_from(self, from_address: str, to_address: str, token_id: int | str) -> PendingTransaction:
        """
        Broadcast transferFrom(from_address, to_address, token_id).

        The signing account must own the token or be an approved operator.
        """
        function = self.contract.functions.transferFrom(
            self._checksum(from_address),
            self._checksum(to_address),
            int(token_id),
        )
        return await self._send(function)

    async def _send(self, function) -> PendingTransaction:
        account = self.chain_context.get_account()
        try:
            async with self._send_lock:
                nonce = await self.web3.eth.get_transaction_count(account.address, "pending")
                tx = await function.build_transaction(
                    {
                        "from": account.address,
                        "nonce": nonce,
                        "chainId": await self.chain_context.get_chain_id(),
                    }
                )
                signed = account.sign_transaction(tx)
                tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            raise TransactionSubmissionError(f"Failed to submit transaction: {str(e)}") from e

        return PendingTransaction(self, AsyncWeb3.to_hex(tx_hash), self.confirmation_timeout)

    async def wait_for_receipt(self, transaction_hash: str, timeout: float | None = None) -> Receipt:
        """
        Wait for a receipt and decode it.

        Args:
            transaction_hash: 0x-prefixed transaction hash
            timeout: Seconds to wait (defaults to confirmation_timeout)

        Returns:
            Decoded Receipt
        """
        timeout = self.confirmation_timeout if timeout is None else timeout
        try:
            raw_receipt = await self.web3.eth.wait_for_transaction_receipt(
                transaction_hash, timeout=timeout, poll_latency=self.poll_latency
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(transaction_hash, timeout) from e
        except Exception as e:
            raise LedgerError(f"Failed to fetch receipt for {transaction_hash}: {str(e)}") from e

        receipt = self.decode_receipt(raw_receipt)
        if receipt.status != 1:
            raise TransactionRevertedError(receipt.transaction_hash)
        return receipt

    def decode_receipt(self, raw_receipt) -> Receipt:
        """
        Decode every contract event in a raw receipt.

        Logs from other contracts or with unknown signatures are ignored.

        Args:
            raw_receipt: Receipt as returned by web3

        Returns:
            Receipt with events sorted by log index
        """
        events: list[LedgerEvent] = []
        for name, arg_names in self._event_args.items():
            event_type = getattr(self.contract.events, name)()
            for decoded in event_type.process_receipt(raw_receipt, errors=DISCARD):
                if decoded["address"].lower() != self.address.lower():
                    continue
                args = tuple(decoded["args"][arg_name] for arg_name in arg_names)
                events.append(LedgerEvent(name=name, args=args, log_index=decoded["logIndex"]))

        events.sort(key=lambda event: event.log_index)
        return Receipt(
            transaction_hash=AsyncWeb3.to_hex(raw_receipt["transactionHash"]),
            status=raw_receipt["status"],
            block_number=raw_receipt.get("blockNumber"),
            events=events,
        )

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    async def owner_of(self, token_id: int | str) -> str:
        """Current owner address of a token"""
        try:
            return await self.contract.functions.ownerOf(int(token_id)).call()
        except Exception as e:
            raise LedgerQueryError(f"ownerOf({token_id}) failed: {str(e)}") from e

    async def is_owner(self, address: str, token_id: int | str) -> bool:
        """Whether address currently owns the token"""
        checksum_address = self._checksum(address)
        try:
            return await self.contract.functions.isOwner(checksum_address, int(token_id)).call()
        except Exception as e:
            raise LedgerQueryError(f"isOwner({address}, {token_id}) failed: {str(e)}") from e

    def get_explorer_url(self, transaction_hash: str) -> str | None:
        """Explorer link for a transaction, if an explorer is configured"""
        return self.chain_context.get_explorer_url(transaction_hash)
