"""
EVM Core Library

Ledger client for the MetaverseObjects contract, separated from the API layer.
Contains chain context setup, transaction submission and receipt decoding.
"""

from .chain_context import EvmChainContext
from .contracts import (
    ZERO_ADDRESS,
    ConfirmationTimeoutError,
    InvalidAddressError,
    LedgerError,
    LedgerEvent,
    LedgerQueryError,
    MetaverseObjectsContract,
    PendingTransaction,
    Receipt,
    TransactionRevertedError,
    TransactionSubmissionError,
    load_abi,
)


__all__ = [
    "EvmChainContext",
    "MetaverseObjectsContract",
    "PendingTransaction",
    "Receipt",
    "LedgerEvent",
    "LedgerError",
    "LedgerQueryError",
    "InvalidAddressError",
    "TransactionSubmissionError",
    "ConfirmationTimeoutError",
    "TransactionRevertedError",
    "ZERO_ADDRESS",
    "load_abi",
]
