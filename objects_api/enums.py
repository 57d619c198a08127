"""
Shared Enums

Single source of truth for enums used across database models, API schemas,
and business logic.
"""

from enum import Enum


class MintStatus(str, Enum):
    """
    Registry entry status

    Lifecycle:
    - PENDING: URI reserved by an in-flight mint request, nothing confirmed yet
    - MINTED: Ledger confirmed the mint, token id recorded
    """

    PENDING = "PENDING"
    MINTED = "MINTED"


class ErrorCode(str, Enum):
    """
    Machine-readable error categories returned by the API

    - INVALID_REQUEST: Missing or malformed input, nothing was sent anywhere
    - MINT_FAILED: Ledger rejected or never confirmed the mint, safe to retry
    - PARTIAL_FAILURE: Minted on-chain but not recorded, do NOT retry, reconcile the registry
    - LOOKUP_FAILED: A read against the ledger or registry failed, safe to retry
    - MINT_IN_PROGRESS: Another request holds the reservation for the URI
    - TRANSFER_FAILED: Transfer transaction failed or was not confirmed
    - INTERNAL_ERROR: Anything unexpected
    """

    INVALID_REQUEST = "INVALID_REQUEST"
    MINT_FAILED = "MINT_FAILED"
    PARTIAL_FAILURE = "PARTIAL_FAILURE"
    LOOKUP_FAILED = "LOOKUP_FAILED"
    MINT_IN_PROGRESS = "MINT_IN_PROGRESS"
    TRANSFER_FAILED = "TRANSFER_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
