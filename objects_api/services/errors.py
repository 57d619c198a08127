"""
Service Errors

Categorized exceptions raised by the mint and ownership services.
Each category carries its API error code, HTTP status and structured details
so callers can tell retry-safe failures from the ones that need reconciliation.
"""

from objects_api.enums import ErrorCode


class MintServiceError(Exception):
    """Base exception for mint service errors"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequestError(MintServiceError):
    """Missing or malformed input, detected before any external call"""

    error_code = ErrorCode.INVALID_REQUEST
    status_code = 400


class MintFailedError(MintServiceError):
    """Ledger rejected, timed out, or confirmed without the expected event; nothing was recorded"""

    error_code = ErrorCode.MINT_FAILED
    status_code = 500


class PartialFailureError(MintServiceError):
    """
    Ledger confirmed the mint but the registry write failed.

    Retrying would mint a second token for the same URI; the details carry
    what an operator needs to repair the registry instead.
    """

    error_code = ErrorCode.PARTIAL_FAILURE
    status_code = 500


class LookupFailedError(MintServiceError):
    """Read against the ledger or the registry failed"""

    error_code = ErrorCode.LOOKUP_FAILED
    status_code = 500


class MintInProgressError(MintServiceError):
    """Another request currently holds the reservation for the token URI"""

    error_code = ErrorCode.MINT_IN_PROGRESS
    status_code = 409


class TransferFailedError(MintServiceError):
    """Transfer transaction failed or was not confirmed"""

    error_code = ErrorCode.TRANSFER_FAILED
    status_code = 500
