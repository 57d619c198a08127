"""
Token Endpoints

Ownership queries and transfers for minted tokens.
"""

from fastapi import APIRouter, Depends, Path, Query

from objects_api.dependencies.services import get_ownership_service
from objects_api.schemas.mint import (
    ErrorResponse,
    OwnerResponse,
    TransferRequest,
    TransferResponse,
    ValidateOwnerResponse,
)
from objects_api.services.ownership_service import OwnershipService


router = APIRouter()


@router.post(
    "/transfer",
    response_model=TransferResponse,
    summary="Transfer a token",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        500: {"model": ErrorResponse, "description": "Transfer failed (TRANSFER_FAILED)"},
    },
)
async def transfer_token(
    request: TransferRequest,
    service: OwnershipService = Depends(get_ownership_service),
) -> TransferResponse:
    """
    Transfer a token between addresses and wait for confirmation.

    The server account signs the transaction, so it must own the token or be
    an approved operator for `from_address`.
    """
    tx_hash = await service.transfer(request.from_address, request.to_address, request.token_id)
    return TransferResponse(transaction_hash=tx_hash, explorer_url=service.ledger.get_explorer_url(tx_hash))


@router.get(
    "/validate-owner",
    response_model=ValidateOwnerResponse,
    summary="Validate token ownership",
    responses={
        400: {"model": ErrorResponse, "description": "Missing claimant or tokenId"},
        500: {"model": ErrorResponse, "description": "Ledger query failed (LOOKUP_FAILED)"},
    },
)
async def validate_owner(
    claimant: str | None = Query(None, description="Address claiming ownership"),
    token_id: str | None = Query(None, alias="tokenId", description="Token id (decimal string)"),
    service: OwnershipService = Depends(get_ownership_service),
) -> ValidateOwnerResponse:
    """Check whether `claimant` currently owns `tokenId`."""
    is_owner = await service.validate_owner(claimant, token_id)
    return ValidateOwnerResponse(token_id=token_id, claimant=claimant, is_owner=is_owner)


@router.get(
    "/{token_id}/owner",
    response_model=OwnerResponse,
    summary="Get token owner",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid token id"},
        500: {"model": ErrorResponse, "description": "Ledger query failed (LOOKUP_FAILED)"},
    },
)
async def get_owner(
    token_id: str = Path(..., description="Token id (decimal string)"),
    service: OwnershipService = Depends(get_ownership_service),
) -> OwnerResponse:
    """Current owner of a token, read from the ledger."""
    owner = await service.get_owner(token_id)
    return OwnerResponse(token_id=token_id, owner=owner)
