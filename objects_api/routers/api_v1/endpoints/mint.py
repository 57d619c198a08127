"""
Mint Endpoints

FastAPI endpoints for idempotent object minting.
A token URI is minted at most once; repeated requests return the existing token.
"""

from fastapi import APIRouter, Depends

from objects_api.dependencies.services import get_mint_reconciler
from objects_api.schemas.mint import (
    ErrorResponse,
    MintBatchRequest,
    MintBatchResponse,
    MintRequest,
    MintResponse,
)
from objects_api.services.mint_reconciler import MintReconciler


router = APIRouter()

_MINT_ERRORS = {
    400: {"model": ErrorResponse, "description": "Missing or invalid fields (INVALID_REQUEST)"},
    409: {"model": ErrorResponse, "description": "URI is being minted by another request (MINT_IN_PROGRESS)"},
    500: {
        "model": ErrorResponse,
        "description": "MINT_FAILED (safe to retry), PARTIAL_FAILURE (do not retry) or LOOKUP_FAILED",
    },
}


@router.post(
    "",
    response_model=MintResponse,
    summary="Mint one object",
    description="Mint a token for a metadata URI, or return the existing token if the URI was minted before.",
    responses=_MINT_ERRORS,
)
async def mint_object(
    request: MintRequest,
    reconciler: MintReconciler = Depends(get_mint_reconciler),
) -> MintResponse:
    """
    Mint a single object.

    **Idempotent:** the token URI is the key. A URI that was already minted
    returns `already_minted=true` with its token id and the current owner,
    and no transaction is sent.

    **Partial failure:** when the mint confirmed on-chain but could not be
    recorded, the response is `PARTIAL_FAILURE` with the token id and
    transaction hash. Do not retry; reconcile the registry.
    """
    outcome = await reconciler.mint_one(request.recipient, request.token_uri)
    explorer_url = (
        reconciler.ledger.get_explorer_url(outcome.transaction_hash) if outcome.transaction_hash else None
    )
    return MintResponse.from_outcome(outcome, explorer_url=explorer_url)


@router.post(
    "/batch",
    response_model=MintBatchResponse,
    summary="Mint objects in batch",
    description="Mint every token URI not minted yet in one transaction; report the ones already minted.",
    responses=_MINT_ERRORS,
)
async def mint_batch(
    request: MintBatchRequest,
    reconciler: MintReconciler = Depends(get_mint_reconciler),
) -> MintBatchResponse:
    """
    Mint several objects.

    URIs already in the registry are not sent to the ledger; they come back
    in `already_minted`. New tokens come back in `minted`, in request order.
    When every URI was already minted no transaction is sent.
    """
    result = await reconciler.mint_batch(request.recipient, request.token_uris)
    return MintBatchResponse.from_result(result)
