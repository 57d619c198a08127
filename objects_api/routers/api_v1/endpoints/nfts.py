"""
Registry Endpoints

Read access to the mint registry.
"""

from fastapi import APIRouter, Depends

from objects_api.dependencies.services import get_ownership_service
from objects_api.schemas.mint import ErrorResponse, MintedListResponse, MintRecordItem
from objects_api.services.ownership_service import OwnershipService


router = APIRouter()


@router.get(
    "",
    response_model=MintedListResponse,
    summary="List minted objects",
    responses={500: {"model": ErrorResponse, "description": "Registry read failed (LOOKUP_FAILED)"}},
)
async def list_minted(service: OwnershipService = Depends(get_ownership_service)) -> MintedListResponse:
    """Every token URI minted through this API with its token id and DID."""
    records = await service.list_minted()
    return MintedListResponse(total=len(records), nfts=[MintRecordItem.from_record(r) for r in records])
