from fastapi import APIRouter

from objects_api.routers.api_v1.endpoints import metrics, mint, nfts, tokens


api_router = APIRouter()

api_router.include_router(mint.router, prefix="/mint", tags=["Mint"])
api_router.include_router(tokens.router, prefix="/tokens", tags=["Tokens"])
api_router.include_router(nfts.router, prefix="/nfts", tags=["Registry"])
api_router.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])
