"""
Service Dependencies

FastAPI dependencies wiring the registry and ledger into the services.
"""

from fastapi import Depends

from evm_offchain import MetaverseObjectsContract
from objects_api.database.repositories import MongoMintRegistry
from objects_api.dependencies.ledger import get_ledger
from objects_api.services.mint_reconciler import MintReconciler
from objects_api.services.ownership_service import OwnershipService


def get_registry() -> MongoMintRegistry:
    """Mint registry backed by the Beanie-initialized database"""
    return MongoMintRegistry()


def get_mint_reconciler(
    ledger: MetaverseObjectsContract = Depends(get_ledger),
    registry: MongoMintRegistry = Depends(get_registry),
) -> MintReconciler:
    return MintReconciler(ledger, registry)


def get_ownership_service(
    ledger: MetaverseObjectsContract = Depends(get_ledger),
    registry: MongoMintRegistry = Depends(get_registry),
) -> OwnershipService:
    return OwnershipService(ledger, registry)
