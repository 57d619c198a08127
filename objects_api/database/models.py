"""
Database Models for the Mint Registry

MongoDB/Beanie Document models.
The registry collection keeps one document per token URI.
"""

from datetime import datetime, timezone
from typing import Annotated

from beanie import Document, Indexed
from pydantic import Field as BeanieField
from pymongo import ASCENDING, DESCENDING, IndexModel

from objects_api.enums import MintStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MintedObject(Document):
    """
    Mint registry entry - one per token URI

    Created as a PENDING reservation before the mint transaction is submitted,
    completed to MINTED once the ledger confirms it. The unique index on
    token_uri is what makes the reservation an atomic insert-if-absent.
    """

    token_uri: Annotated[str, Indexed(unique=True)]
    status: str = MintStatus.MINTED.value  # MintStatus as string

    # Filled when MINTED
    token_id: str | None = None  # Decimal string, uint256 may exceed int64
    issued_identifier: str | None = None  # e.g. did:mynft:<hex>
    transaction_hash: str | None = None

    recipient: str | None = None

    # Timestamps
    created_at: datetime = BeanieField(default_factory=_utcnow)
    minted_at: datetime | None = None

    class Settings:
        name = "mintedObjects"
        indexes = [
            IndexModel([("status", ASCENDING)]),
            IndexModel([("created_at", DESCENDING)]),
        ]
