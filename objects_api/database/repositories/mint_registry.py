"""
Mint Registry Repository

MongoDB access for the token URI -> token id cache.
Lookups only ever return MINTED entries; PENDING entries are reservations
held by in-flight mint requests.
"""

from datetime import datetime, timezone

from beanie.operators import In
from pymongo import UpdateOne
from pymongo.errors import BulkWriteError, DuplicateKeyError, PyMongoError

from objects_api.database.models import MintedObject
from objects_api.enums import MintStatus
from objects_api.services.records import MintRecord


DUPLICATE_KEY_CODE = 11000


class RegistryError(Exception):
    """Mint registry read or write failed"""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_record(doc: MintedObject) -> MintRecord:
    return MintRecord(
        token_uri=doc.token_uri,
        token_id=doc.token_id,
        issued_identifier=doc.issued_identifier or "",
    )


class MongoMintRegistry:
    """Repository for mint registry operations"""

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def find_by_uri(self, token_uri: str) -> MintRecord | None:
        """
        Get the minted record for a token URI

        Args:
            token_uri: Metadata URI

        Returns:
            MintRecord or None if the URI was never minted
        """
        try:
            doc = await MintedObject.find_one(
                MintedObject.token_uri == token_uri,
                MintedObject.status == MintStatus.MINTED.value,
            )
        except PyMongoError as e:
            raise RegistryError(f"Lookup failed for {token_uri}: {str(e)}") from e
        return _to_record(doc) if doc else None

    async def find_by_uris(self, token_uris: list[str]) -> list[MintRecord]:
        """
        Get minted records for many token URIs in one query

        Args:
            token_uris: Metadata URIs

        Returns:
            Records for the URIs that were minted (order not significant)
        """
        if not token_uris:
            return []
        try:
            docs = await MintedObject.find(
                In(MintedObject.token_uri, list(token_uris)),
                MintedObject.status == MintStatus.MINTED.value,
            ).to_list()
        except PyMongoError as e:
            raise RegistryError(f"Bulk lookup failed: {str(e)}") from e
        return [_to_record(doc) for doc in docs]

    async def list_all(self) -> list[MintRecord]:
        """Every minted record, oldest first"""
        try:
            docs = await MintedObject.find(
                MintedObject.status == MintStatus.MINTED.value
            ).sort(+MintedObject.created_at).to_list()
        except PyMongoError as e:
            raise RegistryError(f"Listing failed: {str(e)}") from e
        return [_to_record(doc) for doc in docs]

    # ------------------------------------------------------------------
    # Reservations (insert-if-absent)
    # ------------------------------------------------------------------

    async def reserve(self, token_uri: str, recipient: str | None = None) -> bool:
        """
        Atomically claim a token URI before minting it

        Args:
            token_uri: Metadata URI
            recipient: Address the mint is for

        Returns:
            True if this call created the reservation, False if an entry already exists
        """
        try:
            await MintedObject(
                token_uri=token_uri,
                status=MintStatus.PENDING.value,
                recipient=recipient,
            ).insert()
        except DuplicateKeyError:
            return False
        except PyMongoError as e:
            raise RegistryError(f"Reservation failed for {token_uri}: {str(e)}") from e
        return True

    async def reserve_many(self, token_uris: list[str], recipient: str | None = None) -> set[str]:
        """
        Claim several token URIs in one unordered bulk insert

        Args:
            token_uris: Distinct metadata URIs
            recipient: Address the mints are for

        Returns:
            The URIs this call reserved; the rest already had an entry
        """
        if not token_uris:
            return set()

        now = _utcnow()
        documents = [
            {
                "token_uri": uri,
                "status": MintStatus.PENDING.value,
                "token_id": None,
                "issued_identifier": None,
                "transaction_hash": None,
                "recipient": recipient,
                "created_at": now,
                "minted_at": None,
            }
            for uri in token_uris
        ]

        collection = MintedObject.get_motor_collection()
        try:
            await collection.insert_many(documents, ordered=False)
        except BulkWriteError as e:
            write_errors = e.details.get("writeErrors", [])
            failed = {err["index"] for err in write_errors}
            reserved = [uri for i, uri in enumerate(token_uris) if i not in failed]
            if any(err.get("code") != DUPLICATE_KEY_CODE for err in write_errors):
                await self.release(reserved)
                raise RegistryError(f"Bulk reservation failed: {str(e)}") from e
            return set(reserved)
        except PyMongoError as e:
            raise RegistryError(f"Bulk reservation failed: {str(e)}") from e
        return set(token_uris)

    async def release(self, token_uris: list[str]) -> None:
        """
        Drop PENDING reservations; MINTED entries are never touched

        Args:
            token_uris: URIs whose reservations should be removed
        """
        if not token_uris:
            return
        collection = MintedObject.get_motor_collection()
        try:
            await collection.delete_many(
                {"token_uri": {"$in": list(token_uris)}, "status": MintStatus.PENDING.value}
            )
        except PyMongoError as e:
            raise RegistryError(f"Releasing reservations failed: {str(e)}") from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _complete_operation(record: MintRecord, transaction_hash: str | None, now: datetime) -> UpdateOne:
        # Matches only a reservation (or nothing): an existing MINTED entry makes the
        # upsert collide with the unique index instead of being overwritten.
        return UpdateOne(
            {"token_uri": record.token_uri, "status": MintStatus.PENDING.value},
            {
                "$set": {
                    "status": MintStatus.MINTED.value,
                    "token_id": record.token_id,
                    "issued_identifier": record.issued_identifier,
                    "transaction_hash": transaction_hash,
                    "minted_at": now,
                },
                "$setOnInsert": {"created_at": now, "recipient": None},
            },
            upsert=True,
        )

    async def insert_one(self, record: MintRecord, transaction_hash: str | None = None) -> None:
        """
        Persist a confirmed mint, completing its reservation if one exists

        Args:
            record: Confirmed mint record
            transaction_hash: Mint transaction hash
        """
        await self.insert_many([record], transaction_hash)

    async def insert_many(self, records: list[MintRecord], transaction_hash: str | None = None) -> None:
        """
        Persist confirmed mints in one bulk write

        Args:
            records: Confirmed mint records
            transaction_hash: Batch mint transaction hash
        """
        if not records:
            return
        now = _utcnow()
        collection = MintedObject.get_motor_collection()
        try:
            await collection.bulk_write(
                [self._complete_operation(record, transaction_hash, now) for record in records],
                ordered=False,
            )
        except PyMongoError as e:
            raise RegistryError(f"Persisting {len(records)} mint record(s) failed: {str(e)}") from e
