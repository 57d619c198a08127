"""
Mint Reconciler

Idempotent minting on top of the ledger and the mint registry.

A token URI is minted at most once:
1. The registry is checked first; a known URI short-circuits with its token id
   and the owner currently reported by the ledger.
2. An unknown URI is reserved in the registry (atomic insert-if-absent on the
   unique token_uri index) BEFORE any transaction is submitted, so concurrent
   requests for the same URI cannot both reach the ledger.
3. After confirmation the token id is read from the receipt's mint Transfer
   event and the reservation is completed into a mint record.

Ledger failures release the reservation and are safe to retry. A registry write
failure after confirmation is a partial failure: the token exists on-chain but
is not recorded, and retrying would mint it again.
"""

import logging
from collections.abc import Callable

from evm_offchain import InvalidAddressError, LedgerError, MetaverseObjectsContract, Receipt

from objects_api.database.repositories import MongoMintRegistry, RegistryError
from objects_api.services.errors import (
    InvalidRequestError,
    LookupFailedError,
    MintFailedError,
    MintInProgressError,
    PartialFailureError,
)
from objects_api.services.records import BatchMintResult, MintOutcome, MintRecord
from objects_api.utils.identifiers import generate_simple_did


logger = logging.getLogger(__name__)


class MintReconciler:
    """Service for minting token URIs exactly once"""

    def __init__(
        self,
        ledger: MetaverseObjectsContract,
        registry: MongoMintRegistry,
        issue_identifier: Callable[[], str] = generate_simple_did,
    ):
        """
        Initialize the reconciler

        Args:
            ledger: Contract client used to mint and query ownership
            registry: Mint registry (token URI -> token id)
            issue_identifier: Factory for the per-mint issued identifier
        """
        self.ledger = ledger
        self.registry = registry
        self.issue_identifier = issue_identifier

    # ============================================================================
    # Single mint
    # ============================================================================

    async def mint_one(self, recipient: str, token_uri: str) -> MintOutcome:
        """
        Mint one token URI for a recipient, or return the existing mint.

        Args:
            recipient: Address receiving the token
            token_uri: Metadata URI (idempotency key)

        Returns:
            MintOutcome (already_minted=True when the URI was minted before)

        Raises:
            InvalidRequestError: Missing recipient or token URI, or invalid address
            MintInProgressError: Another request is minting this URI right now
            MintFailedError: Ledger failure, nothing recorded
            PartialFailureError: Minted on-chain but the registry write failed
            LookupFailedError: Registry lookup or owner query failed
        """
        if not recipient or not token_uri:
            raise InvalidRequestError("Recipient and tokenURI are required")

        logger.info(f"Minting a single NFT for recipient: {recipient} with tokenURI: {token_uri}")

        existing = await self._find_one(token_uri)
        if existing:
            return await self._already_minted(existing)

        try:
            reserved = await self.registry.reserve(token_uri, recipient)
        except RegistryError as e:
            raise MintFailedError(f"Could not reserve tokenURI: {str(e)}") from e

        if not reserved:
            # Lost the race: either the other request finished or it is still minting
            existing = await self._find_one(token_uri)
            if existing:
                return await self._already_minted(existing)
            raise MintInProgressError(
                f"tokenURI is being minted by another request: {token_uri}",
                details={"token_uris": [token_uri]},
            )

        issued_identifier = self.issue_identifier()
        try:
            pending = await self.ledger.submit_mint(recipient, token_uri, issued_identifier)
            receipt = await pending.wait()
            token_ids = self._minted_token_ids(receipt, expected=1)
        except InvalidAddressError as e:
            await self._release([token_uri])
            raise InvalidRequestError(str(e)) from e
        except MintFailedError:
            await self._release([token_uri])
            raise
        except LedgerError as e:
            await self._release([token_uri])
            logger.error(f"Minting single NFT failed: {str(e)}")
            raise MintFailedError(f"Failed to mint object: {str(e)}") from e
        except Exception:
            await self._release([token_uri])
            raise

        token_id = token_ids[0]
        record = MintRecord(token_uri=token_uri, token_id=token_id, issued_identifier=issued_identifier)
        try:
            await self.registry.insert_one(record, receipt.transaction_hash)
        except RegistryError as e:
            logger.error(
                f"Minted tokenId {token_id} (tx {receipt.transaction_hash}) but failed to record it: {str(e)}"
            )
            raise PartialFailureError(
                "Object minted on-chain but not recorded; reconcile the registry instead of retrying",
                details={
                    "token_uri": token_uri,
                    "token_id": token_id,
                    "issued_identifier": issued_identifier,
                    "transaction_hash": receipt.transaction_hash,
                },
            ) from e

        owner = await self._owner_of(
            token_id, details={"token_id": token_id, "transaction_hash": receipt.transaction_hash}
        )
        logger.info(f"Minted NFT with tokenId: {token_id} for recipient: {recipient}")

        return MintOutcome(
            already_minted=False,
            token_id=token_id,
            owner=owner,
            transaction_hash=receipt.transaction_hash,
            issued_identifier=issued_identifier,
        )

    # ============================================================================
    # Batch mint
    # ============================================================================

    async def mint_batch(self, recipient: str, token_uris: list[str]) -> BatchMintResult:
        """
        Mint every token URI not minted yet, in one ledger transaction.

        Duplicate URIs in the request are minted once.

        Args:
            recipient: Address receiving the tokens
            token_uris: Metadata URIs, in order

        Returns:
            BatchMintResult with new records (input order) and the already minted URIs

        Raises:
            InvalidRequestError: Missing recipient, empty list or empty URI
            MintInProgressError: Some URI is being minted by another request
            MintFailedError: Ledger failure or event count mismatch, nothing recorded
            PartialFailureError: Minted on-chain but the registry write failed
            LookupFailedError: Registry lookup failed
        """
        if not recipient or not token_uris:
            raise InvalidRequestError("Recipient and tokenURIs are required")
        if any(not uri for uri in token_uris):
            raise InvalidRequestError("tokenURIs must not contain empty values")

        uris = list(dict.fromkeys(token_uris))
        logger.info(f"Minting batch NFTs for recipient: {recipient} with {len(uris)} tokenURIs")

        minted_ids = await self._find_many(uris)
        to_mint = [uri for uri in uris if uri not in minted_ids]

        if not to_mint:
            logger.info("All provided tokenURIs are already minted")
            return BatchMintResult(minted=[], already_minted=self._ordered(uris, minted_ids))

        try:
            reserved = await self.registry.reserve_many(to_mint, recipient)
        except RegistryError as e:
            raise MintFailedError(f"Could not reserve tokenURIs: {str(e)}") from e

        contested = [uri for uri in to_mint if uri not in reserved]
        if contested:
            minted_ids.update(await self._find_many(contested))
            in_progress = [uri for uri in contested if uri not in minted_ids]
            if in_progress:
                await self._release([uri for uri in to_mint if uri in reserved])
                raise MintInProgressError(
                    "Some tokenURIs are being minted by another request",
                    details={"token_uris": in_progress},
                )
            to_mint = [uri for uri in to_mint if uri in reserved]

        already_minted = self._ordered(uris, minted_ids)
        if not to_mint:
            return BatchMintResult(minted=[], already_minted=already_minted)

        issued_identifiers = [self.issue_identifier() for _ in to_mint]
        try:
            pending = await self.ledger.submit_batch_mint(recipient, to_mint, issued_identifiers)
            receipt = await pending.wait()
            token_ids = self._minted_token_ids(receipt, expected=len(to_mint))
        except InvalidAddressError as e:
            await self._release(to_mint)
            raise InvalidRequestError(str(e)) from e
        except MintFailedError:
            await self._release(to_mint)
            raise
        except LedgerError as e:
            await self._release(to_mint)
            logger.error(f"Batch minting failed: {str(e)}")
            raise MintFailedError(f"Failed to mint batch objects: {str(e)}") from e
        except Exception:
            await self._release(to_mint)
            raise

        # Nth mint event belongs to the Nth submitted URI
        records = [
            MintRecord(token_uri=uri, token_id=token_id, issued_identifier=issued)
            for uri, token_id, issued in zip(to_mint, token_ids, issued_identifiers)
        ]
        try:
            await self.registry.insert_many(records, receipt.transaction_hash)
        except RegistryError as e:
            logger.error(
                f"Batch tx {receipt.transaction_hash} minted {len(records)} NFTs but recording failed: {str(e)}"
            )
            raise PartialFailureError(
                "Objects minted on-chain but not recorded; reconcile the registry instead of retrying",
                details={
                    "transaction_hash": receipt.transaction_hash,
                    "minted": [
                        {
                            "token_uri": r.token_uri,
                            "token_id": r.token_id,
                            "issued_identifier": r.issued_identifier,
                        }
                        for r in records
                    ],
                },
            ) from e

        logger.info(f"Batch minting completed with {len(records)} NFTs minted")
        return BatchMintResult(
            minted=records,
            already_minted=already_minted,
            transaction_hash=receipt.transaction_hash,
        )

    # ============================================================================
    # Helpers
    # ============================================================================

    @staticmethod
    def _minted_token_ids(receipt: Receipt, expected: int) -> list[str]:
        """Token ids of the receipt's mint Transfer events, as decimal strings"""
        transfers = receipt.mint_transfers()
        if len(transfers) != expected:
            logger.error(
                f"Transaction {receipt.transaction_hash} emitted {len(transfers)} mint events, expected {expected}"
            )
            raise MintFailedError(
                "Confirmed transaction did not emit the expected Transfer events",
                details={
                    "transaction_hash": receipt.transaction_hash,
                    "expected_events": expected,
                    "found_events": len(transfers),
                },
            )
        return [str(event.args[2]) for event in transfers]

    @staticmethod
    def _ordered(uris: list[str], minted_ids: dict[str, str]) -> dict[str, str]:
        return {uri: minted_ids[uri] for uri in uris if uri in minted_ids}

    async def _find_one(self, token_uri: str) -> MintRecord | None:
        try:
            return await self.registry.find_by_uri(token_uri)
        except RegistryError as e:
            raise LookupFailedError(f"Registry lookup failed: {str(e)}") from e

    async def _find_many(self, token_uris: list[str]) -> dict[str, str]:
        try:
            records = await self.registry.find_by_uris(token_uris)
        except RegistryError as e:
            raise LookupFailedError(f"Registry lookup failed: {str(e)}") from e
        return {record.token_uri: record.token_id for record in records}

    async def _already_minted(self, record: MintRecord) -> MintOutcome:
        # Ownership may have moved since the mint, always ask the ledger
        owner = await self._owner_of(record.token_id, details={"token_id": record.token_id})
        logger.info(f"Object already minted with tokenId: {record.token_id} owned by: {owner}")
        return MintOutcome(already_minted=True, token_id=record.token_id, owner=owner)

    async def _owner_of(self, token_id: str, details: dict | None = None) -> str:
        try:
            return await self.ledger.owner_of(token_id)
        except LedgerError as e:
            raise LookupFailedError(f"Failed to fetch owner: {str(e)}", details=details) from e

    async def _release(self, token_uris: list[str]) -> None:
        try:
            await self.registry.release(token_uris)
        except RegistryError as e:
            # The URIs stay reserved and report MINT_IN_PROGRESS until an operator clears them
            logger.error(f"Failed to release reservations for {token_uris}: {str(e)}")
