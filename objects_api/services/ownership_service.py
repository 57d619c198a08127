"""
Ownership Service

Read paths (owner lookup, ownership validation, registry listing) and token transfers.
"""

import logging

from evm_offchain import InvalidAddressError, LedgerError, MetaverseObjectsContract

from objects_api.database.repositories import MongoMintRegistry, RegistryError
from objects_api.services.errors import (
    InvalidRequestError,
    LookupFailedError,
    TransferFailedError,
)
from objects_api.services.records import MintRecord
from objects_api.utils.identifiers import parse_token_id


logger = logging.getLogger(__name__)


def _token_id(value: str | int) -> int:
    try:
        return parse_token_id(value)
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e


class OwnershipService:
    """Service for ownership queries and transfers"""

    def __init__(self, ledger: MetaverseObjectsContract, registry: MongoMintRegistry):
        self.ledger = ledger
        self.registry = registry

    async def get_owner(self, token_id: str) -> str:
        """
        Current owner of a token.

        Raises:
            InvalidRequestError: token_id is not a decimal integer
            LookupFailedError: Ledger query failed (e.g. token does not exist)
        """
        parsed = _token_id(token_id)
        logger.info(f"Fetching owner of tokenId: {token_id}")
        try:
            owner = await self.ledger.owner_of(parsed)
        except LedgerError as e:
            logger.error(f"Fetching owner failed: {str(e)}")
            raise LookupFailedError("Failed to fetch owner", details={"token_id": str(parsed), "reason": str(e)}) from e
        logger.info(f"Owner of tokenId: {token_id} is: {owner}")
        return owner

    async def validate_owner(self, claimant: str, token_id: str) -> bool:
        """
        Whether claimant currently owns the token.

        Raises:
            InvalidRequestError: Missing claimant, bad token id or malformed address
            LookupFailedError: Ledger query failed
        """
        if not claimant or token_id in (None, ""):
            raise InvalidRequestError("Claimant and tokenId are required")
        parsed = _token_id(token_id)
        try:
            return await self.ledger.is_owner(claimant, parsed)
        except InvalidAddressError as e:
            raise InvalidRequestError(str(e)) from e
        except LedgerError as e:
            logger.error(f"Error validating owner: {str(e)}")
            raise LookupFailedError(
                "Failed to validate owner", details={"token_id": str(parsed), "reason": str(e)}
            ) from e

    async def transfer(self, from_address: str, to_address: str, token_id: str) -> str:
        """
        Transfer a token and wait for confirmation.

        Args:
            from_address: Current owner
            to_address: New owner
            token_id: Token to move

        Returns:
            Confirmed transaction hash

        Raises:
            InvalidRequestError: Missing fields, bad token id or malformed address
            TransferFailedError: Submission, confirmation or revert failure
        """
        if not from_address or not to_address or token_id in (None, ""):
            raise InvalidRequestError("From, to, and tokenId are required")
        parsed = _token_id(token_id)

        logger.info(f"Transferring NFT tokenId: {token_id} from: {from_address} to: {to_address}")
        try:
            pending = await self.ledger.transfer_from(from_address, to_address, parsed)
            receipt = await pending.wait()
        except InvalidAddressError as e:
            raise InvalidRequestError(str(e)) from e
        except LedgerError as e:
            logger.error(f"Transfer failed: {str(e)}")
            details = {"token_id": str(parsed), "reason": str(e)}
            transaction_hash = getattr(e, "transaction_hash", None)
            if transaction_hash:
                details["transaction_hash"] = transaction_hash
            raise TransferFailedError("Transfer failed", details=details) from e

        logger.info(f"NFT tokenId: {token_id} transferred from {from_address} to {to_address}")
        return receipt.transaction_hash

    async def list_minted(self) -> list[MintRecord]:
        """
        Every record in the mint registry.

        Raises:
            LookupFailedError: Registry read failed
        """
        try:
            return await self.registry.list_all()
        except RegistryError as e:
            logger.error(f"Failed to fetch NFTs: {str(e)}")
            raise LookupFailedError("Failed to fetch NFTs") from e
