"""
Mint Schemas

Pydantic models for mint, ownership and registry API requests and responses.
"""

from pydantic import AliasChoices, BaseModel, Field, field_validator

from objects_api.services.records import BatchMintResult, MintOutcome, MintRecord
from objects_api.utils.identifiers import parse_token_id


# ============================================================================
# Mint Request/Response Schemas
# ============================================================================


class MintRequest(BaseModel):
    """Request to mint one object"""

    recipient: str = Field(min_length=1, description="Address receiving the token")
    token_uri: str = Field(
        min_length=1,
        validation_alias=AliasChoices("token_uri", "tokenURI"),
        description="Metadata URI, minted at most once",
    )


class MintResponse(BaseModel):
    """Response for a single mint"""

    success: bool = True
    message: str
    already_minted: bool = Field(description="True when the URI had been minted before")
    token_id: str = Field(description="Ledger token id (decimal string)")
    owner: str = Field(description="Current owner reported by the ledger")
    transaction_hash: str | None = Field(None, description="Mint transaction hash (new mints only)")
    issued_identifier: str | None = Field(None, description="DID recorded with the mint (new mints only)")
    explorer_url: str | None = Field(None, description="Blockchain explorer URL")

    @classmethod
    def from_outcome(cls, outcome: MintOutcome, explorer_url: str | None = None) -> "MintResponse":
        return cls(
            message="Object already minted" if outcome.already_minted else "Object minted successfully",
            already_minted=outcome.already_minted,
            token_id=outcome.token_id,
            owner=outcome.owner,
            transaction_hash=outcome.transaction_hash,
            issued_identifier=outcome.issued_identifier,
            explorer_url=explorer_url,
        )


class MintBatchRequest(BaseModel):
    """Request to mint several objects in one transaction"""

    recipient: str = Field(min_length=1, description="Address receiving the tokens")
    token_uris: list[str] = Field(
        min_length=1,
        validation_alias=AliasChoices("token_uris", "tokenURIs"),
        description="Metadata URIs, in order",
    )


class MintRecordItem(BaseModel):
    """A registry entry"""

    token_uri: str
    token_id: str
    issued_identifier: str

    @classmethod
    def from_record(cls, record: MintRecord) -> "MintRecordItem":
        return cls(token_uri=record.token_uri, token_id=record.token_id, issued_identifier=record.issued_identifier)


class MintBatchResponse(BaseModel):
    """Response for a batch mint"""

    success: bool = True
    message: str
    transaction_hash: str | None = Field(None, description="Batch transaction hash (absent when nothing was minted)")
    minted: list[MintRecordItem] = Field(default_factory=list, description="Newly minted objects, in request order")
    already_minted: dict[str, str] = Field(
        default_factory=dict, description="Previously minted token URIs mapped to their token ids"
    )

    @classmethod
    def from_result(cls, result: BatchMintResult) -> "MintBatchResponse":
        message = "Batch minting successful" if result.minted else "All tokenURIs are already minted"
        return cls(
            message=message,
            transaction_hash=result.transaction_hash,
            minted=[MintRecordItem.from_record(record) for record in result.minted],
            already_minted=result.already_minted,
        )


# ============================================================================
# Ownership Schemas
# ============================================================================


class TransferRequest(BaseModel):
    """Request to transfer a token"""

    from_address: str = Field(
        min_length=1,
        validation_alias=AliasChoices("from_address", "from"),
        description="Current owner address",
    )
    to_address: str = Field(
        min_length=1,
        validation_alias=AliasChoices("to_address", "to"),
        description="New owner address",
    )
    token_id: int | str = Field(
        validation_alias=AliasChoices("token_id", "tokenId"),
        description="Token id (integer or decimal string)",
    )

    @field_validator("token_id", mode="before")
    @classmethod
    def normalize_token_id(cls, value):
        # Always handed on as a decimal string
        return str(parse_token_id(value))


class TransferResponse(BaseModel):
    """Response for a transfer"""

    success: bool = True
    message: str = "Transfer successful"
    transaction_hash: str
    explorer_url: str | None = None


class OwnerResponse(BaseModel):
    """Current owner of a token"""

    token_id: str
    owner: str


class ValidateOwnerResponse(BaseModel):
    """Ownership check result"""

    token_id: str
    claimant: str
    is_owner: bool


class MintedListResponse(BaseModel):
    """Every minted object"""

    total: int
    nfts: list[MintRecordItem]


# ============================================================================
# Error Schema
# ============================================================================


class ErrorResponse(BaseModel):
    """Error response for every endpoint"""

    success: bool = Field(default=False)
    error: str = Field(description="Error message")
    error_code: str | None = Field(None, description="Error category (e.g. PARTIAL_FAILURE)")
    details: dict | None = Field(None, description="Additional error details")
