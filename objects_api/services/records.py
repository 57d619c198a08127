"""
Mint Records

Plain value types passed between the registry, the reconciler and the routers.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MintRecord:
    """One confirmed mint: token URI -> ledger token id"""

    token_uri: str
    token_id: str  # Decimal string
    issued_identifier: str


@dataclass(frozen=True)
class MintOutcome:
    """Result of a single mint request"""

    already_minted: bool
    token_id: str
    owner: str
    transaction_hash: str | None = None
    issued_identifier: str | None = None


@dataclass(frozen=True)
class BatchMintResult:
    """
    Result of a batch mint request.

    minted keeps the input order of the URIs that needed minting;
    already_minted maps every previously registered URI to its token id.
    """

    minted: list[MintRecord] = field(default_factory=list)
    already_minted: dict[str, str] = field(default_factory=dict)
    transaction_hash: str | None = None
