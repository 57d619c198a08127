"""
Ledger Dependency

FastAPI dependency for accessing the MetaverseObjects contract client.
"""

from fastapi import HTTPException

from evm_offchain import EvmChainContext, MetaverseObjectsContract, load_abi
from objects_api.config import settings


# Global state for the ledger client
_ledger: MetaverseObjectsContract | None = None


def build_ledger() -> MetaverseObjectsContract:
    """
    Create the contract client from settings.

    Raises:
        ValueError: If RPC_URL, PRIVATE_KEY or CONTRACT_ADDRESS is missing
    """
    missing = [
        name
        for name, value in (
            ("RPC_URL", settings.rpc_url),
            ("PRIVATE_KEY", settings.private_key),
            ("CONTRACT_ADDRESS", settings.contract_address),
        )
        if not value
    ]
    if missing:
        raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

    chain_context = EvmChainContext(
        rpc_url=settings.rpc_url,
        private_key=settings.private_key,
        chain_id=settings.chain_id,
        explorer_url=settings.explorer_url,
    )
    return MetaverseObjectsContract(
        chain_context,
        settings.contract_address,
        abi=load_abi(settings.contract_abi_path),
        confirmation_timeout=settings.confirmation_timeout_seconds,
    )


def get_ledger() -> MetaverseObjectsContract:
    """
    Get or initialize the ledger client.

    Returns:
        MetaverseObjectsContract bound to the configured contract

    Raises:
        HTTPException: If ledger settings are missing from environment
    """
    global _ledger
    if _ledger is None:
        try:
            _ledger = build_ledger()
        except ValueError as e:
            raise HTTPException(status_code=500, detail=str(e))
    return _ledger
