"""
API Configuration

Centralized settings for the FastAPI application.
API metadata is hardcoded, while environment-specific settings load from .env file.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# Get the project root directory (one level up from objects_api/)
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """
    Application settings for the Metaverse Objects API

    API metadata (title, description, version, contact) are hardcoded.
    Environment-specific settings are loaded from .env file.
    """

    # ============================================================================
    # API Metadata (hardcoded - versioned with code)
    # ============================================================================

    api_title: str = "Metaverse Objects API"
    api_description: str = (
        "Idempotent minting API for metaverse object NFTs. "
        "Mints single objects or batches on the MetaverseObjects contract, "
        "remembers which token URIs were already minted, and exposes ownership queries and transfers."
    )
    api_version: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Contact information
    contact_name: str = "Metaverse Objects"
    contact_url: str = "https://github.com/metaverse-objects"

    # ============================================================================
    # Environment Settings (loaded from .env)
    # ============================================================================

    environment: str = "development"  # development, staging, production
    api_port: int = 3000
    log_level: str = "INFO"

    # Ledger
    rpc_url: str = ""
    private_key: str = ""
    contract_address: str = ""
    chain_id: int | None = None  # Queried from the node when unset
    contract_abi_path: str | None = None  # Bundled ABI when unset
    confirmation_timeout_seconds: float = 120
    explorer_url: str | None = None

    # Mint registry
    mongo_uri: str = ""
    mongo_database: str = "metaverse-objects"

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"), env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @property
    def contact(self) -> dict[str, str]:
        """FastAPI contact information"""
        return {"name": self.contact_name, "url": self.contact_url}

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment.lower() == "development"

    def missing_required(self) -> list[str]:
        """Names of required runtime settings that are empty"""
        required = {
            "RPC_URL": self.rpc_url,
            "PRIVATE_KEY": self.private_key,
            "CONTRACT_ADDRESS": self.contract_address,
            "MONGO_URI": self.mongo_uri,
        }
        return [name for name, value in required.items() if not value]


# ============================================================================
# Global settings instance
# ============================================================================

settings = Settings()
