"""
Repository Pattern Implementation

Data access layer for the mint registry.
"""

from objects_api.database.repositories.mint_registry import MongoMintRegistry, RegistryError


__all__ = [
    "MongoMintRegistry",
    "RegistryError",
]
