"""
Database Connection Management

Manages the MongoDB client and Beanie initialization for the mint registry.
Uses lazy initialization and a single pooled client.
"""

import asyncio
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase


class RegistryDatabaseManager:
    """Manages the MongoDB connection used by the mint registry"""

    def __init__(self, connection_string: str, database_name: str):
        """
        Initialize database manager

        Args:
            connection_string: MongoDB URI
            database_name: Database holding the mintedObjects collection
        """
        self.connection_string = connection_string
        self.database_name = database_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self):
        """Connect and initialize Beanie with the registry models"""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            self.client = AsyncIOMotorClient(
                self.connection_string,
                maxPoolSize=50,
                minPoolSize=5,
                maxIdleTimeMS=300000,  # 5 minutes
            )
            self.database = self.client[self.database_name]

            from objects_api.database.models import MintedObject

            # Creates the unique token_uri index
            await init_beanie(database=self.database, document_models=[MintedObject])

            self._initialized = True

    async def ping(self) -> bool:
        """Round-trip to the server"""
        if not self.client:
            return False
        await self.client.admin.command("ping")
        return True

    async def close(self):
        """Close database connections"""
        if self.client:
            self.client.close()
        self._initialized = False


# Global instance
_db_manager: Optional[RegistryDatabaseManager] = None


def get_db_manager() -> RegistryDatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        from objects_api.config import settings

        if not settings.mongo_uri:
            raise ValueError("MONGO_URI environment variable not set")
        _db_manager = RegistryDatabaseManager(settings.mongo_uri, settings.mongo_database)
    return _db_manager
