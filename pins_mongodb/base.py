"""Connection handling shared by the MongoDB stores."""

import logging
from typing import Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo.errors import ConnectionFailure

from pins.core.exceptions import StorageNotInitializedError

logger = logging.getLogger(__name__)


class MongoDBStore:
    """Base class owning one client, database and collection.

    Args:
        uri: MongoDB connection URI
        database: Database name
        collection: Collection name
    """

    def __init__(self, uri: str, database: str, collection: str) -> None:
        self.uri = uri
        self.database_name = database
        self.collection_name = collection
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None

    async def startup(self) -> None:
        """Connect and create indexes.

        Raises:
            ConnectionError: If unable to connect to MongoDB
        """
        try:
            self._client = AsyncIOMotorClient(self.uri)
            self._db = self._client[self.database_name]

            # Test connection
            await self._client.admin.command("ping")
            logger.info(f"Connected to MongoDB at {self.uri}")

            await self._create_indexes(self._db[self.collection_name])

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            await self.shutdown()
            raise ConnectionError(f"Unable to connect to MongoDB at {self.uri}") from e
        except Exception as e:
            logger.error(f"Unexpected error during startup: {e}")
            await self.shutdown()
            raise

    async def _create_indexes(self, collection: AsyncIOMotorCollection) -> None:
        pass

    async def shutdown(self) -> None:
        """Close the connection. Safe to call multiple times."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("Closed MongoDB connection")

    def _collection(self) -> AsyncIOMotorCollection:
        if self._db is None:
            raise StorageNotInitializedError()
        return self._db[self.collection_name]
