"""MongoDB implementation of KeyValueStore."""

import logging
from typing import Optional

from pins_mongodb.base import MongoDBStore

logger = logging.getLogger(__name__)


class MongoDBKeyValueStore(MongoDBStore):
    """KeyValueStore keeping one ``{_id: key, value: str}`` document per key.

    Args:
        uri: MongoDB connection URI
        database: Database name
        collection: Collection name (default: "engine_state")
    """

    def __init__(self, uri: str, database: str, collection: str = "engine_state") -> None:
        super().__init__(uri, database, collection)

    async def get_item(self, key: str) -> Optional[str]:
        collection = self._collection()
        try:
            doc = await collection.find_one({"_id": key})
            return doc["value"] if doc else None
        except Exception as e:
            logger.error(f"Failed to get '{key}': {e}")
            raise RuntimeError(f"Failed to get '{key}': {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        collection = self._collection()
        try:
            await collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)
            logger.debug(f"Stored '{key}'")
        except Exception as e:
            logger.error(f"Failed to set '{key}': {e}")
            raise RuntimeError(f"Failed to set '{key}': {e}") from e

    async def remove_item(self, key: str) -> None:
        collection = self._collection()
        try:
            await collection.delete_one({"_id": key})
            logger.debug(f"Removed '{key}'")
        except Exception as e:
            logger.error(f"Failed to remove '{key}': {e}")
            raise RuntimeError(f"Failed to remove '{key}': {e}") from e
