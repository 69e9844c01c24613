"""MongoDB implementation of CollectionStore."""

import logging
from typing import Any, Dict, Generic, List, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING

from pins_mongodb.base import MongoDBStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class MongoDBCollectionStore(MongoDBStore, Generic[T]):
    """CollectionStore persisting pydantic items as MongoDB documents.

    Each item is one document keyed by ``_id`` (the item's id). A
    ``position`` field keeps the stored order stable across list calls.

    Args:
        uri: MongoDB connection URI
        database: Database name
        collection: Collection name, e.g. "pins"
        model: Item model used to rebuild documents

    Example:
        ```python
        pins = MongoDBCollectionStore(
            uri="mongodb://localhost:27017",
            database="pins",
            collection="pins",
            model=Pin,
        )
        await pins.startup()
        await pins.add([Pin(name="Docs", url="https://docs.python.org")])
        ```
    """

    def __init__(self, uri: str, database: str, collection: str, model: Type[T]) -> None:
        super().__init__(uri, database, collection)
        self.model = model

    async def _create_indexes(self, collection: AsyncIOMotorCollection) -> None:
        await collection.create_index([("position", ASCENDING)], background=True)
        logger.info(f"Created indexes on {self.collection_name}")

    def _to_document(self, item: T) -> Dict[str, Any]:
        doc = item.model_dump(mode="json")
        doc["_id"] = doc.pop("id")
        return doc

    def _from_document(self, doc: Dict[str, Any]) -> T:
        doc = dict(doc)
        doc["id"] = doc.pop("_id")
        doc.pop("position", None)
        return self.model.model_validate(doc)

    async def list(self) -> List[T]:
        collection = self._collection()
        try:
            cursor = collection.find({}).sort("position", ASCENDING)
            docs = await cursor.to_list(length=None)
            items = [self._from_document(doc) for doc in docs]
            logger.debug(f"Listed {len(items)} items from {self.collection_name}")
            return items
        except Exception as e:
            logger.error(f"Failed to list {self.collection_name}: {e}")
            raise RuntimeError(f"Failed to list {self.collection_name}: {e}") from e

    async def add(self, items: List[T]) -> List[T]:
        if not items:
            return []
        collection = self._collection()
        try:
            last = await collection.find_one({}, sort=[("position", DESCENDING)])
            position = last["position"] + 1 if last else 0
            docs = []
            for offset, item in enumerate(items):
                doc = self._to_document(item)
                doc["position"] = position + offset
                docs.append(doc)
            await collection.insert_many(docs)
            logger.info(f"Added {len(docs)} item(s) to {self.collection_name}")
            return list(items)
        except Exception as e:
            logger.error(f"Failed to add to {self.collection_name}: {e}")
            raise RuntimeError(f"Failed to add to {self.collection_name}: {e}") from e

    async def update(self, items: List[T]) -> None:
        collection = self._collection()
        try:
            for item in items:
                doc = self._to_document(item)
                item_id = doc.pop("_id")
                await collection.update_one({"_id": item_id}, {"$set": doc})
            logger.info(f"Updated {len(items)} item(s) in {self.collection_name}")
        except Exception as e:
            logger.error(f"Failed to update {self.collection_name}: {e}")
            raise RuntimeError(f"Failed to update {self.collection_name}: {e}") from e

    async def remove(self, items: List[T]) -> None:
        if not items:
            return
        collection = self._collection()
        try:
            result = await collection.delete_many({"_id": {"$in": [item.id for item in items]}})
            logger.info(f"Removed {result.deleted_count} item(s) from {self.collection_name}")
        except Exception as e:
            logger.error(f"Failed to remove from {self.collection_name}: {e}")
            raise RuntimeError(f"Failed to remove from {self.collection_name}: {e}") from e
