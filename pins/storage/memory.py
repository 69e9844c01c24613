"""In-memory implementations of the storage interfaces.

Used by the test suite and by hosts that persist state themselves.
"""

import logging
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class InMemoryCollectionStore(Generic[T]):
    """CollectionStore holding pydantic items keyed by ``id``.

    Items are deep-copied on the way in and out, so callers never share
    mutable state with the store.
    """

    def __init__(self, items: Optional[List[T]] = None) -> None:
        self._items: List[T] = [item.model_copy(deep=True) for item in items or []]

    async def list(self) -> List[T]:
        return [item.model_copy(deep=True) for item in self._items]

    async def add(self, items: List[T]) -> List[T]:
        added = [item.model_copy(deep=True) for item in items]
        self._items.extend(added)
        logger.info(f"Added {len(added)} item(s)")
        return [item.model_copy(deep=True) for item in added]

    async def update(self, items: List[T]) -> None:
        by_id = {item.id: item for item in items}
        updated = 0
        for index, stored in enumerate(self._items):
            if stored.id in by_id:
                self._items[index] = by_id[stored.id].model_copy(deep=True)
                updated += 1
        logger.info(f"Updated {updated} item(s)")

    async def remove(self, items: List[T]) -> None:
        ids = {item.id for item in items}
        before = len(self._items)
        self._items = [item for item in self._items if item.id not in ids]
        logger.info(f"Removed {before - len(self._items)} item(s)")


class InMemoryKeyValueStore:
    """KeyValueStore backed by a dict."""

    def __init__(self, data: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(data or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)
