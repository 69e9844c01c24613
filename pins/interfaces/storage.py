"""Storage interfaces consumed by the directive engine.

The engine never owns persistence. Pins, groups and tags live in collection
stores, while small pieces of engine state (last opened pin, recent
applications, persistent variables, deferred evaluations) live in a string
key-value store.
"""

from typing import Generic, List, Optional, Protocol, TypeVar

T = TypeVar("T")


class CollectionStore(Protocol, Generic[T]):
    """Persisted collection of items (pins, groups or tags).

    Each operation is its own atomic unit. The engine performs no
    transactions across calls: a resolution that creates a pin and then
    fails on a later directive leaves the pin created.

    Implementations can be:
    - In-memory (pins.storage.memory.InMemoryCollectionStore)
    - MongoDB (pins_mongodb.MongoDBCollectionStore)

    Example usage:
        ```python
        store = InMemoryCollectionStore[Pin]()
        await store.add([Pin(name="Docs", url="https://docs.python.org")])

        pins = await store.list()
        pins[0].group = "Reference"
        await store.update(pins)
        ```
    """

    async def list(self) -> List[T]:
        """Return every item in the collection, in stored order.

        Returns:
            Copies of the stored items; mutating them does not change the store
        """
        ...

    async def add(self, items: List[T]) -> List[T]:
        """Append items to the collection.

        Args:
            items: Items to add

        Returns:
            The items as stored
        """
        ...

    async def update(self, items: List[T]) -> None:
        """Replace stored items that share an id with the given items.

        Items whose id is not present are ignored.

        Args:
            items: Updated items
        """
        ...

    async def remove(self, items: List[T]) -> None:
        """Remove stored items that share an id with the given items.

        Args:
            items: Items to remove; unknown ids are a no-op
        """
        ...


class KeyValueStore(Protocol):
    """String key-value storage for engine state.

    Values are opaque strings; structured values are stored as JSON.
    """

    async def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under ``key``, or None if absent."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def remove_item(self, key: str) -> None:
        """Remove ``key``. A no-op if absent."""
        ...
