"""MongoDB storage adapters for the pins engine.

This package provides MongoDB implementations of the engine's storage protocols:
- MongoDBCollectionStore: CollectionStore for pins, groups and tags
- MongoDBKeyValueStore: KeyValueStore for engine state

Requirements:
- Motor (async MongoDB driver)

Example usage:
    ```python
    from pins.core.models import Group, Pin, Tag
    from pins_mongodb import MongoDBCollectionStore, MongoDBKeyValueStore

    uri, db = "mongodb://localhost:27017", "pins"
    pins = MongoDBCollectionStore(uri, db, "pins", Pin)
    groups = MongoDBCollectionStore(uri, db, "groups", Group)
    tags = MongoDBCollectionStore(uri, db, "tags", Tag)
    state = MongoDBKeyValueStore(uri, db)

    for store in (pins, groups, tags, state):
        await store.startup()
    ```
"""

from pins_mongodb.collection_store import MongoDBCollectionStore
from pins_mongodb.key_value_store import MongoDBKeyValueStore

__version__ = "0.1.0"

__all__ = [
    "MongoDBCollectionStore",
    "MongoDBKeyValueStore",
]
