"""Storage implementations bundled with the engine."""

from pins.storage.memory import InMemoryCollectionStore, InMemoryKeyValueStore

__all__ = ["InMemoryCollectionStore", "InMemoryKeyValueStore"]
