"""Interfaces for the external collaborators of the directive engine.

Concrete implementations are injected through EngineServices:
- CollectionStore / KeyValueStore: pins.storage.memory, pins_mongodb
- CompletionProvider: pins.llm
- PlatformAutomation / NotificationSurface: supplied by the host application
"""

from pins.interfaces.llm import CompletionProvider
from pins.interfaces.platform import NotificationSurface, PlatformAutomation
from pins.interfaces.storage import CollectionStore, KeyValueStore

__all__ = [
    "CollectionStore",
    "CompletionProvider",
    "KeyValueStore",
    "NotificationSurface",
    "PlatformAutomation",
]
