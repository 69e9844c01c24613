"""Engine state kept in the KeyValueStore.

Covers the last opened pin, the recent applications list and persistent
variables. Every helper reads and writes whole JSON values; the store is
assumed to serialize its own writes.
"""

import json
import logging
from typing import Any, List, Optional

from pydantic import BaseModel

from pins.core.constants import StorageKey
from pins.core.models import AppRef
from pins.interfaces import KeyValueStore

logger = logging.getLogger(__name__)

MAX_RECENT_APPS = 10


async def _load_json(storage: KeyValueStore, key: StorageKey, default: Any) -> Any:
    raw = await storage.get_item(key.value)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Discarding malformed value stored under '{key.value}'")
        return default


async def get_last_opened_pin_id(storage: KeyValueStore) -> Optional[str]:
    return await storage.get_item(StorageKey.LAST_OPENED_PIN.value) or None


async def set_last_opened_pin_id(storage: KeyValueStore, pin_id: str) -> None:
    await storage.set_item(StorageKey.LAST_OPENED_PIN.value, pin_id)


async def get_recent_applications(storage: KeyValueStore) -> List[AppRef]:
    """Recently focused applications, most recent first."""
    data = await _load_json(storage, StorageKey.RECENT_APPS, [])
    if not isinstance(data, list):
        return []
    return [AppRef.model_validate(item) for item in data if isinstance(item, dict)]


async def record_recent_application(
    storage: KeyValueStore, app: AppRef, ignore: tuple = ()
) -> List[AppRef]:
    """Move ``app`` to the front of the recent applications list.

    Args:
        storage: Key-value store holding the list
        app: The application that just became frontmost
        ignore: Application names never recorded (e.g. the host itself)

    Returns:
        The updated list, at most MAX_RECENT_APPS long
    """
    recents = [
        a for a in await get_recent_applications(storage)
        if a.name != app.name and a.name not in ignore
    ]
    if app.name not in ignore:
        recents.insert(0, app)
    recents = recents[:MAX_RECENT_APPS]
    await storage.set_item(
        StorageKey.RECENT_APPS.value,
        json.dumps([a.model_dump() for a in recents]),
    )
    return recents


class PersistentVariable(BaseModel):
    """A variable that survives across resolutions (set/get/reset/delete)."""

    name: str
    value: str
    initial_value: str


async def load_variables(storage: KeyValueStore) -> List[PersistentVariable]:
    data = await _load_json(storage, StorageKey.PERSISTENT_VARIABLES, [])
    if not isinstance(data, list):
        return []
    return [PersistentVariable.model_validate(item) for item in data]


async def save_variables(storage: KeyValueStore, variables: List[PersistentVariable]) -> None:
    await storage.set_item(
        StorageKey.PERSISTENT_VARIABLES.value,
        json.dumps([v.model_dump() for v in variables]),
    )


async def get_variable(storage: KeyValueStore, name: str) -> Optional[str]:
    for variable in await load_variables(storage):
        if variable.name == name:
            return variable.value
    return None


async def set_variable(storage: KeyValueStore, name: str, value: str) -> None:
    """Set a variable and move it to the end of the list.

    A new variable remembers its first value as the reset target.
    """
    variables = await load_variables(storage)
    existing = next((v for v in variables if v.name == name), None)
    initial = existing.initial_value if existing is not None else value
    variables = [v for v in variables if v.name != name]
    variables.append(PersistentVariable(name=name, value=value, initial_value=initial))
    await save_variables(storage, variables)
    logger.info(f"Set persistent variable '{name}'")


async def reset_variable(storage: KeyValueStore, name: str) -> bool:
    variables = await load_variables(storage)
    for variable in variables:
        if variable.name == name:
            variable.value = variable.initial_value
            await save_variables(storage, variables)
            logger.info(f"Reset persistent variable '{name}'")
            return True
    return False


async def delete_variable(storage: KeyValueStore, name: str) -> bool:
    variables = await load_variables(storage)
    remaining = [v for v in variables if v.name != name]
    if len(remaining) == len(variables):
        return False
    await save_variables(storage, remaining)
    logger.info(f"Deleted persistent variable '{name}'")
    return True

