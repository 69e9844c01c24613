"""Tests for pins.core.runtime.state module."""

import json

import pytest

from pins.core.constants import StorageKey
from pins.core.models import AppRef
from pins.core.runtime.state import (
    MAX_RECENT_APPS,
    delete_variable,
    get_last_opened_pin_id,
    get_recent_applications,
    get_variable,
    load_variables,
    record_recent_application,
    reset_variable,
    set_last_opened_pin_id,
    set_variable,
)
from pins.storage import InMemoryKeyValueStore


@pytest.fixture
def storage():
    """An empty key-value store."""
    return InMemoryKeyValueStore()


class TestLastOpenedPin:
    """Test suite for the last opened pin."""

    @pytest.mark.asyncio
    async def test_round_trip(self, storage):
        """Test storing and reading the last opened pin id."""
        assert await get_last_opened_pin_id(storage) is None
        await set_last_opened_pin_id(storage, "abc123")
        assert await get_last_opened_pin_id(storage) == "abc123"


class TestRecentApplications:
    """Test suite for the recent applications list."""

    @pytest.mark.asyncio
    async def test_most_recent_first_without_duplicates(self, storage):
        """Test that re-recording an app moves it to the front."""
        await record_recent_application(storage, AppRef(name="Safari"))
        await record_recent_application(storage, AppRef(name="Mail"))
        await record_recent_application(storage, AppRef(name="Safari"))

        names = [a.name for a in await get_recent_applications(storage)]
        assert names == ["Safari", "Mail"]

    @pytest.mark.asyncio
    async def test_ignored_apps_not_recorded(self, storage):
        """Test that ignored names are never stored."""
        await record_recent_application(storage, AppRef(name="Pins"), ignore=("Pins",))
        assert await get_recent_applications(storage) == []

    @pytest.mark.asyncio
    async def test_list_is_capped(self, storage):
        """Test that only the most recent applications are kept."""
        for i in range(MAX_RECENT_APPS + 3):
            await record_recent_application(storage, AppRef(name=f"App{i}"))
        recents = await get_recent_applications(storage)
        assert len(recents) == MAX_RECENT_APPS
        assert recents[0].name == f"App{MAX_RECENT_APPS + 2}"

    @pytest.mark.asyncio
    async def test_malformed_value_is_empty(self, storage):
        """Test that unparseable stored data reads as no applications."""
        await storage.set_item(StorageKey.RECENT_APPS.value, "not json")
        assert await get_recent_applications(storage) == []


class TestPersistentVariables:
    """Test suite for persistent variables."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, storage):
        """Test setting and reading a variable."""
        await set_variable(storage, "counter", "1")
        assert await get_variable(storage, "counter") == "1"
        assert await get_variable(storage, "missing") is None

    @pytest.mark.asyncio
    async def test_set_moves_variable_to_end(self, storage):
        """Test that the most recently set variable is last."""
        await set_variable(storage, "a", "1")
        await set_variable(storage, "b", "2")
        await set_variable(storage, "a", "3")
        assert [v.name for v in await load_variables(storage)] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_reset_restores_initial_value(self, storage):
        """Test that reset returns a variable to its first value."""
        await set_variable(storage, "counter", "1")
        await set_variable(storage, "counter", "5")
        assert await reset_variable(storage, "counter")
        assert await get_variable(storage, "counter") == "1"
        assert not await reset_variable(storage, "missing")

    @pytest.mark.asyncio
    async def test_delete(self, storage):
        """Test deleting a variable."""
        await set_variable(storage, "counter", "1")
        assert await delete_variable(storage, "counter")
        assert await get_variable(storage, "counter") is None
        assert not await delete_variable(storage, "counter")

    @pytest.mark.asyncio
    async def test_stored_format(self, storage):
        """Test the stored JSON shape."""
        await set_variable(storage, "x", "y")
        raw = await storage.get_item(StorageKey.PERSISTENT_VARIABLES.value)
        assert json.loads(raw) == [{"name": "x", "value": "y", "initial_value": "y"}]
