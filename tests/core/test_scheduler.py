"""Tests for pins.core.scheduling.scheduler module."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from pins.core.constants import StorageKey
from pins.core.directives import directive
from pins.core.models import DirectiveKind
from pins.core.registry import DirectiveRegistry
from pins.core.runtime import Resolver
from pins.core.scheduling import DeferredEvaluationScheduler

DUE = datetime(2030, 6, 1, 12, 0, tzinfo=UTC)


def recording_resolver(settings, calls):
    @directive("record", DirectiveKind.STATIC)
    async def record(match, ctx):
        """Records its body."""
        calls.append(match.body)
        return ""

    return Resolver(DirectiveRegistry([record]), settings)


class TestDeferredEvaluationScheduler:
    """Test suite for the DeferredEvaluationScheduler class."""

    @pytest.mark.asyncio
    async def test_schedule_returns_handle(self, services):
        """Test that schedule persists a record and returns (target, due)."""
        scheduler = DeferredEvaluationScheduler(services.storage)
        handle = await scheduler.schedule("{{record:a}}", DUE)

        assert handle == ("{{record:a}}", DUE)
        raw = json.loads(await services.storage.get_item(StorageKey.DELAYED_EXECUTIONS.value))
        assert raw[0]["target"] == "{{record:a}}"
        assert datetime.fromisoformat(raw[0]["due_date"].replace("Z", "+00:00")) == DUE

    @pytest.mark.asyncio
    async def test_cancel(self, services):
        """Test that cancel removes only the matching record."""
        scheduler = DeferredEvaluationScheduler(services.storage)
        handle = await scheduler.schedule("a", DUE)
        await scheduler.schedule("b", DUE)

        assert await scheduler.cancel(*handle)
        assert [r.target for r in await scheduler.load()] == ["b"]
        # absent record is a no-op
        assert not await scheduler.cancel(*handle)

    @pytest.mark.asyncio
    async def test_not_yet_due_is_kept(self, services, settings):
        """Test that checkDue before the due date resolves nothing."""
        calls = []
        scheduler = DeferredEvaluationScheduler(services.storage)
        await scheduler.schedule("{{record:a}}", DUE)

        processed = await scheduler.check_due(
            recording_resolver(settings, calls), services, now=DUE - timedelta(seconds=1)
        )

        assert processed == []
        assert calls == []
        assert len(await scheduler.load()) == 1

    @pytest.mark.asyncio
    async def test_due_resolved_exactly_once(self, services, settings):
        """Test that a due record is resolved once and removed."""
        calls = []
        resolver = recording_resolver(settings, calls)
        scheduler = DeferredEvaluationScheduler(services.storage)
        await scheduler.schedule("{{record:a}}", DUE)
        await scheduler.schedule("{{record:later}}", DUE + timedelta(days=1))

        processed = await scheduler.check_due(resolver, services, now=DUE)
        again = await scheduler.check_due(resolver, services, now=DUE)

        assert [r.target for r in processed] == ["{{record:a}}"]
        assert again == []
        assert calls == ["a"]
        assert [r.target for r in await scheduler.load()] == ["{{record:later}}"]

    @pytest.mark.asyncio
    async def test_failing_resolution_still_removed(self, services):
        """Test at-most-once delivery when resolution raises."""
        resolver = AsyncMock()
        resolver.resolve = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler = DeferredEvaluationScheduler(services.storage)
        await scheduler.schedule("anything", DUE)

        processed = await scheduler.check_due(resolver, services, now=DUE)

        assert len(processed) == 1
        assert await scheduler.load() == []

    @pytest.mark.asyncio
    async def test_records_scheduled_during_resolution_survive(self, services, settings):
        """Test that a due target scheduling a new record does not lose it."""
        scheduler = DeferredEvaluationScheduler(services.storage)

        @directive("again", DirectiveKind.STATIC)
        async def again(match, ctx):
            """Schedules another evaluation."""
            await DeferredEvaluationScheduler(ctx.services.storage).schedule(
                "next", DUE + timedelta(hours=1)
            )
            return ""

        resolver = Resolver(DirectiveRegistry([again]), settings)
        await scheduler.schedule("{{again}}", DUE)

        await scheduler.check_due(resolver, services, now=DUE)

        assert [r.target for r in await scheduler.load()] == ["next"]

    @pytest.mark.asyncio
    async def test_single_write_per_check(self, services, settings):
        """Test that check_due persists the remainder in one write."""
        scheduler = DeferredEvaluationScheduler(services.storage)
        await scheduler.schedule("a", DUE)
        await scheduler.schedule("b", DUE)

        set_item = AsyncMock(wraps=services.storage.set_item)
        services.storage.set_item = set_item
        await scheduler.check_due(recording_resolver(settings, []), services, now=DUE)

        assert set_item.await_count == 1

    @pytest.mark.asyncio
    async def test_malformed_records_skipped(self, services):
        """Test that unreadable stored records are ignored."""
        await services.storage.set_item(
            StorageKey.DELAYED_EXECUTIONS.value,
            json.dumps([{"target": "ok", "due_date": DUE.isoformat()}, {"nope": 1}]),
        )
        scheduler = DeferredEvaluationScheduler(services.storage)
        assert [r.target for r in await scheduler.load()] == ["ok"]
