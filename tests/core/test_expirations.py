"""Tests for pins.core.scheduling.expirations module."""

from datetime import UTC, datetime, timedelta

import pytest

from pins.core.models import Pin, Visibility
from pins.core.scheduling import ExpirationSummary, check_expirations

NOW = datetime(2030, 1, 1, tzinfo=UTC)
PAST = NOW - timedelta(hours=1)
FUTURE = NOW + timedelta(hours=1)


class TestExpirationSummary:
    """Test suite for ExpirationSummary."""

    def test_message(self):
        """Test the one-line summary."""
        summary = ExpirationSummary(removed=2, hidden=1)
        assert summary.message() == "Removed 2 expired pins, hid 1 pin"
        assert summary.total == 3

    def test_empty_message(self):
        """Test that nothing happened means no message."""
        assert ExpirationSummary().message() == ""


class TestCheckExpirations:
    """Test suite for check_expirations."""

    @pytest.mark.asyncio
    async def test_actions(self, services, resolver, notifier):
        """Test delete, hide and disable actions and untouched pins."""
        await services.pins.add([
            Pin(name="gone", expire_date=PAST),
            Pin(name="hidden", expire_date=PAST, expiration_action="hide"),
            Pin(name="disabled", expire_date=PAST, expiration_action="disable"),
            Pin(name="later", expire_date=FUTURE),
            Pin(name="forever"),
        ])

        summary = await check_expirations(services, resolver, now=NOW)

        pins = {p.name: p for p in await services.pins.list()}
        assert "gone" not in pins
        assert pins["hidden"].visibility == Visibility.HIDDEN
        assert pins["hidden"].expire_date is None
        assert pins["disabled"].visibility == Visibility.DISABLED
        assert pins["later"].expire_date is not None
        assert summary.total == 3
        notifier.show_message.assert_awaited_once_with(
            "Removed 1 expired pin, hid 1 pin, disabled 1 pin"
        )

    @pytest.mark.asyncio
    async def test_custom_action_resolved_with_pin(self, services, resolver):
        """Test that a custom action is resolved with the pin in context."""
        await services.pins.add([
            Pin(name="report", expire_date=PAST,
                expiration_action="custom {{movePin:{{pinName}}:Expired Pins}}"),
        ])

        summary = await check_expirations(services, resolver, now=NOW)

        assert len(summary.custom) == 1
        pin = (await services.pins.list())[0]
        assert pin.group == "Expired Pins"
        assert pin.expire_date is None
        group = (await services.groups.list())[0]
        assert group.visibility == Visibility.HIDDEN

    @pytest.mark.asyncio
    async def test_nothing_expired(self, services, resolver, notifier):
        """Test that no message is shown when nothing expired."""
        await services.pins.add([Pin(name="later", expire_date=FUTURE)])
        summary = await check_expirations(services, resolver, now=NOW)
        assert summary.total == 0
        notifier.show_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_naive_expire_date(self, services, resolver):
        """Test that naive expiration dates compare as UTC."""
        await services.pins.add([Pin(name="gone", expire_date=PAST.replace(tzinfo=None))])
        await check_expirations(services, resolver, now=NOW)
        assert await services.pins.list() == []
