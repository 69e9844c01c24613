"""Pin expiration check."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, List, Optional

from pins.core.models import Pin, PinAction, Visibility
from pins.core.runtime.context import EngineServices, assemble_context

if TYPE_CHECKING:
    from pins.core.runtime.resolver import Resolver

logger = logging.getLogger(__name__)


def _plural(count: int, noun: str = "pin") -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


@dataclass
class ExpirationSummary:
    removed: int = 0
    hidden: int = 0
    disabled: int = 0
    custom: List[Pin] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.removed + self.hidden + self.disabled + len(self.custom)

    def message(self) -> str:
        """One-line summary, e.g. 'Removed 2 expired pins, hid 1 pin'."""
        parts = []
        if self.removed:
            parts.append(f"removed {_plural(self.removed, 'expired pin')}")
        if self.hidden:
            parts.append(f"hid {_plural(self.hidden)}")
        if self.disabled:
            parts.append(f"disabled {_plural(self.disabled)}")
        if self.custom:
            parts.append(f"ran custom expiration actions for {_plural(len(self.custom))}")
        if not parts:
            return ""
        text = ", ".join(parts)
        return text[0].upper() + text[1:]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


async def check_expirations(
    services: EngineServices,
    resolver: "Resolver",
    now: Optional[datetime] = None,
) -> ExpirationSummary:
    """Apply expiration actions to every pin whose expire_date has passed.

    - ``delete`` (the default) removes the pin
    - ``hide`` / ``disable`` set the pin's visibility
    - an action starting with ``custom`` is resolved with the pin in context

    Every expired pin that is kept has its expire_date cleared. A summary is
    shown through the notification surface when anything happened.
    """
    now = now or datetime.now(UTC)
    summary = ExpirationSummary()
    to_remove: List[Pin] = []
    to_update: List[Pin] = []

    for pin in await services.pins.list():
        if pin.expire_date is None or _as_utc(pin.expire_date) >= now:
            continue
        action = pin.expiration_action or PinAction.DELETE.value
        if action == PinAction.DELETE.value:
            to_remove.append(pin)
            summary.removed += 1
            continue
        if action == PinAction.HIDE.value:
            pin.visibility = Visibility.HIDDEN
            summary.hidden += 1
        elif action == PinAction.DISABLE.value:
            pin.visibility = Visibility.DISABLED
            summary.disabled += 1
        elif action.startswith("custom"):
            summary.custom.append(pin.model_copy(deep=True))
        pin.expire_date = None
        to_update.append(pin)

    if to_remove:
        await services.pins.remove(to_remove)
    if to_update:
        await services.pins.update(to_update)

    message = summary.message()
    if message:
        logger.info(message)
        if services.notifier is not None:
            await services.notifier.show_message(message)

    for pin in summary.custom:
        await resolver.resolve(pin.expiration_action, assemble_context(services, pin=pin))

    return summary
