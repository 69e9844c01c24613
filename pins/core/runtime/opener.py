"""Pin opening - resolve a pin's target and hand it to the platform."""

import logging
import os
import re
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Mapping, Optional

from pins.core.exceptions import LaunchDepthExceededError
from pins.core.models import EnvironmentSnapshot, Pin
from pins.core.runtime.context import EngineServices, assemble_context
from pins.core.runtime.state import set_last_opened_pin_id

if TYPE_CHECKING:
    from pins.core.runtime.resolver import Resolver

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"^[a-zA-Z](?![%])[a-zA-Z0-9+.-]+?:.*")


def expand_home(target: str) -> str:
    """Replace a leading ``~`` with the user's home directory."""
    if target.startswith("~"):
        return os.path.expanduser("~") + target[1:]
    return target


def is_path_target(raw_target: str) -> bool:
    return raw_target.startswith("/") or raw_target.startswith("~")


def is_url_target(target: str) -> bool:
    return bool(_URL_RE.match(target))


def _failure_label(pin: Pin) -> str:
    if pin.name:
        return pin.name
    return pin.url if len(pin.url) <= 20 else pin.url[:19] + "..."


async def open_pin(
    pin: Pin,
    resolver: "Resolver",
    services: EngineServices,
    environment: Optional[EnvironmentSnapshot] = None,
    extras: Optional[Mapping[str, Any]] = None,
    depth: int = 0,
) -> str:
    """Use a pin: resolve its target, then copy, open or run it.

    - Fragment pins copy their raw target to the clipboard.
    - Path targets (``/`` or ``~``) must exist and are opened.
    - URL-like targets are opened with the pin's application, if any.
    - Anything else is run as a shell command.

    Failures are reported through the notification surface and do not
    raise. The pin's usage statistics are updated either way.

    Args:
        pin: The pin to open
        resolver: Resolver used for the target string
        services: External collaborators
        environment: Ambient data captured by the platform layer
        extras: Extra context values
        depth: Launch nesting depth; directives that open pins pass
            their context's depth plus one

    Returns:
        The resolved target ("" for fragments and failures)

    Raises:
        LaunchDepthExceededError: If ``depth`` exceeds max_launch_depth
    """
    max_depth = services.settings.max_launch_depth
    if depth > max_depth:
        raise LaunchDepthExceededError(
            f"Opening '{pin.name}' exceeds the launch depth limit of {max_depth}"
        )

    started = time.monotonic()
    target = ""
    try:
        if pin.fragment:
            platform = services.require_platform()
            await platform.set_clipboard_text(pin.url)
            if services.notifier is not None:
                await services.notifier.show_toast("Copied To Clipboard")
            await set_last_opened_pin_id(services.storage, pin.id)
        else:
            context = assemble_context(
                services, pin=pin, environment=environment, extras=extras, depth=depth
            )
            target = await resolver.resolve(expand_home(pin.url), context)
            if target:
                await _dispatch(pin, target, services)
    except Exception as e:
        logger.warning(f"Failed to open pin '{pin.name}'", exc_info=True)
        target = ""
        if services.notifier is not None:
            await services.notifier.show_message(f"Failed to open {_failure_label(pin)}: {e}")

    elapsed_ms = int((time.monotonic() - started) * 1000)
    await _record_usage(pin, services, elapsed_ms)
    return target


async def _dispatch(pin: Pin, target: str, services: EngineServices) -> None:
    platform = services.require_platform()
    application = None if pin.application in ("", "None") else pin.application

    if is_path_target(pin.url):
        if not os.path.exists(target):
            raise FileNotFoundError("File does not exist.")
        await platform.open_target(os.path.abspath(target), application)
    elif is_url_target(target):
        await platform.open_target(target, application)
    else:
        await platform.run_shell(target)
    await set_last_opened_pin_id(services.storage, pin.id)
    logger.info(f"Opened pin '{pin.name}'")


async def _record_usage(pin: Pin, services: EngineServices, elapsed_ms: int) -> None:
    """Update last_opened, times_opened and average_execution_time.

    The stored pin is re-read first so changes made by directives during
    resolution (e.g. a move) are not overwritten. A pin deleted during its
    own resolution is left deleted.
    """
    try:
        stored = next((p for p in await services.pins.list() if p.id == pin.id), None)
        if stored is None:
            return
        times = stored.times_opened
        if stored.average_execution_time:
            average = round((stored.average_execution_time * times + elapsed_ms) / (times + 1))
        else:
            average = elapsed_ms
        stored.last_opened = datetime.now(UTC)
        stored.times_opened = times + 1
        stored.average_execution_time = average
        await services.pins.update([stored])
    except Exception:
        logger.warning(f"Failed to record usage of pin '{pin.name}'", exc_info=True)
