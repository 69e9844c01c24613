"""Static directives - side effects that need no user interaction."""

import logging
import re
from datetime import UTC, datetime, timedelta
from typing import Optional

from pins.core.directives.decorator import directive
from pins.core.models import DirectiveKind, Group, Pin
from pins.core.runtime.context import ResolutionContext
from pins.core.runtime.opener import open_pin
from pins.core.runtime.state import delete_variable, reset_variable, set_variable
from pins.core.scheduling.scheduler import DeferredEvaluationScheduler
from pins.core.syntax import DirectiveMatch

logger = logging.getLogger(__name__)

STATIC = DirectiveKind.STATIC

_DURATION_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(ms|milliseconds?|s|secs?|seconds?|m|mins?|minutes?|h|hrs?|hours?|d|days?)?",
    re.IGNORECASE,
)
_UNIT_SECONDS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(text: str) -> timedelta:
    """Parse durations like ``90``, ``5m``, ``1h30m`` or ``2 days``.

    A bare number is a number of seconds.

    Raises:
        ValueError: If no duration is found
    """
    total = 0.0
    found = False
    for amount, unit in _DURATION_RE.findall(text):
        found = True
        unit = (unit or "s").lower()
        if unit.startswith("ms") or unit.startswith("milli"):
            key = "ms"
        elif unit.startswith("mi") or unit == "m":
            key = "m"
        else:
            key = unit[0]
        total += float(amount) * _UNIT_SECONDS[key]
    if not found:
        raise ValueError(f"No duration in {text!r}")
    return timedelta(seconds=total)


async def find_pin(context: ResolutionContext, ref: str) -> Optional[Pin]:
    return next((p for p in await context.services.pins.list() if p.matches_reference(ref)), None)


async def find_group(context: ResolutionContext, ref: str) -> Optional[Group]:
    return next((g for g in await context.services.groups.list() if g.matches_reference(ref)), None)


@directive("delay", STATIC, eager=True, example="{{delay 5m:{{toast:Stand up}}}}")
async def delay(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Schedules the body to be resolved after a delay.

    The body is captured verbatim, so directives inside it run later.
    """
    target = match.body or ""
    if not target:
        return ""
    wait = parse_duration(" ".join(match.flags) or match.param("duration"))
    due = datetime.now(UTC) + wait
    await DeferredEvaluationScheduler(context.services.storage).schedule(target, due)
    if context.services.notifier is not None:
        await context.services.notifier.show_toast("Scheduled Delayed Evaluation")
    return ""


@directive("ai", STATIC, aliases=("askAI", "AI"),
           example='{{ai model="claude-3-5-haiku-latest" creativity=0.5:Summarize {{clipboardText}}}}')
async def ai(match: DirectiveMatch, context: ResolutionContext) -> str:
    """The response to a prompt from the configured AI model.

    Failed attempts are retried with a shorter prompt.
    """
    prompt = match.body or ""
    if not prompt.strip():
        return ""
    settings = context.settings
    llm = context.services.require_llm()
    model = match.param("model") or None
    creativity = float(match.param("creativity") or settings.ai_default_creativity)

    prompt = prompt[: settings.ai_max_prompt_chars]
    last_error: Optional[Exception] = None
    for attempt in range(1, settings.ai_max_attempts + 1):
        try:
            response = await llm.complete(prompt, model=model, creativity=creativity)
            return response.strip().replace('"', "'")
        except Exception as e:
            last_error = e
            logger.warning(f"AI attempt {attempt} failed with a {len(prompt)}-char prompt: {e}")
            prompt = prompt[: int(len(prompt) / 1.5)]
    raise RuntimeError(f"AI completion failed after {settings.ai_max_attempts} attempts") from last_error


@directive("launchPin", STATIC, aliases=("openPin", "runPin"), example="{{launchPin:myPinName}}")
async def launch_pin(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Opens another pin by name, id or alias."""
    ref = (match.body or "").strip()
    pin = await find_pin(context, ref) if ref else None
    if pin is None or context.resolver is None:
        return ""
    await open_pin(pin, context.resolver, context.services, depth=context.depth + 1)
    return ""


@directive("launchGroup", STATIC, aliases=("openGroup",), example="{{launchGroup:myGroupName}}")
async def launch_group(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Opens every pin in a group, in stored order."""
    ref = (match.body or "").strip()
    group = await find_group(context, ref) if ref else None
    if group is None or context.resolver is None:
        return ""
    for pin in await context.services.pins.list():
        if pin.group == group.name:
            await open_pin(pin, context.resolver, context.services, depth=context.depth + 1)
    return ""


@directive("shell", STATIC, example="{{shell:ls ~/Desktop}}")
async def shell(match: DirectiveMatch, context: ResolutionContext) -> str:
    """The output of a shell command."""
    command = match.body or ""
    if not command.strip():
        return ""
    output = await context.services.require_platform().run_shell(command)
    return output.rstrip("\n")


@directive("set", STATIC, aliases=("setVar",), example="{{set:counter:1}}")
async def set_persistent_variable(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Sets a persistent variable."""
    args = match.arguments(2)
    if len(args) < 2 or not args[0].strip():
        return ""
    await set_variable(context.services.storage, args[0].strip(), args[1])
    return ""


@directive("reset", STATIC, aliases=("resetVar",), example="{{reset:counter}}")
async def reset_persistent_variable(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Resets a persistent variable to its first value."""
    name = (match.body or "").strip()
    if name:
        await reset_variable(context.services.storage, name)
    return ""


@directive("delete", STATIC, aliases=("deleteVar",), example="{{delete:counter}}")
async def delete_persistent_variable(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Deletes a persistent variable."""
    name = (match.body or "").strip()
    if name:
        await delete_variable(context.services.storage, name)
    return ""


@directive("copy", STATIC, example="{{copy:Hello}}")
async def copy(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Copies the body to the clipboard."""
    await context.services.require_platform().set_clipboard_text(match.body or "")
    return ""


@directive("paste", STATIC, example="{{paste:Hello}}")
async def paste(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Pastes the body into the frontmost application."""
    await context.services.require_platform().paste_text(match.body or "")
    return ""


@directive("ignore", STATIC, aliases=("IGNORE",), example="{{ignore:{{shell:touch ~/done}}}}")
async def ignore(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Discards the body after directives inside it have run."""
    if match.body and context.resolver is not None:
        await context.resolver.resolve(match.body, context)
    return ""


DIRECTIVES = [
    delay,
    ai,
    shell,
    launch_pin,
    launch_group,
    set_persistent_variable,
    reset_persistent_variable,
    delete_persistent_variable,
    copy,
    paste,
    ignore,
]
