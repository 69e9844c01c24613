"""Informational directives - substitute a value without side effects.

Constant directives report a value that is stable for one resolution (the
clipboard, the date, the pin list). When the context already holds a value
under the directive's name, the Resolver reuses it and the handler does not
run; handlers here read live state otherwise.

Live directives (pinJSON, uuid, get) are resolved after every side-effecting
directive so they observe its effects.
"""

import calendar
import getpass
import json
import logging
import os
import random
import socket
import uuid
from datetime import datetime
from typing import List, Sequence, TypeVar
from urllib.parse import quote

from pins.core.directives.decorator import directive
from pins.core.directives.rules import min_recent_applications
from pins.core.models import DirectiveKind, DirectiveResult, Pin
from pins.core.runtime.context import ResolutionContext
from pins.core.runtime.state import (
    get_last_opened_pin_id,
    get_recent_applications,
    get_variable,
)
from pins.core.syntax import DirectiveMatch

logger = logging.getLogger(__name__)

T = TypeVar("T")

INFO = DirectiveKind.INFORMATIONAL

# encodeURI leaves these unescaped
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


def escape_markers(text: str, open_with: str = "[[", close_with: str = "]]") -> str:
    """Neutralize directive markers in data so it cannot trigger directives."""
    return text.replace("{{", open_with).replace("}}", close_with)


def _named(name: str, value: str) -> DirectiveResult:
    return DirectiveResult(result=value, named_outputs={name: value})


def _amount(match: DirectiveMatch) -> int:
    raw = match.param("amount")
    return int(raw) if raw.isdigit() else -1


def _random_subset(items: Sequence[T], amount: int) -> List[T]:
    """Keep ``amount`` randomly chosen items, preserving their order."""
    if amount < 0 or amount >= len(items):
        return list(items)
    keep = set(random.sample(range(len(items)), amount))
    return [item for index, item in enumerate(items) if index in keep]


def sort_by_last_opened(pins: Sequence[Pin]) -> List[Pin]:
    """Most recently opened first; never-opened pins keep their order at the end."""
    opened = sorted(
        (p for p in pins if p.last_opened is not None),
        key=lambda p: p.last_opened,
        reverse=True,
    )
    return opened + [p for p in pins if p.last_opened is None]


# Ambient state


@directive("clipboardText", INFO, constant=True, aliases=("clipboard",))
async def clipboard_text(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The text currently on the clipboard."""
    text = await context.services.require_platform().get_clipboard_text()
    return _named("clipboardText", text or "")


@directive("selectedText", INFO, constant=True)
async def selected_text(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The text currently selected in the frontmost application."""
    text = await context.services.require_platform().get_selected_text()
    return _named("selectedText", text or "")


@directive("currentAppName", INFO, constant=True, aliases=("currentApp", "currentApplication"))
async def current_app_name(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The name of the frontmost application."""
    app = await context.services.require_platform().get_frontmost_application()
    return _named("currentAppName", app.name if app else "")


@directive("currentAppPath", INFO, constant=True)
async def current_app_path(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The path of the frontmost application."""
    app = await context.services.require_platform().get_frontmost_application()
    return _named("currentAppPath", app.path if app else "")


@directive("currentDirectory", INFO, constant=True)
async def current_directory(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The directory shown in the frontmost file browser window."""
    directory = await context.services.require_platform().get_current_directory()
    return _named("currentDirectory", directory.path if directory else "")


@directive("currentURL", INFO, constant=True, aliases=("currentTabURL",))
async def current_url(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The URL of the active browser tab."""
    tab = await context.services.require_platform().get_current_tab()
    return _named("currentURL", tab.url if tab else "")


@directive("currentTabName", INFO, constant=True, aliases=("currentTabTitle",))
async def current_tab_name(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The title of the active browser tab."""
    tab = await context.services.require_platform().get_current_tab()
    return _named("currentTabName", tab.name if tab else "")


@directive("selectedFiles", INFO, constant=True)
async def selected_files(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """Comma-separated paths of the files selected in the file browser."""
    files = await context.services.require_platform().get_selected_files()
    return _named("selectedFiles", ", ".join(f.path for f in files if f.path))


@directive("currentTrack", INFO, constant=True)
async def current_track(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The currently playing track, as 'name by artist'."""
    track = await context.services.require_platform().get_current_track()
    if track is None or not track.name:
        return _named("currentTrack", "")
    value = f"{track.name} by {track.artist}" if track.artist else track.name
    return _named("currentTrack", value)


# Date, time and system


@directive("date", INFO, constant=True, aliases=("currentDate",),
           example='{{date format="%d %B %Y"}}')
async def date(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The current date, formatted with strftime (``format=`` overrides)."""
    fmt = match.param("format") or context.settings.date_format
    value = datetime.now().strftime(fmt)
    if match.params:
        return DirectiveResult(result=value)
    return _named("date", value)


@directive("time", INFO, constant=True, aliases=("currentTime",),
           example='{{time format="%H:%M"}}')
async def time_of_day(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The current time, formatted with strftime (``format=`` overrides)."""
    fmt = match.param("format") or context.settings.time_format
    value = datetime.now().strftime(fmt)
    if match.params:
        return DirectiveResult(result=value)
    return _named("time", value)


@directive("day", INFO, constant=True, aliases=("dayName", "currentDay"))
async def day(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The name of the current weekday."""
    return _named("day", datetime.now().strftime("%A"))


@directive("timezone", INFO, constant=True)
async def timezone(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The name of the local timezone."""
    return _named("timezone", datetime.now().astimezone().tzname() or "")


@directive("user", INFO, constant=True, aliases=("username",))
async def user(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The current user's login name."""
    return _named("user", getpass.getuser())


@directive("homedir", INFO, constant=True, aliases=("homeDirectory",))
async def homedir(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The current user's home directory."""
    return _named("homedir", os.path.expanduser("~"))


@directive("hostname", INFO, constant=True)
async def hostname(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The machine's host name."""
    return _named("hostname", socket.gethostname())


@directive("monthCalendar", INFO, constant=True, aliases=("calendar",))
async def month_calendar(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """A table of the current month, weeks starting on Sunday."""
    today = datetime.now()
    table = calendar.TextCalendar(firstweekday=calendar.SUNDAY).formatmonth(
        today.year, today.month
    )
    return _named("monthCalendar", table.rstrip("\n"))


# Pins and groups


@directive("pinName", INFO, constant=True)
async def pin_name(match: DirectiveMatch, context: ResolutionContext) -> str:
    """The name of the pin being resolved."""
    return context.pin.name if context.pin else ""


@directive("pinNotes", INFO, constant=True)
async def pin_notes(match: DirectiveMatch, context: ResolutionContext) -> str:
    """The notes of the pin being resolved."""
    return context.pin.notes if context.pin else ""


@directive("pinNames", INFO, constant=True, example="{{pinNames amount=3}}")
async def pin_names(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """Comma-separated pin names, most recently opened first.

    With ``amount=N`` a random subset of N pins is used.
    """
    pins = _random_subset(await context.services.pins.list(), _amount(match))
    value = escape_markers(", ".join(p.name for p in sort_by_last_opened(pins)))
    return DirectiveResult(result=value, named_outputs={} if match.params else {"pinNames": value})


@directive("pinTargets", INFO, constant=True, example="{{pinTargets amount=3}}")
async def pin_targets(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """Comma-separated pin targets, most recently opened first.

    With ``amount=N`` a random subset of N pins is used.
    """
    pins = _random_subset(await context.services.pins.list(), _amount(match))
    value = escape_markers(", ".join(p.url for p in sort_by_last_opened(pins)))
    return DirectiveResult(result=value, named_outputs={} if match.params else {"pinTargets": value})


@directive("pins", INFO, constant=True, example="{{pins amount=3}}")
async def pins_json(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The JSON representation of all pins (or a random subset with ``amount=``)."""
    pins = _random_subset(await context.services.pins.list(), _amount(match))
    value = escape_markers(json.dumps([p.model_dump(mode="json") for p in pins]))
    return DirectiveResult(result=value, named_outputs={} if match.params else {"pins": value})


@directive("groupNames", INFO, constant=True, example="{{groupNames amount=3}}")
async def group_names(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """Comma-separated group names (or a random subset with ``amount=``)."""
    groups = _random_subset(await context.services.groups.list(), _amount(match))
    value = escape_markers(", ".join(g.name for g in groups))
    return DirectiveResult(result=value, named_outputs={} if match.params else {"groupNames": value})


@directive("groups", INFO, constant=True, example="{{groups amount=3}}")
async def groups_json(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The JSON representation of all groups (or a random subset with ``amount=``)."""
    groups = _random_subset(await context.services.groups.list(), _amount(match))
    value = escape_markers(json.dumps([g.model_dump(mode="json") for g in groups]))
    return DirectiveResult(result=value, named_outputs={} if match.params else {"groups": value})


@directive(
    "previousApplication",
    INFO,
    constant=True,
    aliases=(
        "previousApp", "previousAppName", "lastApp", "lastAppName",
        "lastApplication", "previousApplicationName", "lastApplicationName",
    ),
    rules=(min_recent_applications(2),),
)
async def previous_application(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The application focused before the current one.

    Left untouched when fewer than two recent applications are recorded.
    """
    recents = await get_recent_applications(context.services.storage)
    return _named("previousApplication", recents[1].name)


async def _previous_pin(context: ResolutionContext) -> Pin | None:
    pin_id = await get_last_opened_pin_id(context.services.storage)
    if pin_id is None:
        return None
    return next((p for p in await context.services.pins.list() if p.id == pin_id), None)


@directive("previousPinName", INFO, constant=True, aliases=("lastPinName",))
async def previous_pin_name(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The URL-encoded name of the most recently opened pin, or "" if none."""
    pin = await _previous_pin(context)
    return _named("previousPinName", quote(pin.name, safe=_URI_SAFE) if pin else "")


@directive("previousPinTarget", INFO, constant=True, aliases=("lastPinTarget", "previousTarget"))
async def previous_pin_target(match: DirectiveMatch, context: ResolutionContext) -> DirectiveResult:
    """The URL-encoded target of the most recently opened pin, or "" if none."""
    pin = await _previous_pin(context)
    return _named("previousPinTarget", quote(pin.url, safe=_URI_SAFE) if pin else "")


# Live reads


@directive("pinJSON", INFO)
async def pin_json(match: DirectiveMatch, context: ResolutionContext) -> str:
    """The JSON representation of the current pin, as currently stored."""
    if context.pin is None:
        return ""
    stored = next(
        (p for p in await context.services.pins.list() if p.id == context.pin.id),
        context.pin,
    )
    data = {"groups": [], "pins": [stored.model_dump(mode="json")]}
    return escape_markers(json.dumps(data), "[[[", "]]]")


@directive("uuid", INFO, aliases=("UUID",))
async def uuid_directive(match: DirectiveMatch, context: ResolutionContext) -> str:
    """A new random UUID."""
    return str(uuid.uuid4())


@directive("get", INFO, example="{{get:counter}}")
async def get_persistent_variable(match: DirectiveMatch, context: ResolutionContext) -> str:
    """The value of a persistent variable, or "" if it is not set."""
    name = (match.body or "").strip()
    if not name:
        return ""
    return await get_variable(context.services.storage, name) or ""


DIRECTIVES = [
    clipboard_text,
    selected_text,
    current_app_name,
    current_app_path,
    current_directory,
    current_url,
    current_tab_name,
    selected_files,
    current_track,
    date,
    time_of_day,
    day,
    timezone,
    user,
    homedir,
    hostname,
    month_calendar,
    pin_name,
    pin_notes,
    pin_names,
    pin_targets,
    pins_json,
    group_names,
    groups_json,
    previous_application,
    previous_pin_name,
    previous_pin_target,
    pin_json,
    uuid_directive,
    get_persistent_variable,
]
