"""Interactive directives - messages, prompts and pin/group mutations.

Mutations are committed to the stores as soon as each handler returns, so
later directives in the same resolution observe them.
"""

import logging

from pins.core.directives.decorator import directive
from pins.core.directives.static import find_group, find_pin
from pins.core.models import DirectiveKind, Group, Pin, Visibility
from pins.core.runtime.context import ResolutionContext
from pins.core.syntax import DirectiveMatch

logger = logging.getLogger(__name__)

INTERACTIVE = DirectiveKind.INTERACTIVE

NO_GROUP = "None"
EXPIRED_GROUP = "Expired Pins"

_TRUTHY = {"true", "yes", "1"}


async def ensure_group(context: ResolutionContext, name: str) -> None:
    """Create the named group if it does not exist yet."""
    if name == NO_GROUP or await find_group(context, name) is not None:
        return
    if name == EXPIRED_GROUP:
        group = Group(name=name, icon="BellDisabled", visibility=Visibility.HIDDEN)
    else:
        group = Group(name=name, icon="None")
    await context.services.groups.add([group])
    logger.info(f"Created group '{name}'")


@directive("alert", INTERACTIVE, example='{{alert title="Reminder":Drink water}}')
async def alert(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Shows a modal alert and waits until it is dismissed."""
    await context.services.require_notifier().show_alert(
        match.param("title") or "Alert", match.body or ""
    )
    return ""


@directive("dialog", INTERACTIVE, example='{{dialog title="Name" input=true:What is your name?}}')
async def dialog(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Shows a dialog; with ``input=true`` the entered text is substituted."""
    notifier = context.services.require_notifier()
    title = match.param("title") or "Dialog"
    if match.param("input").lower() in _TRUTHY:
        answer = await notifier.prompt_user(match.body or "", title=title)
        return answer or ""
    await notifier.show_alert(title, match.body or "")
    return ""


@directive("toast", INTERACTIVE, aliases=("hud",), example='{{toast message="Done":Backup}}')
async def toast(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Shows a short notification."""
    await context.services.require_notifier().show_toast(
        match.body or "", match.param("message")
    )
    return ""


@directive("say", INTERACTIVE, aliases=("speak",), example='{{say voice="Samantha":Hello}}')
async def say(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Speaks the body aloud."""
    await context.services.require_platform().speak(
        match.body or "", match.param("voice") or None
    )
    return ""


@directive("input", INTERACTIVE, aliases=("prompt",), example="{{input:Search for}}")
async def user_input(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Asks the user for text and substitutes the answer."""
    answer = await context.services.require_notifier().prompt_user(
        match.body or "Input", title=match.param("title")
    )
    return answer or ""


@directive("createPin", INTERACTIVE, example="{{createPin:myPinName:myPinTarget:myPinGroup}}")
async def create_pin(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Creates a new pin; the target defaults to the name, the group to 'None'."""
    args = match.arguments(3)
    name = args[0].strip() if args else ""
    if not name:
        return ""
    target = args[1] if len(args) > 1 and args[1] else name
    group = match.param("group") or (args[2].strip() if len(args) > 2 and args[2].strip() else NO_GROUP)

    await ensure_group(context, group)
    await context.services.pins.add([Pin(name=name, url=target, group=group)])
    logger.info(f"Created pin '{name}' in group '{group}'")
    return ""


@directive("deletePin", INTERACTIVE, example="{{deletePin silent=true:myPinName}}")
async def delete_pin(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Deletes a pin, asking for confirmation unless ``silent=true``."""
    ref = (match.body or "").strip()
    pin = await find_pin(context, ref) if ref else None
    if pin is None:
        return ""
    if match.param("silent").lower() not in _TRUTHY:
        confirmed = await context.services.require_notifier().confirm(
            f"Are you sure you want to delete the pin '{pin.name}'?", title="Delete Pin"
        )
        if not confirmed:
            return ""
    await context.services.pins.remove([pin])
    logger.info(f"Deleted pin '{pin.name}'")
    return ""


@directive("movePin", INTERACTIVE, example="{{movePin:pinName:groupName}}")
async def move_pin(match: DirectiveMatch, context: ResolutionContext) -> str:
    """Moves a pin to a group, creating the group if needed."""
    args = match.arguments(2)
    if len(args) < 2 or not args[0].strip() or not args[1].strip():
        return ""
    pin = await find_pin(context, args[0].strip())
    if pin is None:
        return ""
    group = args[1].strip()
    await ensure_group(context, group)
    pin.group = group
    await context.services.pins.update([pin])
    logger.info(f"Moved pin '{pin.name}' to group '{group}'")
    return ""


DIRECTIVES = [
    alert,
    dialog,
    toast,
    say,
    user_input,
    create_pin,
    delete_pin,
    move_pin,
]
