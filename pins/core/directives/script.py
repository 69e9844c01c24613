"""The Script directive."""

import logging

from pins.core.constants import SCRIPT_TARGET_PARAM
from pins.core.directives.decorator import directive
from pins.core.exceptions import ScriptRuntimeError, ScriptSecurityError, ScriptTimeoutError
from pins.core.models import DirectiveKind
from pins.core.runtime.context import ResolutionContext
from pins.core.sandbox import ScriptSandbox
from pins.core.syntax import DirectiveMatch

logger = logging.getLogger(__name__)


@directive(
    "script",
    DirectiveKind.SCRIPT,
    aliases=("py", "python"),
    example="{{py:len((await pinNames()).split(', '))}}",
)
async def script(match: DirectiveMatch, context: ResolutionContext) -> str:
    """The value of the final expression of a sandboxed Python script.

    Every other directive is callable from the script as an async function,
    e.g. ``await date()`` or ``await movePin("Alpha", "Archive")``. With
    ``target="<browser>"`` the body runs as JavaScript in the active tab of
    that browser instead.
    """
    source = match.body or ""
    if not source.strip():
        return ""

    browser = match.param(SCRIPT_TARGET_PARAM)
    if browser:
        return await context.services.require_platform().run_in_browser_tab(source, browser)

    if context.resolver is None:
        raise RuntimeError("Script directive requires an active resolver")
    sandbox = ScriptSandbox.for_context(context.resolver, context)
    try:
        return await sandbox.run(source)
    except ScriptTimeoutError:
        logger.warning(f"Script timed out after {sandbox.timeout}s")
        return ""
    except ScriptSecurityError as e:
        logger.warning(f"Script rejected: {e}")
        return ""
    except ScriptRuntimeError as e:
        logger.warning(f"Script failed: {e}")
        return ""


DIRECTIVES = [script]
