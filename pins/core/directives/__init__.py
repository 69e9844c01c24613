"""Built-in directives.

Directives are declared with the @directive decorator and grouped by kind:
- informational: values from the environment, the stores and the clock
- static: delay, ai, launchPin/launchGroup, shell, variables, clipboard
- interactive: alerts, prompts and pin/group mutations
- script: the sandboxed Python script directive
"""

from typing import Iterable

from pins.core.directives import informational, interactive, script, static
from pins.core.directives.decorator import directive
from pins.core.models import Directive
from pins.core.registry import DirectiveRegistry

DEFAULT_DIRECTIVES = [
    *informational.DIRECTIVES,
    *static.DIRECTIVES,
    *interactive.DIRECTIVES,
    *script.DIRECTIVES,
]


def build_default_registry(extra: Iterable[Directive] = ()) -> DirectiveRegistry:
    """Assemble the session registry from the built-in directives.

    Args:
        extra: Additional directives appended after the built-ins

    Raises:
        DuplicateDirectiveError: If an extra directive reuses a spelling
    """
    return DirectiveRegistry([*DEFAULT_DIRECTIVES, *extra])


__all__ = ["DEFAULT_DIRECTIVES", "build_default_registry", "directive"]
