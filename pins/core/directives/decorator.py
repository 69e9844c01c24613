"""The @directive decorator for declaring directives."""

import inspect
from typing import Callable, Iterable

from pins.core.models import Directive, DirectiveKind, Handler, Rule


def directive(
    name: str,
    kind: DirectiveKind,
    *,
    aliases: Iterable[str] = (),
    constant: bool = False,
    eager: bool = False,
    rules: Iterable[Rule] = (),
    example: str = "",
) -> Callable[[Handler], Directive]:
    """Decorator that turns an async handler into a Directive.

    - The first paragraph of the handler's docstring becomes the description
    - The directive is NOT registered anywhere; modules list their
      directives and ``build_default_registry`` assembles them

    Args:
        name: Unique directive name
        kind: Resolution class of the directive
        aliases: Other spellings
        constant: Whether the result is stable within one resolution
        eager: Whether to resolve before everything else
        rules: Applicability rules
        example: Usage example; defaults to ``{{name}}``

    Raises:
        ValueError: If the handler has no docstring

    Example:
        @directive("uuid", DirectiveKind.INFORMATIONAL)
        async def uuid_directive(match, context):
            '''A new random UUID.'''
            return str(uuid.uuid4())
    """

    def decorate(func: Handler) -> Directive:
        if not func.__doc__:
            raise ValueError(
                f"Directive '{name}' must have a docstring. "
                "The docstring is used as the directive description."
            )
        description = inspect.cleandoc(func.__doc__).split("\n\n")[0].replace("\n", " ")
        return Directive(
            name=name,
            aliases=tuple(aliases),
            description=description,
            example=example or "{{" + name + "}}",
            kind=kind,
            constant=constant,
            eager=eager,
            rules=tuple(rules),
            handler=func,
        )

    return decorate
