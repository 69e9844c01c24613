"""Resolver - the fixpoint loop that expands directives in a target string."""

import logging
from collections import Counter
from dataclasses import replace
from typing import Dict, Optional, Tuple, Union

from pins.config import EngineSettings
from pins.core.models import Directive, DirectiveResult
from pins.core.registry import DirectiveRegistry, is_applicable
from pins.core.runtime.context import ResolutionContext
from pins.core.syntax import DirectiveMatch, contains_marker, find_directive

logger = logging.getLogger(__name__)


class Resolver:
    """Turns a raw target string into its fully substituted form.

    Directives are applied in resolution order (see ``resolution_rank``).
    For each directive the leftmost occurrence is found, checked for
    applicability, handled and replaced; then scanning continues. Passes
    over the whole registry repeat while they still substitute something.
    Each directive may substitute at most ``max_iterations`` times per
    resolution, which bounds handlers whose output re-introduces their own
    trigger.

    Occurrences whose rules reject are left as literal text. A handler that
    raises is replaced by ``""``. Side effects are committed as handlers
    return and are never rolled back.

    Example:
        ```python
        resolver = Resolver(build_default_registry())
        context = assemble_context(services, pin=pin)
        text = await resolver.resolve(pin.url, context)
        ```
    """

    def __init__(
        self,
        registry: DirectiveRegistry,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.registry = registry
        self._settings = settings

    def max_iterations(self, context: ResolutionContext) -> int:
        settings = self._settings or context.settings
        return settings.max_iterations

    async def resolve(self, target: str, context: ResolutionContext) -> str:
        """Resolve ``target``. Never raises."""
        text, _ = await self.resolve_with_context(target, context)
        return text

    async def resolve_with_context(
        self, target: str, context: ResolutionContext
    ) -> Tuple[str, ResolutionContext]:
        """Resolve ``target`` and also return the context after named outputs."""
        if not contains_marker(target):
            return target, context
        context = replace(context, resolver=self)
        text = target
        counts: Counter = Counter()
        try:
            changed = True
            while changed:
                changed = False
                for directive in self.registry.ordered():
                    text, context, substituted = await self._apply(
                        directive, text, context, counts
                    )
                    changed = changed or substituted
                if not contains_marker(text):
                    break
        except Exception:
            logger.warning(f"Resolution of {target!r} aborted", exc_info=True)
        return text, context

    async def _apply(
        self,
        directive: Directive,
        text: str,
        context: ResolutionContext,
        counts: Counter,
    ) -> Tuple[str, ResolutionContext, bool]:
        cap = self.max_iterations(context)
        cache: Dict[str, str] = {}
        position = 0
        substituted = False
        while counts[directive.name] < cap:
            match = find_directive(
                text, directive.spellings, position, innermost=not directive.eager
            )
            if match is None:
                break

            if directive.constant and match.text in cache:
                result = cache[match.text]
            elif (
                directive.constant
                and match.body is None
                and not match.params
                and directive.name in context.values
            ):
                result = context.values[directive.name]
            elif not await is_applicable(directive, match.text, context):
                position = match.end
                continue
            else:
                outcome = await self._invoke(directive, match, context)
                result = outcome.result
                if outcome.named_outputs:
                    context = context.with_outputs(outcome.named_outputs)
                if directive.constant:
                    cache[match.text] = result

            text = text[:match.start] + result + text[match.end:]
            counts[directive.name] += 1
            substituted = True

        if substituted and counts[directive.name] >= cap:
            logger.warning(
                f"Directive '{directive.name}' reached the iteration cap of {cap}"
            )
        return text, context, substituted

    async def _invoke(
        self, directive: Directive, match: DirectiveMatch, context: ResolutionContext
    ) -> DirectiveResult:
        try:
            outcome: Union[DirectiveResult, str, None] = await directive.handler(
                match, context
            )
        except Exception:
            logger.warning(
                f"Directive '{directive.name}' failed on {match.text!r}", exc_info=True
            )
            return DirectiveResult()
        if isinstance(outcome, DirectiveResult):
            return outcome
        return DirectiveResult(result="" if outcome is None else str(outcome))

    async def invoke(
        self,
        directive: Directive,
        invocation: Union[str, DirectiveMatch],
        context: ResolutionContext,
    ) -> str:
        """Run one directive against an invocation, e.g. a call from a script.

        ``invocation`` is either directive text to scan or a ready match such
        as ``DirectiveMatch.from_call(...)``. Returns ``""`` when the text
        does not parse or the directive's rules reject it.
        """
        if isinstance(invocation, DirectiveMatch):
            match: Optional[DirectiveMatch] = invocation
        else:
            match = find_directive(invocation, directive.spellings, innermost=False)
        if match is None or not await is_applicable(directive, match.text, context):
            return ""
        outcome = await self._invoke(directive, match, replace(context, resolver=self))
        return outcome.result
