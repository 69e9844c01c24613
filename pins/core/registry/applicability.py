"""Applicability Checker - decides whether a matched directive may fire."""

import logging
from typing import TYPE_CHECKING

from pins.core.models import Directive

if TYPE_CHECKING:
    from pins.core.runtime.context import ResolutionContext

logger = logging.getLogger(__name__)


async def is_applicable(
    directive: Directive, candidate_text: str, context: "ResolutionContext"
) -> bool:
    """Evaluate a directive's rules against the current state.

    A directive with no rules is always applicable; otherwise at least one
    rule must return True. Rules are awaited in order and evaluation stops at
    the first acceptance. A rule that raises counts as a rejection.

    Args:
        directive: The matched directive
        candidate_text: The matched span, markers included
        context: The context the handler would receive

    Returns:
        True if the handler should run for this occurrence
    """
    if not directive.rules:
        return True
    for rule in directive.rules:
        try:
            if await rule(candidate_text, context):
                return True
        except Exception:
            logger.warning(
                f"Rule {getattr(rule, '__name__', rule)!s} for '{directive.name}' failed",
                exc_info=True,
            )
    logger.debug(f"Directive '{directive.name}' not applicable to {candidate_text!r}")
    return False
