"""Reusable applicability rules.

Rules are read-only checks of external state with the signature
``async (candidate_text, context) -> bool``.
"""

from pins.core.models import Rule
from pins.core.runtime.context import ResolutionContext
from pins.core.runtime.state import get_recent_applications


def min_recent_applications(count: int) -> Rule:
    """Applicable when at least ``count`` recent applications are recorded."""

    async def rule(candidate_text: str, context: ResolutionContext) -> bool:
        return len(await get_recent_applications(context.services.storage)) >= count

    rule.__name__ = f"min_recent_applications_{count}"
    return rule

