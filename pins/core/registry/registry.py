"""DirectiveRegistry - the immutable, ordered directive set for a session."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pins.core.models import Directive, DirectiveKind
from pins.core.exceptions import DuplicateDirectiveError

logger = logging.getLogger(__name__)


def resolution_rank(directive: Directive) -> int:
    """Where a directive sits in the resolution order.

    0: eager directives, whose bodies must be captured verbatim
    1: constant informational placeholders
    2: static directives
    3: interactive directives
    4: live informational reads, which must observe earlier side effects
    5: scripts, which may call every other directive
    """
    if directive.eager:
        return 0
    if directive.kind == DirectiveKind.INFORMATIONAL:
        return 1 if directive.constant else 4
    if directive.kind == DirectiveKind.STATIC:
        return 2
    if directive.kind == DirectiveKind.INTERACTIVE:
        return 3
    return 5


class DirectiveRegistry:
    """Ordered collection of directives, built once and passed explicitly.

    Every name and alias must be unique across the registry. Iteration
    yields directives in registration order; ``ordered()`` yields them in
    resolution order, stable within equal rank.

    Example:
        ```python
        registry = DirectiveRegistry([date_directive, move_pin_directive])
        resolver = Resolver(registry)
        ```
    """

    def __init__(self, directives: Iterable[Directive]) -> None:
        self._directives: Tuple[Directive, ...] = tuple(directives)
        self._by_spelling: Dict[str, Directive] = {}
        for directive in self._directives:
            for spelling in directive.spellings:
                existing = self._by_spelling.get(spelling)
                if existing is not None:
                    raise DuplicateDirectiveError(
                        f"Directive spelling '{spelling}' already registered.\n"
                        f"  Existing: {existing.name}\n"
                        f"  Duplicate: {directive.name}\n"
                        "Each directive name and alias must be unique."
                    )
                self._by_spelling[spelling] = directive
        self._ordered: Tuple[Directive, ...] = tuple(
            sorted(self._directives, key=resolution_rank)
        )
        logger.debug(f"Built directive registry with {len(self._directives)} directives")

    def __iter__(self) -> Iterator[Directive]:
        return iter(self._directives)

    def __len__(self) -> int:
        return len(self._directives)

    def __contains__(self, spelling: object) -> bool:
        return spelling in self._by_spelling

    def get(self, spelling: str) -> Optional[Directive]:
        """Look up a directive by name or alias."""
        return self._by_spelling.get(spelling)

    def ordered(self) -> Tuple[Directive, ...]:
        return self._ordered

    def names(self) -> List[str]:
        return [directive.name for directive in self._directives]

    def without(self, *kinds: DirectiveKind) -> "DirectiveRegistry":
        """A registry holding every directive except those of ``kinds``."""
        return DirectiveRegistry(d for d in self._directives if d.kind not in kinds)

    def extended(self, directives: Iterable[Directive]) -> "DirectiveRegistry":
        return DirectiveRegistry((*self._directives, *directives))
