"""Directive registry and applicability checking."""

from pins.core.registry.applicability import is_applicable
from pins.core.registry.registry import DirectiveRegistry, resolution_rank

__all__ = ["DirectiveRegistry", "is_applicable", "resolution_rank"]
