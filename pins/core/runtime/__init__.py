"""Runtime for resolving target strings.

This module exports:
- ResolutionContext / EngineServices: the per-call data bag and collaborators
- assemble_context: the Context Assembler
- Resolver: the fixpoint substitution loop
- open_pin: resolve a pin's target and copy, open or run it
"""

from pins.core.runtime.context import (
    EngineServices,
    ResolutionContext,
    assemble_context,
    flatten_environment,
)
from pins.core.runtime.opener import open_pin
from pins.core.runtime.resolver import Resolver

__all__ = [
    "EngineServices",
    "ResolutionContext",
    "Resolver",
    "assemble_context",
    "flatten_environment",
    "open_pin",
]
