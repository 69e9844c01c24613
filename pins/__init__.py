"""Directive expansion engine for pinned shortcuts.

A pin's target may embed directives such as ``{{clipboardText}}`` or
``{{movePin:Notes:Archive}}``. The Resolver expands them against a
ResolutionContext built from the pin, an environment snapshot and caller
extras, performing any side effects the directives declare.

Example:
    ```python
    from pins import Resolver, EngineServices, assemble_context, build_default_registry

    resolver = Resolver(build_default_registry())
    text = await resolver.resolve("Today is {{date}}", assemble_context(services))
    ```
"""

from pins.config import EngineSettings, get_settings, set_settings
from pins.core.directives import build_default_registry, directive
from pins.core.runtime import (
    EngineServices,
    ResolutionContext,
    Resolver,
    assemble_context,
    open_pin,
)
from pins.core.scheduling import DeferredEvaluationScheduler, check_expirations

__version__ = "0.1.0"

__all__ = [
    "DeferredEvaluationScheduler",
    "EngineServices",
    "EngineSettings",
    "ResolutionContext",
    "Resolver",
    "assemble_context",
    "build_default_registry",
    "check_expirations",
    "directive",
    "get_settings",
    "open_pin",
    "set_settings",
]
