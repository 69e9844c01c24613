"""Core models for the pins engine.

This module exports the stored item models, the deferred evaluation record,
the ambient environment snapshot and the directive descriptor types.
"""

from pins.core.models.deferred import DeferredEvaluation
from pins.core.models.directive import (
    Directive,
    DirectiveKind,
    DirectiveResult,
    Handler,
    Rule,
)
from pins.core.models.environment import (
    AppRef,
    EnvironmentSnapshot,
    FileRef,
    TabRef,
    TrackRef,
)
from pins.core.models.items import (
    BaseItem,
    Group,
    ItemType,
    Pin,
    PinAction,
    Tag,
    Visibility,
    generate_item_id,
)

__all__ = [
    "AppRef",
    "BaseItem",
    "DeferredEvaluation",
    "Directive",
    "DirectiveKind",
    "DirectiveResult",
    "EnvironmentSnapshot",
    "FileRef",
    "Group",
    "Handler",
    "ItemType",
    "Pin",
    "PinAction",
    "Rule",
    "TabRef",
    "Tag",
    "TrackRef",
    "Visibility",
    "generate_item_id",
]
