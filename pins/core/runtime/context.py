"""Resolution context and the Context Assembler."""

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from pins.config import EngineSettings, get_settings
from pins.core.models import EnvironmentSnapshot, Group, Pin, Tag
from pins.interfaces import (
    CollectionStore,
    CompletionProvider,
    KeyValueStore,
    NotificationSurface,
    PlatformAutomation,
)

if TYPE_CHECKING:
    from pins.core.runtime.resolver import Resolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineServices:
    """The external collaborators directives call into.

    Stores are required. Platform automation, notifications and AI
    completion are optional; directives that need a missing collaborator
    fail and resolve to an empty string.
    """

    pins: CollectionStore[Pin]
    groups: CollectionStore[Group]
    tags: CollectionStore[Tag]
    storage: KeyValueStore
    platform: Optional[PlatformAutomation] = None
    notifier: Optional[NotificationSurface] = None
    llm: Optional[CompletionProvider] = None
    settings: EngineSettings = field(default_factory=get_settings)

    def require_platform(self) -> PlatformAutomation:
        if self.platform is None:
            raise RuntimeError("No platform automation configured")
        return self.platform

    def require_notifier(self) -> NotificationSurface:
        if self.notifier is None:
            raise RuntimeError("No notification surface configured")
        return self.notifier

    def require_llm(self) -> CompletionProvider:
        if self.llm is None:
            raise RuntimeError("No completion provider configured")
        return self.llm


@dataclass(frozen=True)
class ResolutionContext:
    """Read-only data bag passed to every handler in one resolution.

    ``values`` holds the flattened environment, caller extras and the named
    outputs of directives that already ran. Named outputs never mutate a
    context; ``with_outputs`` returns a new one.
    """

    services: EngineServices
    pin: Optional[Pin] = None
    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    depth: int = 0
    resolver: Optional["Resolver"] = None

    @property
    def settings(self) -> EngineSettings:
        return self.services.settings

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key, default)

    def with_outputs(self, outputs: Mapping[str, str]) -> "ResolutionContext":
        merged: Dict[str, str] = dict(self.values)
        merged.update({k: str(v) for k, v in outputs.items()})
        return replace(self, values=MappingProxyType(merged))

    def with_pin(self, pin: Optional[Pin]) -> "ResolutionContext":
        return replace(self, pin=pin)

    def nested(self) -> "ResolutionContext":
        """Context for a pin opened from inside this resolution."""
        return replace(self, depth=self.depth + 1)


def _is_nullish(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple, dict, set)) and not value:
        return True
    return False


def flatten_environment(environment: Optional[EnvironmentSnapshot]) -> Dict[str, str]:
    """Flatten a snapshot into directive-named string values.

    Keys match the informational directives that report the same value,
    so e.g. ``{{currentAppName}}`` is served from the snapshot when present.
    """
    if environment is None:
        return {}
    flat: Dict[str, Any] = {
        "clipboardText": environment.clipboard_text,
        "selectedText": environment.selected_text,
        "selectedFiles": ", ".join(f.path for f in environment.selected_files if f.path),
    }
    if environment.current_application is not None:
        flat["currentAppName"] = environment.current_application.name
        flat["currentAppPath"] = environment.current_application.path
    if environment.current_directory is not None:
        flat["currentDirectory"] = environment.current_directory.path
    if environment.current_tab is not None:
        flat["currentURL"] = environment.current_tab.url
        flat["currentTabName"] = environment.current_tab.name
    track = environment.current_track
    if track is not None and track.name:
        flat["currentTrack"] = f"{track.name} by {track.artist}" if track.artist else track.name
    return {k: str(v) for k, v in flat.items() if not _is_nullish(v)}


def assemble_context(
    services: EngineServices,
    pin: Optional[Pin] = None,
    environment: Optional[EnvironmentSnapshot] = None,
    extras: Optional[Mapping[str, Any]] = None,
    depth: int = 0,
) -> ResolutionContext:
    """Build the context for one resolution call.

    Absent or empty values are dropped so directives that depend on them
    fall back to reading live state or to being inapplicable. Caller extras
    override environment values of the same name.

    Args:
        services: External collaborators
        pin: The pin being resolved, if any
        environment: Ambient data captured by the platform layer
        extras: Free-form values, e.g. placeholders a form pre-filled
        depth: Launch nesting depth of the resolution

    Returns:
        A new, read-only ResolutionContext
    """
    values = flatten_environment(environment)
    for key, value in (extras or {}).items():
        if _is_nullish(value):
            continue
        values[key] = str(value)
    logger.debug(f"Assembled context with keys {sorted(values)}")
    return ResolutionContext(
        services=services,
        pin=pin,
        values=MappingProxyType(values),
        depth=depth,
    )
