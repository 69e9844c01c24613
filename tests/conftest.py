"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pins.config import EngineSettings
from pins.core.directives import build_default_registry
from pins.core.models import AppRef, FileRef, TabRef, TrackRef
from pins.core.runtime import EngineServices, Resolver, assemble_context
from pins.storage import InMemoryCollectionStore, InMemoryKeyValueStore


@pytest.fixture
def settings():
    """Engine settings independent of the environment."""
    return EngineSettings(
        _env_file=None,
        max_iterations=250,
        max_launch_depth=5,
        script_timeout_seconds=1.0,
        ai_max_attempts=3,
    )


@pytest.fixture
def platform():
    """A PlatformAutomation mock with fixed ambient state."""
    platform = MagicMock()
    platform.get_clipboard_text = AsyncMock(return_value="clipboard contents")
    platform.get_selected_text = AsyncMock(return_value="selected words")
    platform.get_frontmost_application = AsyncMock(
        return_value=AppRef(name="Safari", path="/Applications/Safari.app")
    )
    platform.get_current_directory = AsyncMock(
        return_value=FileRef(name="Documents", path="/Users/test/Documents")
    )
    platform.get_selected_files = AsyncMock(
        return_value=[FileRef(name="a.txt", path="/tmp/a.txt"), FileRef(name="b.txt", path="/tmp/b.txt")]
    )
    platform.get_current_tab = AsyncMock(
        return_value=TabRef(name="Python", url="https://www.python.org")
    )
    platform.get_current_track = AsyncMock(
        return_value=TrackRef(name="Blue in Green", artist="Miles Davis")
    )
    platform.set_clipboard_text = AsyncMock()
    platform.paste_text = AsyncMock()
    platform.run_shell = AsyncMock(return_value="shell output\n")
    platform.open_target = AsyncMock()
    platform.speak = AsyncMock()
    platform.run_in_browser_tab = AsyncMock(return_value="from the browser")
    return platform


@pytest.fixture
def notifier():
    """A NotificationSurface mock that answers prompts and confirms."""
    notifier = MagicMock()
    notifier.show_message = AsyncMock()
    notifier.show_alert = AsyncMock()
    notifier.show_toast = AsyncMock()
    notifier.prompt_user = AsyncMock(return_value="typed answer")
    notifier.confirm = AsyncMock(return_value=True)
    return notifier


@pytest.fixture
def llm():
    """A CompletionProvider mock."""
    llm = MagicMock()
    llm.complete = AsyncMock(return_value='  A "quoted" reply  ')
    return llm


@pytest.fixture
def services(settings, platform, notifier, llm):
    """Services over empty in-memory stores."""
    return EngineServices(
        pins=InMemoryCollectionStore(),
        groups=InMemoryCollectionStore(),
        tags=InMemoryCollectionStore(),
        storage=InMemoryKeyValueStore(),
        platform=platform,
        notifier=notifier,
        llm=llm,
        settings=settings,
    )


@pytest.fixture
def registry():
    """The built-in directive registry."""
    return build_default_registry()


@pytest.fixture
def resolver(registry, settings):
    """A resolver over the built-in directives."""
    return Resolver(registry, settings)


@pytest.fixture
def context(services):
    """An empty resolution context."""
    return assemble_context(services)
