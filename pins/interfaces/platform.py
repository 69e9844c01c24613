"""Platform automation and notification interfaces.

These are the host-side capabilities directives call into. Every call is an
opaque asynchronous function; the engine only relies on the return types
declared here.
"""

from typing import List, Optional, Protocol

from pins.core.models import AppRef, FileRef, TabRef, TrackRef


class PlatformAutomation(Protocol):
    """Reads ambient state from the host and performs host actions.

    Read methods return None (or an empty list) when the value is not
    available, e.g. no browser is frontmost or nothing is playing.

    Example usage:
        ```python
        app = await platform.get_frontmost_application()
        if app is not None:
            print(app.name, app.path)

        await platform.open_target("https://example.com", application=None)
        ```
    """

    # Ambient reads

    async def get_clipboard_text(self) -> Optional[str]:
        ...

    async def get_selected_text(self) -> Optional[str]:
        ...

    async def get_frontmost_application(self) -> Optional[AppRef]:
        ...

    async def get_current_directory(self) -> Optional[FileRef]:
        """The directory shown in the frontmost file browser window."""
        ...

    async def get_selected_files(self) -> List[FileRef]:
        ...

    async def get_current_tab(self) -> Optional[TabRef]:
        """The active tab of the frontmost supported browser."""
        ...

    async def get_current_track(self) -> Optional[TrackRef]:
        ...

    # Actions

    async def set_clipboard_text(self, text: str) -> None:
        ...

    async def paste_text(self, text: str) -> None:
        """Paste ``text`` into the frontmost application."""
        ...

    async def run_shell(self, command: str) -> str:
        """Run a shell command and return its standard output.

        Raises:
            RuntimeError: If the command exits with a non-zero status
        """
        ...

    async def open_target(self, target: str, application: Optional[str] = None) -> None:
        """Open a URL or path, optionally with a specific application.

        Raises:
            RuntimeError: If the target cannot be opened
        """
        ...

    async def speak(self, text: str, voice: Optional[str] = None) -> None:
        ...

    async def run_in_browser_tab(self, script: str, browser: str) -> str:
        """Run JavaScript in the active tab of ``browser`` and return its result."""
        ...


class NotificationSurface(Protocol):
    """User-facing messages and prompts.

    ``prompt_user`` returns None when the user cancels, which interactive
    directives treat as an empty answer.
    """

    async def show_message(self, text: str) -> None:
        """Show a short, non-blocking status message."""
        ...

    async def show_alert(self, title: str, message: str) -> None:
        """Show a modal alert and wait until it is dismissed."""
        ...

    async def show_toast(self, title: str, message: str = "") -> None:
        ...

    async def prompt_user(
        self, text: str, title: str = "", default: str = ""
    ) -> Optional[str]:
        """Ask the user for a line of text."""
        ...

    async def confirm(self, text: str, title: str = "") -> bool:
        """Ask the user to confirm a destructive action."""
        ...
