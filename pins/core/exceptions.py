"""Exceptions for the directive engine."""


class DuplicateDirectiveError(Exception):
    """Raised when a registry is built with a name or alias used twice.

    The error message names both directives that claim the spelling.
    """

    pass


class ScriptError(Exception):
    """Base class for failures of the Script directive's sandbox."""

    pass


class ScriptSecurityError(ScriptError):
    """Raised before execution when a script uses forbidden syntax.

    Imports, global/nonlocal statements and any name or attribute starting
    with an underscore are rejected.
    """

    pass


class ScriptTimeoutError(ScriptError):
    """Raised when a script exceeds its wall-clock limit."""

    pass


class ScriptRuntimeError(ScriptError):
    """Raised when a script raises while it runs.

    ``error_type`` is the name of the exception raised inside the script,
    e.g. ``"ZeroDivisionError"``.
    """

    def __init__(self, error_type: str, message: str = "") -> None:
        super().__init__(f"{error_type}: {message}" if message else error_type)
        self.error_type = error_type


class LaunchDepthExceededError(Exception):
    """Raised when nested pin launches exceed the configured depth."""

    pass


class StorageNotInitializedError(RuntimeError):
    """Raised when a storage adapter is used before ``startup()``."""

    def __init__(self, message: str = "Storage not initialized. Call startup() first.") -> None:
        super().__init__(message)
