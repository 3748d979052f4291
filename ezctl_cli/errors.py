"""Exception types raised by the context store and cluster commands.

Every error the operator can act on derives from ``EzctlError`` so the CLI can
render it uniformly and exit non-zero. Anything else is a bug and propagates.
"""

from __future__ import annotations

from pathlib import Path


class EzctlError(Exception):
    """Base class for operator-facing errors."""


class SettingsError(EzctlError):
    """Raised when the settings file cannot be read or validated."""

    def __init__(self, path: Path | None, message: str):
        self.path = path
        self.message = message
        location = f" ({path})" if path else ""
        super().__init__(f"Invalid settings{location}: {message}")


class InvalidProfileNameError(EzctlError):
    """Raised when a context name is not safe to use as a directory name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid context name: {name!r}")


class ProfileNotFoundError(EzctlError):
    """Raised when a named context has no stored snapshot."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Context '{name}' not found")


class NoCurrentProfileError(EzctlError):
    """Raised when an operation needs the current-context pointer and none is set."""

    def __init__(self, pointer: Path):
        self.pointer = pointer
        super().__init__(f"No current context set ({pointer} is missing); run 'ezctl checkout <name>' first")


class StoreLockedError(EzctlError):
    """Raised when another ezctl process holds the store lock."""

    def __init__(self, lock_path: Path):
        self.lock_path = lock_path
        super().__init__(f"Context store is locked by another ezctl process ({lock_path})")


class CheckoutError(EzctlError):
    """Raised when a context switch failed.

    ``staging`` is set when the live workspace could not be rolled back either;
    it names the directory holding the pre-switch copy.
    """

    def __init__(self, target: str, current: str, cause: BaseException, staging: Path | None = None):
        self.target = target
        self.current = current
        self.cause = cause
        self.staging = staging
        message = f"Failed to switch to context '{target}', still on '{current}': {cause}"
        if staging is not None:
            message += f" (live workspace not restored, previous files kept in {staging})"
        super().__init__(message)


class InventoryError(EzctlError):
    """Raised for missing inventory files or invalid host edits."""
