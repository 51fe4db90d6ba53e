"""Exception hierarchy shared by the store, the system actions and both front-ends."""

from __future__ import annotations


class LauncherError(Exception):
    """Base class for all StreamLauncher errors."""


class InvalidPayloadError(LauncherError, ValueError):
    """Caller-supplied data does not match the expected shape or types."""


class UnknownPlatformError(LauncherError, KeyError):
    """A platform name that is not part of the static catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown platform: {self.name!r}"


class UnknownProfileError(LauncherError, KeyError):
    """A profile name that does not exist in the store."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown profile: {self.name!r}"


class UnknownActionError(LauncherError, ValueError):
    """A system-action identifier outside the fixed set."""


class ActionFailedError(LauncherError):
    """The external command behind a system action failed or timed out."""
