"""Privileged host actions: restart the launcher, reboot, power off, exit sway.

Front-ends never call :mod:`subprocess` directly; they are handed an
:class:`ActionRunner` so tests can substitute a fake.
"""

from __future__ import annotations

import enum
import os
import subprocess
import sys
import threading
from typing import Callable, Optional, Protocol

from streamlauncher.constants import ACTION_TIMEOUT_S
from streamlauncher.errors import ActionFailedError, UnknownActionError
from streamlauncher.managers.logger import get_logger

log = get_logger(__name__)

RESTART_DELAY_S = 0.5


class SystemAction(enum.Enum):
    RESTART_APP = "restart-app"
    REBOOT = "reboot"
    POWEROFF = "poweroff"
    SWAY_EXIT = "sway-exit"

    @classmethod
    def parse(cls, text: str) -> "SystemAction":
        try:
            return cls(text)
        except ValueError:
            raise UnknownActionError(f"Invalid action: {text!r}") from None

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    SystemAction.RESTART_APP: "Restart launcher",
    SystemAction.REBOOT:      "Reboot",
    SystemAction.POWEROFF:    "Power off",
    SystemAction.SWAY_EXIT:   "Exit compositor",
}

# Fixed argv per host command; RESTART_APP is handled separately.
COMMANDS: dict[SystemAction, list[str]] = {
    SystemAction.REBOOT:    ["reboot"],
    SystemAction.POWEROFF:  ["poweroff"],
    SystemAction.SWAY_EXIT: ["swaymsg", "exit"],
}


class ActionRunner(Protocol):
    def perform(self, action: SystemAction) -> None:
        """Run *action*; raise :class:`ActionFailedError` on failure."""


class CommandRunner:
    """Runs the real OS commands with a timeout."""

    def __init__(
        self,
        timeout: float = ACTION_TIMEOUT_S,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        execv: Callable[[str, list[str]], None] = os.execv,
    ) -> None:
        self._timeout = timeout
        self._run = run
        self._execv = execv
        self._restart_timer: Optional[threading.Timer] = None

    def perform(self, action: SystemAction) -> None:
        log.warning("System action requested: %s", action.value)
        if action is SystemAction.RESTART_APP:
            self._schedule_restart()
            return

        argv = COMMANDS[action]
        try:
            self._run(
                argv,
                check=True,
                timeout=self._timeout,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
            )
        except subprocess.TimeoutExpired:
            log.error("%s timed out after %.0fs", " ".join(argv), self._timeout)
            raise ActionFailedError(f"timed out after {self._timeout:.0f}s") from None
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or b"").decode(errors="replace").strip()
            log.error("%s exited with %d: %s", " ".join(argv), exc.returncode, detail)
            raise ActionFailedError(
                f"exit status {exc.returncode}" + (f": {detail}" if detail else "")
            ) from exc
        except OSError as exc:
            log.error("Could not run %s: %s", " ".join(argv), exc)
            raise ActionFailedError(str(exc)) from exc
        log.info("System action completed: %s", action.value)

    # ------------------------------------------------------------------
    # Restart
    # ------------------------------------------------------------------

    def _schedule_restart(self) -> None:
        """Re-exec the interpreter shortly, after the caller has replied."""
        if self._restart_timer is not None:
            return
        self._restart_timer = threading.Timer(RESTART_DELAY_S, self._exec_self)
        self._restart_timer.daemon = True
        self._restart_timer.start()

    def _exec_self(self) -> None:
        argv = [sys.executable, *sys.orig_argv[1:]]
        log.info("Restarting: %s", " ".join(argv))
        try:
            self._execv(sys.executable, argv)
        except OSError as exc:
            log.error("Restart failed: %s", exc)
            self._restart_timer = None
