import subprocess
import sys

import pytest

from streamlauncher import system
from streamlauncher.errors import ActionFailedError, UnknownActionError
from streamlauncher.system import CommandRunner, SystemAction


class FakeRun:
    def __init__(self, exc=None):
        self.calls = []
        self.exc = exc

    def __call__(self, argv, **kwargs):
        self.calls.append((argv, kwargs))
        if self.exc:
            raise self.exc
        return subprocess.CompletedProcess(argv, 0)


@pytest.mark.parametrize(
    "text, action",
    [
        ("restart-app", SystemAction.RESTART_APP),
        ("reboot", SystemAction.REBOOT),
        ("poweroff", SystemAction.POWEROFF),
        ("sway-exit", SystemAction.SWAY_EXIT),
    ],
)
def test_parse(text, action):
    assert SystemAction.parse(text) is action


@pytest.mark.parametrize("text", ["bogus-action", "", "REBOOT", "reboot "])
def test_parse_rejects_unknown(text):
    with pytest.raises(UnknownActionError):
        SystemAction.parse(text)


@pytest.mark.parametrize(
    "action, argv",
    [
        (SystemAction.REBOOT, ["reboot"]),
        (SystemAction.POWEROFF, ["poweroff"]),
        (SystemAction.SWAY_EXIT, ["swaymsg", "exit"]),
    ],
)
def test_commands_run_with_timeout(action, argv):
    run = FakeRun()
    CommandRunner(timeout=5, run=run).perform(action)
    assert len(run.calls) == 1
    called, kwargs = run.calls[0]
    assert called == argv
    assert kwargs["check"] is True
    assert kwargs["timeout"] == 5


def test_non_zero_exit_becomes_action_failed():
    run = FakeRun(subprocess.CalledProcessError(1, ["reboot"], stderr=b"permission denied"))
    with pytest.raises(ActionFailedError, match="exit status 1: permission denied"):
        CommandRunner(run=run).perform(SystemAction.REBOOT)


def test_timeout_becomes_action_failed():
    run = FakeRun(subprocess.TimeoutExpired(["swaymsg", "exit"], 3))
    with pytest.raises(ActionFailedError, match="timed out"):
        CommandRunner(timeout=3, run=run).perform(SystemAction.SWAY_EXIT)


def test_missing_binary_becomes_action_failed():
    run = FakeRun(FileNotFoundError(2, "No such file or directory", "swaymsg"))
    with pytest.raises(ActionFailedError):
        CommandRunner(run=run).perform(SystemAction.SWAY_EXIT)


def test_restart_reexecs_interpreter(monkeypatch):
    monkeypatch.setattr(system, "RESTART_DELAY_S", 0.0)
    calls = []
    run = FakeRun()
    runner = CommandRunner(run=run, execv=lambda path, argv: calls.append((path, argv)))
    runner.perform(SystemAction.RESTART_APP)
    runner._restart_timer.join(timeout=2)
    assert run.calls == []
    assert calls and calls[0][0] == sys.executable
    assert calls[0][1][0] == sys.executable


def test_labels_cover_every_action():
    assert all(action.label for action in SystemAction)
