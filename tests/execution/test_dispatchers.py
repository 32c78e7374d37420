"""Tests for the built-in dispatchers — shell, remote shell, callable."""

import subprocess
import sys
from unittest.mock import patch

import pytest

from shipyard.core.errors import ErrorCategory, ShipyardError
from shipyard.deploy.results import DispatchResult
from shipyard.deploy.tasks import CallableTask, RemoteShellTask, ShellTask
from shipyard.execution.dispatchers import (
    CallableTaskDispatcher,
    RemoteShellTaskDispatcher,
    ShellTaskDispatcher,
    TaskDispatcher,
)
from shipyard.execution.dispatchers.callable import to_dispatch_result
from shipyard.execution.dispatchers.shell import NOT_FOUND_EXIT_CODE, TIMEOUT_EXIT_CODE
from tests._support import FakeTask

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


# ------------------------------------------------------------------ #
# Capability
# ------------------------------------------------------------------ #


class TestCanDispatch:
    def test_protocol(self):
        for dispatcher in (ShellTaskDispatcher(), RemoteShellTaskDispatcher(), CallableTaskDispatcher()):
            assert isinstance(dispatcher, TaskDispatcher)

    def test_matches_own_task_type_only(self):
        shell, remote, call = ShellTaskDispatcher(), RemoteShellTaskDispatcher(), CallableTaskDispatcher()
        assert shell.can_dispatch(ShellTask("true"))
        assert not shell.can_dispatch(RemoteShellTask("web1", "true"))
        assert remote.can_dispatch(RemoteShellTask("web1", "true"))
        assert not remote.can_dispatch(ShellTask("true"))
        assert call.can_dispatch(CallableTask(print))
        assert not call.can_dispatch(FakeTask())


# ------------------------------------------------------------------ #
# ShellTaskDispatcher (mocked subprocess)
# ------------------------------------------------------------------ #


class TestShellTaskDispatcher:
    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_string_command_uses_shell(self, mock_run):
        mock_run.return_value = completed(0, stdout="ok\n")
        result = ShellTaskDispatcher().dispatch(ShellTask("echo ok", cwd="/srv/app"))

        assert result == DispatchResult(exit_code=0, output="ok\n")
        args, kwargs = mock_run.call_args
        assert args[0] == "echo ok"
        assert kwargs["shell"] is True
        assert kwargs["cwd"] == "/srv/app"
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True

    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_list_command_runs_directly(self, mock_run):
        mock_run.return_value = completed(0)
        ShellTaskDispatcher().dispatch(ShellTask(["bin/migrate", "--step", "1"]))
        args, kwargs = mock_run.call_args
        assert args[0] == ["bin/migrate", "--step", "1"]
        assert kwargs["shell"] is False

    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_nonzero_exit_is_a_result(self, mock_run):
        mock_run.return_value = completed(3, stdout="partial", stderr="failed")
        result = ShellTaskDispatcher().dispatch(ShellTask("false"))
        assert result.exit_code == 3
        assert result.output == "partial"
        assert result.error_output == "failed"
        assert not result.successful

    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_signal_maps_to_128_plus_n(self, mock_run):
        mock_run.return_value = completed(-9)
        assert ShellTaskDispatcher().dispatch(ShellTask("sleep 100")).exit_code == 137

    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="sleep 100", timeout=2, output="tick")
        result = ShellTaskDispatcher().dispatch(ShellTask("sleep 100", timeout=2))
        assert result.exit_code == TIMEOUT_EXIT_CODE == 124
        assert result.output == "tick"
        assert "timed out after 2s" in result.error_output
        assert mock_run.call_args.kwargs["timeout"] == 2

    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_missing_executable(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory", "nope")
        result = ShellTaskDispatcher().dispatch(ShellTask(["nope"]))
        assert result.exit_code == NOT_FOUND_EXIT_CODE == 127
        assert "No such file" in result.error_output

    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_env_layering(self, mock_run, monkeypatch):
        monkeypatch.setenv("SHIPYARD_TEST_BASE", "os")
        mock_run.return_value = completed(0)
        dispatcher = ShellTaskDispatcher(env={"STAGE": "dispatcher", "REGION": "eu"})
        dispatcher.dispatch(ShellTask("env", env={"STAGE": "task"}))

        env = mock_run.call_args.kwargs["env"]
        assert env["SHIPYARD_TEST_BASE"] == "os"
        assert env["REGION"] == "eu"
        assert env["STAGE"] == "task"


@pytest.mark.integration
@posix_only
class TestShellTaskDispatcherReal:
    def test_echo(self):
        result = ShellTaskDispatcher().dispatch(ShellTask("echo hello"))
        assert result.exit_code == 0
        assert result.output == "hello\n"

    def test_exit_code_and_stderr(self):
        result = ShellTaskDispatcher().dispatch(ShellTask("echo bad >&2; exit 4"))
        assert result.exit_code == 4
        assert result.error_output == "bad\n"

    def test_cwd(self, tmp_path):
        result = ShellTaskDispatcher().dispatch(ShellTask(["pwd"], cwd=str(tmp_path)))
        assert result.output.strip() == str(tmp_path.resolve())

    def test_missing_executable(self):
        result = ShellTaskDispatcher().dispatch(ShellTask(["shipyard-no-such-binary"]))
        assert result.exit_code == NOT_FOUND_EXIT_CODE


# ------------------------------------------------------------------ #
# RemoteShellTaskDispatcher
# ------------------------------------------------------------------ #


class TestRemoteShellTaskDispatcher:
    def test_build_command(self):
        task = RemoteShellTask("web1", "systemctl reload app", user="deploy", port=2222, ssh_options=("ConnectTimeout=5",))
        assert RemoteShellTaskDispatcher().build_command(task) == [
            "ssh", "-p", "2222",
            "-o", "BatchMode=yes",
            "-o", "ConnectTimeout=5",
            "deploy@web1", "--", "systemctl reload app",
        ]

    def test_build_command_without_user(self):
        dispatcher = RemoteShellTaskDispatcher(ssh_executable="/usr/bin/ssh", default_options=())
        assert dispatcher.build_command(RemoteShellTask("web1", "uptime")) == [
            "/usr/bin/ssh", "-p", "22", "web1", "--", "uptime",
        ]

    @patch("shipyard.execution.dispatchers.shell.subprocess.run")
    def test_dispatch_runs_ssh_directly(self, mock_run):
        mock_run.return_value = completed(255, stderr="Connection refused")
        result = RemoteShellTaskDispatcher().dispatch(RemoteShellTask("web1", "uptime", timeout=10))

        assert result.exit_code == 255
        assert result.error_output == "Connection refused"
        args, kwargs = mock_run.call_args
        assert args[0][0] == "ssh"
        assert kwargs["shell"] is False
        assert kwargs["timeout"] == 10


# ------------------------------------------------------------------ #
# CallableTaskDispatcher
# ------------------------------------------------------------------ #


class TestToDispatchResult:
    @pytest.mark.parametrize(
        ("value", "exit_code", "output"),
        [
            (None, 0, ""),
            (True, 0, ""),
            (False, 1, ""),
            (0, 0, ""),
            (3, 3, ""),
            (-1, -1, ""),
            ("done", 0, "done"),
        ],
    )
    def test_mapping(self, value, exit_code, output):
        result = to_dispatch_result(value)
        assert (result.exit_code, result.output) == (exit_code, output)

    def test_dispatch_result_passthrough(self):
        original = DispatchResult(exit_code=2, output="x", error_output="y")
        assert to_dispatch_result(original) is original

    def test_unsupported_value(self):
        with pytest.raises(ShipyardError) as exc_info:
            to_dispatch_result(["not", "a", "result"])
        assert exc_info.value.category is ErrorCategory.DISPATCH


class TestCallableTaskDispatcher:
    def test_passes_arguments(self):
        calls = []

        def step(region, *, dry=False):
            calls.append((region, dry))
            return f"warmed {region}"

        result = CallableTaskDispatcher().dispatch(CallableTask(step, "eu-west-1", dry=True))
        assert calls == [("eu-west-1", True)]
        assert result.output == "warmed eu-west-1"

    def test_exception_propagates(self):
        def step():
            raise RuntimeError("broken step")

        with pytest.raises(RuntimeError, match="broken step"):
            CallableTaskDispatcher().dispatch(CallableTask(step))
