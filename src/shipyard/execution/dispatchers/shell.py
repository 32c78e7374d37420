"""Shell dispatchers — local and ssh command execution.

WHY
───
Most deployment steps are commands: run a migration, reload a service,
sync assets. Both dispatchers here go through ``subprocess.run`` with
captured text output and translate the process outcome into a
``DispatchResult``.

Exit code mapping:
    - normal exit            → the process return code
    - killed by signal N     → 128 + N (shell convention)
    - dispatcher timeout     → 124 (``timeout(1)`` convention)
    - executable not found   → 127

ARCHITECTURE
────────────
::

    ShellTaskDispatcher
      └── dispatch(ShellTask)        ─ subprocess.run(command)
    RemoteShellTaskDispatcher(ShellTaskDispatcher)
      └── dispatch(RemoteShellTask)  ─ subprocess.run(["ssh", ..., command])

Architecture Decisions:
    - subprocess-only: uses the ``ssh`` CLI rather than an ssh library so
      that the operator's ssh config, agent and known_hosts apply unchanged.
    - ``BatchMode=yes`` by default: a password prompt would block the run
      forever, so fail fast instead.

Tags:
    dispatcher, shell, ssh, subprocess
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence

from shipyard.core.logging import get_logger
from shipyard.deploy.results import DispatchResult
from shipyard.deploy.tasks import RemoteShellTask, ShellTask
from shipyard.execution.dispatchers.protocol import BaseTaskDispatcher

logger = get_logger(__name__)

TIMEOUT_EXIT_CODE = 124
NOT_FOUND_EXIT_CODE = 127


def _normalise_returncode(returncode: int) -> int:
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


class ShellTaskDispatcher(BaseTaskDispatcher):
    """Runs :class:`~shipyard.deploy.tasks.ShellTask` with ``subprocess``.

    Parameters
    ----------
    env
        Extra environment variables applied to every command (task-level
        ``env`` wins on conflicts).
    """

    task_types = (ShellTask,)

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self.env = dict(env or {})

    def dispatch(self, task: ShellTask) -> DispatchResult:  # type: ignore[override]
        return self._run(
            task.command,
            cwd=task.cwd,
            env=task.env,
            timeout=task.timeout,
        )

    def _run(
        self,
        command: str | Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> DispatchResult:
        shell = isinstance(command, str)
        args = command if shell else list(command)
        merged_env = {**os.environ, **self.env, **(env or {})}

        logger.debug("shell.dispatch", command=args, cwd=cwd, timeout=timeout)

        try:
            proc = subprocess.run(
                args,
                shell=shell,
                cwd=cwd,
                env=merged_env,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning("shell.timeout", command=args, timeout=timeout)
            return DispatchResult(
                exit_code=TIMEOUT_EXIT_CODE,
                output=_as_text(e.stdout),
                error_output=f"Command timed out after {timeout}s\n{_as_text(e.stderr)}".rstrip(),
            )
        except FileNotFoundError as e:
            return DispatchResult(exit_code=NOT_FOUND_EXIT_CODE, error_output=str(e))

        exit_code = _normalise_returncode(proc.returncode)
        logger.debug("shell.finished", command=args, exit_code=exit_code)
        return DispatchResult(
            exit_code=exit_code,
            output=proc.stdout or "",
            error_output=proc.stderr or "",
        )


class RemoteShellTaskDispatcher(ShellTaskDispatcher):
    """Runs :class:`~shipyard.deploy.tasks.RemoteShellTask` through ``ssh``.

    Parameters
    ----------
    ssh_executable
        Path or name of the ssh client.
    default_options
        ``-o`` options applied before task-level options.
    """

    task_types = (RemoteShellTask,)

    def __init__(
        self,
        ssh_executable: str = "ssh",
        default_options: Sequence[str] = ("BatchMode=yes",),
        env: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(env=env)
        self.ssh_executable = ssh_executable
        self.default_options = tuple(default_options)

    def build_command(self, task: RemoteShellTask) -> list[str]:
        cmd = [self.ssh_executable, "-p", str(task.port)]
        for option in (*self.default_options, *task.ssh_options):
            cmd.extend(["-o", option])
        cmd.extend([task.destination, "--", task.command])
        return cmd

    def dispatch(self, task: RemoteShellTask) -> DispatchResult:  # type: ignore[override]
        return self._run(self.build_command(task), timeout=task.timeout)


__all__ = [
    "NOT_FOUND_EXIT_CODE",
    "RemoteShellTaskDispatcher",
    "ShellTaskDispatcher",
    "TIMEOUT_EXIT_CODE",
]
