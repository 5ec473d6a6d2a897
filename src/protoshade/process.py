"""
Process collaborator for the external schema compiler.

The compiler is treated as a black box: it is given a command and an argument
list and hands back an exit code plus whatever it printed. Everything that
talks to the compiler depends on the ``ProcessRunner`` protocol so tests can
substitute a fake without spawning processes.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from protoshade.errors import CompilerLaunchFailed
from protoshade.result import Failure, Result, Success


@dataclass(frozen=True)
class ProcessOutput:
    """Exit status and combined captured output of one compiler run."""

    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessRunner(Protocol):
    """Runs a command to completion; launch problems become ``CompilerLaunchFailed``."""

    def run(self, command: str, args: Sequence[str]) -> Result[ProcessOutput, CompilerLaunchFailed]: ...


class SubprocessRunner:
    """Blocking ``subprocess.run`` implementation.

    There is no timeout: a hung compiler hangs the build, exactly like running
    it by hand would.
    """

    def run(self, command: str, args: Sequence[str]) -> Result[ProcessOutput, CompilerLaunchFailed]:
        argv = [command, *args]
        try:
            completed = subprocess.run(
                argv,
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            return Failure(CompilerLaunchFailed(command=command, args=tuple(args), cause=exc))
        return Success(ProcessOutput(exit_code=completed.returncode, output=completed.stdout or ""))


__all__ = ["ProcessOutput", "ProcessRunner", "SubprocessRunner"]
