"""ADTs for compiler-facing failures: version gate, invocation, path pairing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class PathMismatch:
    """Configured source and output directory lists differ in length."""

    source_count: int
    target_count: int
    kind: Literal["PathMismatch"] = "PathMismatch"

    @property
    def message(self) -> str:
        return (
            "Unbalanced number of paths and destination paths: "
            f"{self.source_count} source(s), {self.target_count} destination(s)"
        )


@dataclass(frozen=True)
class VersionUnparseable:
    """Installed or required compiler version has no major.minor component."""

    installed: str
    required: str
    kind: Literal["VersionUnparseable"] = "VersionUnparseable"

    @property
    def message(self) -> str:
        return (
            f"Unable to parse partial versions for installed compiler ({self.installed!r}) "
            f"and required compiler version ({self.required!r})"
        )


@dataclass(frozen=True)
class VersionMismatch:
    """Installed compiler major.minor differs from the required one."""

    expected: str
    installed: str
    kind: Literal["VersionMismatch"] = "VersionMismatch"

    @property
    def message(self) -> str:
        return f"Wrong compiler version. Expected {self.expected} but got {self.installed}"


@dataclass(frozen=True)
class CompilerInvocationFailed:
    """Compiler process exited with a nonzero status."""

    command: str
    args: tuple[str, ...]
    exit_code: int
    output: str = ""
    kind: Literal["CompilerInvocationFailed"] = "CompilerInvocationFailed"

    @property
    def message(self) -> str:
        return f"{self.command} returned exit code: {self.exit_code}"


@dataclass(frozen=True)
class CompilerLaunchFailed:
    """Compiler process could not be started at all.

    Carries the attempted command line so the failure can be reproduced by hand;
    ``cause`` keeps the original exception.
    """

    command: str
    args: tuple[str, ...]
    cause: Exception
    kind: Literal["CompilerLaunchFailed"] = "CompilerLaunchFailed"

    @property
    def message(self) -> str:
        return f"error while executing '{self.command}' with args: {' '.join(self.args)} ({self.cause})"


VersionError = VersionUnparseable | VersionMismatch
ProcessError = CompilerInvocationFailed | CompilerLaunchFailed
CompilerError = PathMismatch | CompilerInvocationFailed | CompilerLaunchFailed
VersionCheckError = VersionUnparseable | VersionMismatch | CompilerInvocationFailed | CompilerLaunchFailed

__all__ = [
    "CompilerError",
    "CompilerInvocationFailed",
    "CompilerLaunchFailed",
    "PathMismatch",
    "ProcessError",
    "VersionCheckError",
    "VersionError",
    "VersionMismatch",
    "VersionUnparseable",
]
