"""
Compiler version gate.

Generated code is only reproducible across machines if everyone runs the same
compiler release line, so the build refuses to run when the installed
compiler's major.minor differs from the configured one. Patch levels are
ignored: ``3.9.1`` satisfies a requirement of ``3.9.0``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from protoshade.errors import (
    CompilerInvocationFailed,
    VersionCheckError,
    VersionError,
    VersionMismatch,
    VersionUnparseable,
)
from protoshade.log import Log
from protoshade.process import ProcessRunner
from protoshade.result import Failure, Result, Success


_PARTIAL_VERSION = re.compile(r"^(\d+)\.(\d+)(?:[.\-+].*)?$")


@dataclass(frozen=True, order=True)
class PartialVersion:
    """Major and minor components of a dotted version."""

    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


def extract_version(output: str) -> str:
    """Return the last whitespace-delimited token of ``--version`` output.

    >>> extract_version("libprotoc 3.9.1\\n")
    '3.9.1'
    """
    tokens = output.split()
    return tokens[-1] if tokens else ""


def parse_partial_version(text: str) -> Result[PartialVersion, VersionUnparseable]:
    """Parse ``major.minor`` from a dotted version, ignoring anything after minor."""
    match _PARTIAL_VERSION.match(text.strip()):
        case None:
            return Failure(VersionUnparseable(installed=text, required=""))
        case found:
            return Success(PartialVersion(major=int(found.group(1)), minor=int(found.group(2))))


def check_version(installed_output: str, required: str) -> Result[PartialVersion, VersionError]:
    """
    Compare the installed compiler version against the required one.

    Args:
        installed_output: Free-form ``--version`` output; its last token is the version.
        required: Required version string, e.g. ``"3.9.0"``.

    Returns:
        Success(installed PartialVersion) when major.minor match,
        Failure(VersionUnparseable) when either side has no major.minor,
        Failure(VersionMismatch) otherwise.
    """
    version = extract_version(installed_output)
    installed_result = parse_partial_version(version)
    expected_result = parse_partial_version(required)

    match (installed_result, expected_result):
        case (Success(installed), Success(expected)):
            if installed != expected:
                return Failure(VersionMismatch(expected=str(expected), installed=str(installed)))
            return Success(installed)
        case _:
            return Failure(VersionUnparseable(installed=version, required=required))


def check_compiler_version(
    runner: ProcessRunner,
    compiler: str,
    required: str,
    log: Log,
) -> Result[PartialVersion, VersionCheckError]:
    """Run ``<compiler> --version`` and apply :func:`check_version` to its output."""
    args = ("--version",)
    match runner.run(compiler, args):
        case Failure(launch_error):
            return Failure(launch_error)
        case Success(output) if not output.ok:
            return Failure(
                CompilerInvocationFailed(
                    command=compiler, args=args, exit_code=output.exit_code, output=output.output
                )
            )
        case Success(output):
            pass

    match check_version(output.output, required):
        case Success(installed):
            log.info(f"Using {compiler} {installed} (required {required})")
            return Success(installed)
        case Failure(error):
            return Failure(error)


__all__ = [
    "PartialVersion",
    "check_compiler_version",
    "check_version",
    "extract_version",
    "parse_partial_version",
]
