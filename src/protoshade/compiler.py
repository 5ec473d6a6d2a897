"""
Compiler invocation.

One compiler run per source directory: every schema file found below it is
passed in a single call, with the source directory itself as the first include
root. A source directory that is missing or holds no schema files is skipped
rather than treated as an error, so projects can configure test schema roots
they do not use yet.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from protoshade.errors import CompilerError, CompilerInvocationFailed, PathMismatch, ProcessError
from protoshade.log import Log
from protoshade.process import ProcessRunner
from protoshade.result import Failure, Result, Success


SCHEMA_PATTERN = "*.proto"
DEFAULT_OUTPUT_FLAG = "--python_out"


@dataclass(frozen=True)
class Skipped:
    """Nothing to compile in the source directory."""

    source_dir: Path
    reason: str


@dataclass(frozen=True)
class Compiled:
    """Compiler ran successfully over ``schema_files``."""

    source_dir: Path
    target_dir: Path
    schema_files: tuple[Path, ...]


CompileOutcome = Skipped | Compiled


def find_schema_files(source_dir: Path, pattern: str = SCHEMA_PATTERN) -> list[Path]:
    """Recursively list schema files under ``source_dir`` in a stable order."""
    if not source_dir.is_dir():
        return []
    return sorted(path for path in source_dir.rglob(pattern) if path.is_file())


def build_arguments(
    source_dir: Path,
    target_dir: Path,
    schema_files: Sequence[Path],
    include_paths: Sequence[Path] = (),
    output_flag: str = DEFAULT_OUTPUT_FLAG,
) -> tuple[str, ...]:
    """Assemble ``-I<src> <flag>=<dst> [-I<inc>...] <files...>`` with absolute paths."""
    return (
        f"-I{source_dir.absolute()}",
        f"{output_flag}={target_dir.absolute()}",
        *(f"-I{include.absolute()}" for include in include_paths),
        *(str(schema.absolute()) for schema in schema_files),
    )


def invoke(
    runner: ProcessRunner,
    compiler: str,
    source_dir: Path,
    target_dir: Path,
    include_paths: Sequence[Path],
    log: Log,
    output_flag: str = DEFAULT_OUTPUT_FLAG,
) -> Result[CompileOutcome, ProcessError]:
    """
    Compile every schema file under ``source_dir`` into ``target_dir``.

    Args:
        runner: Process collaborator used to run the compiler.
        compiler: Compiler executable name or path.
        source_dir: Root searched recursively for schema files.
        target_dir: Output directory, created with its parents when needed.
        include_paths: Extra import roots, each passed as ``-I``.
        log: Progress sink.
        output_flag: Generator option receiving ``target_dir``.

    Returns:
        Success(Skipped) when there is nothing to compile,
        Success(Compiled) when the compiler exited with status zero,
        Failure(CompilerInvocationFailed | CompilerLaunchFailed) otherwise.
    """
    if not source_dir.exists():
        log.info(f"Skipping missing source directory {source_dir}")
        return Success(Skipped(source_dir=source_dir, reason="missing"))

    schema_files = find_schema_files(source_dir)
    if not schema_files:
        log.info(f"Skipping empty source directory {source_dir}")
        return Success(Skipped(source_dir=source_dir, reason="empty"))

    target_dir.mkdir(parents=True, exist_ok=True)

    log.info(f"Generating {len(schema_files)} protobuf files from {source_dir} to {target_dir}")
    for schema in schema_files:
        log.info(f"Compiling {schema}")

    args = build_arguments(source_dir, target_dir, schema_files, include_paths, output_flag)
    match runner.run(compiler, args):
        case Failure(launch_error):
            return Failure(launch_error)
        case Success(output) if not output.ok:
            return Failure(
                CompilerInvocationFailed(
                    command=compiler, args=args, exit_code=output.exit_code, output=output.output
                )
            )
        case Success(_):
            return Success(
                Compiled(source_dir=source_dir, target_dir=target_dir, schema_files=tuple(schema_files))
            )


def invoke_all(
    runner: ProcessRunner,
    compiler: str,
    source_dirs: Sequence[Path],
    target_dirs: Sequence[Path],
    include_paths: Sequence[Path],
    log: Log,
    output_flag: str = DEFAULT_OUTPUT_FLAG,
) -> Result[list[CompileOutcome], CompilerError]:
    """
    Compile each ``(source, target)`` pair in order.

    The length check happens before any filesystem or process work. The first
    failing pair stops the loop; pairs compiled before it are left in place.
    """
    if len(source_dirs) != len(target_dirs):
        return Failure(PathMismatch(source_count=len(source_dirs), target_count=len(target_dirs)))

    outcomes: list[CompileOutcome] = []
    for source_dir, target_dir in zip(source_dirs, target_dirs):
        match invoke(runner, compiler, source_dir, target_dir, include_paths, log, output_flag):
            case Failure(error):
                return Failure(error)
            case Success(outcome):
                outcomes.append(outcome)
    return Success(outcomes)


__all__ = [
    "CompileOutcome",
    "Compiled",
    "DEFAULT_OUTPUT_FLAG",
    "SCHEMA_PATTERN",
    "Skipped",
    "build_arguments",
    "find_schema_files",
    "invoke",
    "invoke_all",
]
