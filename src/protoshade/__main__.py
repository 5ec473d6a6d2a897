"""Command line entry point for protobuf code generation.

Usage:
    python -m protoshade [--config FILE] [-v | -q] generate
    python -m protoshade [--config FILE] check-version
    python -m protoshade [--config FILE] status [--json]
    python -m protoshade [--config FILE] clean [--outputs]

Examples:
    # Compile and shade every configured schema directory
    python -m protoshade generate

    # Use a dedicated configuration file instead of ./pyproject.toml
    python -m protoshade --config protoshade.toml generate

    # Show which intermediate files would be rewritten on the next run
    python -m protoshade status

Exit codes:
    0: success
    1: build failure (compiler, version gate, filesystem)
    2: configuration error
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Never, Sequence

from protoshade.config import CodegenConfig, load_config
from protoshade.errors import (
    CompilerInvocationFailed,
    CompilerLaunchFailed,
    ConfigError,
    ConfigNotFound,
    ConfigUnreadable,
    InvalidConfig,
    IOFailure,
    PathMismatch,
    PathOutsideSourceRoot,
    PipelineError,
    ScopeCollision,
    VersionMismatch,
    VersionUnparseable,
)
from protoshade.log import Log, StdlibLog, configure_logging
from protoshade.pipeline import clean, generate, pending
from protoshade.process import ProcessRunner, SubprocessRunner
from protoshade.result import Failure, Result, Success
from protoshade.version import check_compiler_version


EXIT_OK = 0
EXIT_BUILD_FAILED = 1
EXIT_CONFIG_ERROR = 2

DEFAULT_CONFIG = Path("pyproject.toml")


def assert_never(value: Never) -> Never:
    """Exhaustiveness check for pattern matching over error unions."""
    raise AssertionError(f"Unhandled case: {value!r}")


def describe_error(error: PipelineError | ConfigError) -> str:
    """One-paragraph, human readable description of a failure."""
    match error:
        case PathMismatch():
            return error.message
        case PathOutsideSourceRoot(path=path, source_root=source_root):
            return f"path {path} is not in source tree {source_root}"
        case ScopeCollision(scope=scope, first=first, second=second):
            return f"source directories {first} and {second} share the manifest scope {scope!r}"
        case VersionUnparseable() | VersionMismatch() | CompilerLaunchFailed():
            return error.message
        case CompilerInvocationFailed(output=output):
            return f"{error.message}\n{output}".rstrip()
        case IOFailure(operation=operation, path=path, message=message):
            return f"{operation} failed for {path}: {message}"
        case ConfigNotFound(path=path):
            return f"configuration file not found: {path}"
        case ConfigUnreadable(path=path, message=message):
            return f"cannot read configuration {path}: {message}"
        case InvalidConfig(error=validation_error):
            return f"invalid configuration:\n{validation_error}"
        case _:
            assert_never(error)


def exit_code_for(error: PipelineError | ConfigError) -> int:
    match error:
        case (
            PathMismatch()
            | PathOutsideSourceRoot()
            | ScopeCollision()
            | ConfigNotFound()
            | ConfigUnreadable()
            | InvalidConfig()
        ):
            return EXIT_CONFIG_ERROR
        case _:
            return EXIT_BUILD_FAILED


def _fail(error: PipelineError | ConfigError) -> int:
    print(f"✗ {describe_error(error)}", file=sys.stderr)
    return exit_code_for(error)


def cmd_generate(config: CodegenConfig, runner: ProcessRunner, log: Log) -> int:
    match generate(config, runner, log):
        case Failure(error):
            return _fail(error)
        case Success(reports):
            written = sum(report.written for report in reports)
            deleted = sum(report.deleted for report in reports)
            print(f"✓ Generated code up to date ({written} written, {deleted} deleted)")
            return EXIT_OK


def cmd_check_version(config: CodegenConfig, runner: ProcessRunner, log: Log) -> int:
    match check_compiler_version(runner, config.compiler, config.compiler_version, log):
        case Failure(error):
            return _fail(error)
        case Success(installed):
            print(f"✓ {config.compiler} {installed} matches required {config.compiler_version}")
            return EXIT_OK


def cmd_status(config: CodegenConfig, log: Log, as_json: bool = False) -> int:
    match pending(config, log):
        case Failure(error):
            return _fail(error)
        case Success(deltas):
            pass

    if as_json:
        print(
            json.dumps(
                [
                    {
                        "source_dir": str(pair.source_dir),
                        "intermediate_dir": str(pair.intermediate_dir),
                        "output_dir": str(pair.output_dir),
                        "modified": sorted(delta.modified),
                        "removed": sorted(delta.removed),
                    }
                    for pair, delta in deltas
                ],
                indent=2,
            )
        )
        return EXIT_OK

    for pair, delta in deltas:
        state = "up to date" if delta.is_empty else f"{len(delta.modified)} modified, {len(delta.removed)} removed"
        print(f"{pair.output_dir}: {state}")
        for path in sorted(delta.modified):
            print(f"  M {path}")
        for path in sorted(delta.removed):
            print(f"  D {path}")
    return EXIT_OK


def cmd_clean(config: CodegenConfig, log: Log, outputs: bool = False) -> int:
    match clean(config, log, outputs=outputs):
        case Failure(error):
            return _fail(error)
        case Success(removed):
            print(f"✓ Removed {len(removed)} path(s)")
            return EXIT_OK


def _load(path: Path) -> Result[CodegenConfig, ConfigError]:
    # No pyproject.toml in the working directory: run with the built-in layout.
    if path == DEFAULT_CONFIG and not path.exists():
        return Success(CodegenConfig(base_dir=Path.cwd()))
    return load_config(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protoshade",
        description="Compile protobuf schemas and shade the generated code incrementally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="TOML configuration file (default: pyproject.toml)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Show warnings and errors only")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("generate", help="Compile schemas and update generated code")
    subparsers.add_parser("check-version", help="Check the installed compiler version")
    status_parser = subparsers.add_parser("status", help="Show pending changes without applying them")
    status_parser.add_argument("--json", action="store_true", dest="as_json", help="Print JSON")
    clean_parser = subparsers.add_parser("clean", help="Remove intermediate files and manifests")
    clean_parser.add_argument(
        "--outputs", action="store_true", help="Also remove the generated output directories"
    )
    return parser


def run(argv: Sequence[str] | None = None, runner: ProcessRunner | None = None) -> int:
    """Parse ``argv``, execute the command and return its exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(1 if args.verbose else -1 if args.quiet else 0)
    log = StdlibLog()
    process_runner = runner if runner is not None else SubprocessRunner()

    match _load(args.config):
        case Failure(config_error):
            return _fail(config_error)
        case Success(config):
            pass

    if args.command == "generate":
        return cmd_generate(config, process_runner, log)
    elif args.command == "check-version":
        return cmd_check_version(config, process_runner, log)
    elif args.command == "status":
        return cmd_status(config, log, args.as_json)
    elif args.command == "clean":
        return cmd_clean(config, log, args.outputs)
    raise AssertionError(f"Unhandled command: {args.command}")


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
