"""
End-to-end generation pipeline.

For every configured ``(source, output)`` pair the compiler writes into a fresh
intermediate directory under the work directory, and the incremental
transformer then shades the intermediate tree into the real output directory.
The compiler version is checked once, before the first pair, and only when at
least one configured source directory exists.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path

from protoshade.compiler import invoke
from protoshade.config import CodegenConfig, ResolvedPair
from protoshade.errors import IOFailure, PathMismatch, PipelineError
from protoshade.log import Log
from protoshade.manifest import Delta, ManifestStore
from protoshade.process import ProcessRunner
from protoshade.result import Failure, Result, Success
from protoshade.rewrite import Transform, line_transform, replace_literal
from protoshade.sync import SyncReport, plan, synchronize
from protoshade.version import check_compiler_version


def transformable_for(config: CodegenConfig) -> Callable[[Path], bool]:
    """Rewrite everything except ``copy_suffixes``; copy everything when no rewrite is set."""
    suffixes = tuple(config.copy_suffixes)

    def transformable(path: Path) -> bool:
        if not config.rewrite_enabled:
            return False
        return not path.name.endswith(suffixes) if suffixes else True

    return transformable


def transform_for(config: CodegenConfig) -> Transform:
    replacement = config.rewrite_to if config.rewrite_to is not None else config.rewrite_from
    return line_transform(replace_literal(config.rewrite_from, replacement))


def store_for(config: CodegenConfig, pair: ResolvedPair) -> ManifestStore:
    return ManifestStore(config.cache_dir, pair.scope)


def _remove_tree(directory: Path) -> Result[None, IOFailure]:
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        pass
    except OSError as exc:
        return Failure(IOFailure(operation="delete", path=str(directory), message=str(exc)))
    return Success(None)


def _generate_pair(
    config: CodegenConfig, pair: ResolvedPair, runner: ProcessRunner, log: Log
) -> Result[SyncReport, PipelineError]:
    match _remove_tree(pair.intermediate_dir):
        case Failure(reset_error):
            return Failure(reset_error)

    match invoke(
        runner,
        config.compiler,
        pair.source_dir,
        pair.intermediate_dir,
        config.resolved_include_paths(),
        log,
        config.output_flag,
    ):
        case Failure(compile_error):
            return Failure(compile_error)

    match synchronize(
        pair.intermediate_dir,
        pair.output_dir,
        transformable_for(config),
        transform_for(config),
        store_for(config, pair),
        log,
    ):
        case Failure(sync_error):
            return Failure(sync_error)
        case Success(report):
            return Success(report)


def generate(config: CodegenConfig, runner: ProcessRunner, log: Log) -> Result[list[SyncReport], PipelineError]:
    """
    Compile and shade every configured pair.

    Source directories are only resolved against ``source_root`` once at least
    one of them exists and the compiler version matches, so an unused schema
    root outside ``source_root`` does not fail an otherwise empty build.

    Returns:
        Success(one SyncReport per pair), or Success([]) when no source
        directory exists; Failure with the first error otherwise. Pairs that
        completed before the failure keep their outputs.
    """
    if len(config.source_dirs) != len(config.output_dirs):
        return Failure(
            PathMismatch(source_count=len(config.source_dirs), target_count=len(config.output_dirs))
        )

    if not any(source_dir.exists() for source_dir in config.resolved_source_dirs()):
        log.info("No protobuf source directories found; nothing to generate")
        return Success([])

    match check_compiler_version(runner, config.compiler, config.compiler_version, log):
        case Failure(version_error):
            return Failure(version_error)

    match config.pairs():
        case Failure(pair_error):
            return Failure(pair_error)
        case Success(pairs):
            pass

    reports: list[SyncReport] = []
    for pair in pairs:
        match _generate_pair(config, pair, runner, log):
            case Failure(error):
                return Failure(error)
            case Success(report):
                reports.append(report)
    return Success(reports)


def pending(config: CodegenConfig, log: Log) -> Result[list[tuple[ResolvedPair, Delta]], PipelineError]:
    """Deltas the next transformation pass would apply, per pair, from the current intermediate trees."""
    match config.pairs():
        case Failure(pair_error):
            return Failure(pair_error)
        case Success(pairs):
            pass

    deltas: list[tuple[ResolvedPair, Delta]] = []
    for pair in pairs:
        match plan(pair.intermediate_dir, store_for(config, pair), log):
            case Failure(error):
                return Failure(error)
            case Success(delta):
                deltas.append((pair, delta))
    return Success(deltas)


def clean(config: CodegenConfig, log: Log, outputs: bool = False) -> Result[list[Path], PipelineError]:
    """Remove intermediate directories and manifests, and optionally the outputs."""
    match config.pairs():
        case Failure(pair_error):
            return Failure(pair_error)
        case Success(pairs):
            pass

    removed: list[Path] = []
    for pair in pairs:
        targets = [pair.intermediate_dir, pair.output_dir] if outputs else [pair.intermediate_dir]
        for directory in targets:
            if not directory.exists():
                continue
            match _remove_tree(directory):
                case Failure(error):
                    return Failure(error)
            removed.append(directory)
        store = store_for(config, pair)
        if store.clear():
            removed.append(store.path)
    for path in removed:
        log.info(f"Removed {path}")
    return Success(removed)


__all__ = ["clean", "generate", "pending", "store_for", "transform_for", "transformable_for"]
