"""
Incremental protobuf code generation with namespace shading.

The package compiles ``*.proto`` schema trees with an external compiler and
mirrors the generated sources into their final location, rewriting a fixed
literal on every line. A content-fingerprint manifest makes repeated builds
touch only the files whose compiler output actually changed.
"""

from __future__ import annotations

from protoshade.compiler import Compiled, Skipped, find_schema_files, invoke, invoke_all
from protoshade.config import CodegenConfig, ResolvedPair, load_config
from protoshade.log import Log, RecordingLog, SilentLog, StdlibLog
from protoshade.manifest import Delta, Manifest, ManifestStore, compute_delta
from protoshade.pipeline import generate
from protoshade.process import ProcessOutput, ProcessRunner, SubprocessRunner
from protoshade.result import Failure, Result, Success
from protoshade.rewrite import line_transform, replace_literal, rewrite_file
from protoshade.sync import SyncReport, plan, scan_tree, sync_directory, synchronize
from protoshade.version import PartialVersion, check_compiler_version, check_version


__all__ = [
    # Results
    "Failure",
    "Result",
    "Success",
    # Logging
    "Log",
    "RecordingLog",
    "SilentLog",
    "StdlibLog",
    # Compiler
    "Compiled",
    "PartialVersion",
    "ProcessOutput",
    "ProcessRunner",
    "Skipped",
    "SubprocessRunner",
    "check_compiler_version",
    "check_version",
    "find_schema_files",
    "invoke",
    "invoke_all",
    # Incremental transformation
    "Delta",
    "Manifest",
    "ManifestStore",
    "SyncReport",
    "compute_delta",
    "line_transform",
    "plan",
    "replace_literal",
    "rewrite_file",
    "scan_tree",
    "sync_directory",
    "synchronize",
    # Configuration
    "CodegenConfig",
    "ResolvedPair",
    "generate",
    "load_config",
]
