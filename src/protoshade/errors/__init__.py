"""protoshade error ADTs."""

from protoshade.errors.compiler import (
    CompilerError,
    CompilerInvocationFailed,
    CompilerLaunchFailed,
    PathMismatch,
    ProcessError,
    VersionCheckError,
    VersionError,
    VersionMismatch,
    VersionUnparseable,
)
from protoshade.errors.config import (
    ConfigError,
    ConfigNotFound,
    ConfigUnreadable,
    InvalidConfig,
    PathOutsideSourceRoot,
    ScopeCollision,
)
from protoshade.errors.sync import IOFailure, ManifestCorrupt, SyncError

PipelineError = (
    PathMismatch
    | PathOutsideSourceRoot
    | ScopeCollision
    | VersionUnparseable
    | VersionMismatch
    | CompilerInvocationFailed
    | CompilerLaunchFailed
    | IOFailure
)

__all__ = [
    "CompilerError",
    "CompilerInvocationFailed",
    "CompilerLaunchFailed",
    "ConfigError",
    "ConfigNotFound",
    "ConfigUnreadable",
    "IOFailure",
    "InvalidConfig",
    "ManifestCorrupt",
    "PathMismatch",
    "PathOutsideSourceRoot",
    "PipelineError",
    "ScopeCollision",
    "ProcessError",
    "SyncError",
    "VersionCheckError",
    "VersionError",
    "VersionMismatch",
    "VersionUnparseable",
]
