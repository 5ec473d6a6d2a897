"""ADTs for configuration loading and path resolution failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import ValidationError


@dataclass(frozen=True)
class ConfigNotFound:
    """Configuration file does not exist."""

    path: str
    kind: Literal["ConfigNotFound"] = "ConfigNotFound"


@dataclass(frozen=True)
class ConfigUnreadable:
    """Configuration file exists but is not valid TOML."""

    path: str
    message: str
    kind: Literal["ConfigUnreadable"] = "ConfigUnreadable"


@dataclass(frozen=True)
class InvalidConfig:
    """Pydantic validation failed while building the configuration model."""

    error: ValidationError
    kind: Literal["InvalidConfig"] = "InvalidConfig"


@dataclass(frozen=True)
class PathOutsideSourceRoot:
    """A schema directory is not located under the configured source root."""

    path: str
    source_root: str
    kind: Literal["PathOutsideSourceRoot"] = "PathOutsideSourceRoot"


@dataclass(frozen=True)
class ScopeCollision:
    """Two source directories map to the same manifest file."""

    scope: str
    first: str
    second: str
    kind: Literal["ScopeCollision"] = "ScopeCollision"


ConfigError = ConfigNotFound | ConfigUnreadable | InvalidConfig

__all__ = [
    "ConfigError",
    "ConfigNotFound",
    "ConfigUnreadable",
    "InvalidConfig",
    "PathOutsideSourceRoot",
    "ScopeCollision",
]
