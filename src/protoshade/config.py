"""
Code generation configuration.

Settings live in a TOML file, either as a ``[tool.protoshade]`` table inside
``pyproject.toml`` or as the top-level table of a dedicated file:

    [tool.protoshade]
    source_dirs = ["src/main/protobuf", "src/test/protobuf"]
    output_dirs = ["src/main/python", "src/test/python"]
    compiler_version = "3.9.0"
    rewrite_to = "vendor.protobuf"

Relative paths resolve against ``base_dir``, which itself defaults to the
directory holding the configuration file.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from protoshade.compiler import DEFAULT_OUTPUT_FLAG
from protoshade.errors import (
    ConfigError,
    ConfigNotFound,
    ConfigUnreadable,
    InvalidConfig,
    PathMismatch,
    PathOutsideSourceRoot,
    ScopeCollision,
)
from protoshade.manifest import scope_file_stem
from protoshade.result import Failure, Result, Success, collect_results


TModel = TypeVar("TModel", bound=BaseModel)

CONFIG_TABLE = ("tool", "protoshade")
CACHE_DIR_NAME = "cache"
INTERMEDIATE_DIR_NAME = "gen"
ROOT_SCOPE = "root"


class CodegenConfig(BaseModel):
    """Paths and compiler settings for one project."""

    base_dir: Path = Path(".")
    source_root: Path = Path("src")
    source_dirs: tuple[Path, ...] = (Path("src/main/protobuf"), Path("src/test/protobuf"))
    output_dirs: tuple[Path, ...] = (Path("src/main/python"), Path("src/test/python"))
    include_paths: tuple[Path, ...] = ()
    work_dir: Path = Path("target/protoc")
    compiler: str = Field(default="protoc", min_length=1)
    compiler_version: str = Field(default="3.9.0", min_length=1)
    output_flag: str = Field(default=DEFAULT_OUTPUT_FLAG, min_length=1)
    rewrite_from: str = Field(default="google.protobuf", min_length=1)
    rewrite_to: str | None = None
    copy_suffixes: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    def resolve(self, path: Path) -> Path:
        """Absolute form of ``path``, anchored at ``base_dir`` when relative."""
        anchored = path if path.is_absolute() else self.base_dir / path
        return anchored.absolute()

    @property
    def cache_dir(self) -> Path:
        return self.resolve(self.work_dir) / CACHE_DIR_NAME

    @property
    def intermediate_root(self) -> Path:
        return self.resolve(self.work_dir) / INTERMEDIATE_DIR_NAME

    @property
    def rewrite_enabled(self) -> bool:
        return self.rewrite_to is not None

    def resolved_include_paths(self) -> list[Path]:
        return [self.resolve(path) for path in self.include_paths]

    def resolved_source_dirs(self) -> list[Path]:
        return [self.resolve(path) for path in self.source_dirs]

    def pairs(self) -> Result[list[ResolvedPair], PathMismatch | PathOutsideSourceRoot | ScopeCollision]:
        """
        Resolve every ``(source, output)`` pair with its intermediate directory.

        Returns:
            Failure(PathMismatch) if the directory lists differ in length,
            Failure(PathOutsideSourceRoot) for a source outside ``source_root``,
            Failure(ScopeCollision) if two sources would share a manifest file,
            Success(pairs) otherwise.
        """
        if len(self.source_dirs) != len(self.output_dirs):
            return Failure(
                PathMismatch(source_count=len(self.source_dirs), target_count=len(self.output_dirs))
            )
        resolved: list[Result[ResolvedPair, PathOutsideSourceRoot]] = [
            self._resolve_pair(source, output)
            for source, output in zip(self.source_dirs, self.output_dirs)
        ]
        match collect_results(resolved):
            case Failure(error):
                return Failure(error)
            case Success(pairs):
                pass

        seen: dict[str, ResolvedPair] = {}
        for pair in pairs:
            stem = scope_file_stem(pair.scope)
            if stem in seen:
                return Failure(
                    ScopeCollision(
                        scope=stem, first=str(seen[stem].source_dir), second=str(pair.source_dir)
                    )
                )
            seen[stem] = pair
        return Success(pairs)

    def _resolve_pair(self, source: Path, output: Path) -> Result[ResolvedPair, PathOutsideSourceRoot]:
        source_dir = self.resolve(source)
        source_root = self.resolve(self.source_root)
        if not source_dir.is_relative_to(source_root):
            return Failure(PathOutsideSourceRoot(path=str(source_dir), source_root=str(source_root)))
        relative = source_dir.relative_to(source_root)
        # Each pair needs its own subdirectory of the intermediate root.
        if relative == Path("."):
            relative = Path(ROOT_SCOPE)
        return Success(
            ResolvedPair(
                source_dir=source_dir,
                output_dir=self.resolve(output),
                intermediate_dir=self.intermediate_root / relative,
                scope=relative.as_posix(),
            )
        )


@dataclass(frozen=True)
class ResolvedPair:
    """One schema directory and everywhere its generated code passes through.

    Attributes:
        source_dir: Absolute schema root handed to the compiler.
        output_dir: Absolute final output directory.
        intermediate_dir: Compiler output before rewriting, under the work directory.
        scope: Cache scope name for this pair's manifest.
    """

    source_dir: Path
    output_dir: Path
    intermediate_dir: Path
    scope: str


def validate_model(model_cls: type[TModel], **data: object) -> Result[TModel, ValidationError]:
    """Construct a pydantic model and surface validation issues as a Result."""
    try:
        return Success(model_cls(**data))
    except ValidationError as exc:
        return Failure(exc)


def _select_table(document: dict[str, object]) -> dict[str, object]:
    tool = document.get(CONFIG_TABLE[0])
    if isinstance(tool, dict) and isinstance(tool.get(CONFIG_TABLE[1]), dict):
        return dict(tool[CONFIG_TABLE[1]])
    if CONFIG_TABLE[0] in document:
        # A pyproject.toml without our table: use the defaults.
        return {}
    return dict(document)


def load_config(path: Path) -> Result[CodegenConfig, ConfigError]:
    """
    Read and validate a configuration file.

    Returns:
        Success(CodegenConfig), or Failure(ConfigNotFound | ConfigUnreadable | InvalidConfig).
    """
    if not path.is_file():
        return Failure(ConfigNotFound(path=str(path)))
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        return Failure(ConfigUnreadable(path=str(path), message=str(exc)))

    data = _select_table(document)
    base_dir = Path(str(data.get("base_dir", ".")))
    data["base_dir"] = base_dir if base_dir.is_absolute() else path.parent.absolute() / base_dir

    match validate_model(CodegenConfig, **data):
        case Failure(error):
            return Failure(InvalidConfig(error=error))
        case Success(config):
            return Success(config)


__all__ = [
    "CACHE_DIR_NAME",
    "INTERMEDIATE_DIR_NAME",
    "CodegenConfig",
    "ResolvedPair",
    "load_config",
    "validate_model",
]
