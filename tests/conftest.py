# tests/conftest.py
"""Global PyTest fixtures for the test-suite.

No test spawns a real schema compiler: unit tests use ``FakeRunner`` and the
command line tests run a small Python script that imitates ``protoc``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from protoshade.config import CodegenConfig
from protoshade.log import RecordingLog
from protoshade.manifest import ManifestStore
from tests.helpers import FakeRunner


@pytest.fixture
def log() -> RecordingLog:
    return RecordingLog()


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "intermediate"
    path.mkdir()
    return path


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    return tmp_path / "output"


@pytest.fixture
def store(tmp_path: Path) -> ManifestStore:
    return ManifestStore(tmp_path / "cache", "main")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Project root with the default main/test schema layout."""
    root = tmp_path / "project"
    (root / "src" / "main" / "protobuf").mkdir(parents=True)
    return root


@pytest.fixture
def config(project: Path) -> CodegenConfig:
    return CodegenConfig(base_dir=project, rewrite_to="vendor.protobuf")
