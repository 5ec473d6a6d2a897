"""Shared test utilities for the protoshade test suite.

Usage:
    >>> from tests.helpers import expect_success, FakeRunner, write_tree
    >>> runner = FakeRunner(version_output="libprotoc 3.9.1")
    >>> write_tree(tmp_path / "src", {"a.proto": 'syntax = "proto3";'})
"""

from __future__ import annotations

from tests.helpers.fakes import (
    GENERATED_HEADER,
    FakeRunner,
    RecordedCall,
    generated_source,
    write_fake_compiler,
)
from tests.helpers.result_utils import E, T, expect_failure, expect_success
from tests.helpers.trees import read_tree, stat_tree, write_tree

__all__ = [
    # Result unwrapping
    "expect_success",
    "expect_failure",
    "T",
    "E",
    # Fakes
    "FakeRunner",
    "RecordedCall",
    "GENERATED_HEADER",
    "generated_source",
    "write_fake_compiler",
    # Trees
    "read_tree",
    "stat_tree",
    "write_tree",
]
