# tests/test_pipeline.py
"""Tests for the end-to-end generation pipeline using an in-process compiler."""

from __future__ import annotations

from pathlib import Path

from protoshade.config import CodegenConfig
from protoshade.errors import (
    CompilerInvocationFailed,
    PathMismatch,
    PathOutsideSourceRoot,
    ScopeCollision,
    VersionMismatch,
)
from protoshade.log import RecordingLog
from protoshade.pipeline import (
    clean,
    generate,
    pending,
    store_for,
    transform_for,
    transformable_for,
)
from tests.helpers import (
    FakeRunner,
    expect_failure,
    expect_success,
    read_tree,
    stat_tree,
    write_tree,
)


def _schemas(project: Path) -> Path:
    return project / "src" / "main" / "protobuf"


def _outputs(project: Path) -> Path:
    return project / "src" / "main" / "python"


def test_generate_compiles_and_shades(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}", "pkg/b.proto": "message B {}"})

    reports = expect_success(generate(config, runner, log))

    outputs = read_tree(_outputs(project))
    assert set(outputs) == {"a_pb2.py", "pkg/b_pb2.py"}
    text = outputs["a_pb2.py"].decode("utf-8")
    assert "from vendor.protobuf import descriptor" in text
    assert "google.protobuf" not in text
    assert [report.written for report in reports] == [2, 0]


def test_version_is_checked_once_before_compiling(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": ""})
    write_tree(project / "src" / "test" / "protobuf", {"t.proto": ""})

    expect_success(generate(config, runner, log))

    assert runner.calls[0].args == ("--version",)
    assert [call.args for call in runner.calls].count(("--version",)) == 1
    assert len(runner.compile_calls) == 2


def test_version_mismatch_stops_before_compiling(
    project: Path, config: CodegenConfig, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": ""})
    runner = FakeRunner(version_output="libprotoc 3.8.0")

    error = expect_failure(generate(config, runner, log))

    assert isinstance(error, VersionMismatch)
    assert runner.compile_calls == []
    assert not _outputs(project).exists()


def test_no_source_directories_is_noop(
    tmp_path: Path, runner: FakeRunner, log: RecordingLog
) -> None:
    config = CodegenConfig(base_dir=tmp_path / "empty-project")

    reports = expect_success(generate(config, runner, log))

    assert reports == []
    assert runner.calls == []
    assert log.infos == ["No protobuf source directories found; nothing to generate"]


def test_path_mismatch_does_no_work(project: Path, runner: FakeRunner, log: RecordingLog) -> None:
    write_tree(_schemas(project), {"a.proto": ""})
    config = CodegenConfig(base_dir=project, output_dirs=(Path("src/main/python"),))

    error = expect_failure(generate(config, runner, log))

    assert isinstance(error, PathMismatch)
    assert runner.calls == []
    assert not (project / "target").exists()


def test_source_outside_root_does_not_compile(project: Path, runner: FakeRunner, log: RecordingLog) -> None:
    write_tree(project / "schemas", {"a.proto": ""})
    config = CodegenConfig(base_dir=project, source_dirs=(Path("schemas"),), output_dirs=(Path("out"),))

    error = expect_failure(generate(config, runner, log))

    assert isinstance(error, PathOutsideSourceRoot)
    assert runner.compile_calls == []
    assert not (project / "target").exists()


def test_compiler_failure_is_reported(project: Path, config: CodegenConfig, log: RecordingLog) -> None:
    write_tree(_schemas(project), {"a.proto": "garbage"})
    runner = FakeRunner(exit_code=1)

    error = expect_failure(generate(config, runner, log))

    assert isinstance(error, CompilerInvocationFailed)
    assert not _outputs(project).exists()


def test_second_generate_leaves_outputs_untouched(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}", "b.proto": "message B {}"})
    expect_success(generate(config, runner, log))
    before = stat_tree(_outputs(project))

    reports = expect_success(generate(config, runner, RecordingLog()))

    assert all(report.delta.is_empty for report in reports)
    assert stat_tree(_outputs(project)) == before


def test_edited_schema_rewrites_only_its_output(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}", "b.proto": "message B {}"})
    expect_success(generate(config, runner, log))
    before = stat_tree(_outputs(project))

    write_tree(_schemas(project), {"b.proto": "message B { int32 x = 1; }"})
    (main_report, _) = expect_success(generate(config, runner, log))

    after = stat_tree(_outputs(project))
    assert main_report.delta.modified == frozenset({"b_pb2.py"})
    assert after["a_pb2.py"] == before["a_pb2.py"]
    assert after["b_pb2.py"] != before["b_pb2.py"]


def test_removed_schema_removes_output(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}", "old.proto": "message Old {}"})
    expect_success(generate(config, runner, log))

    (_schemas(project) / "old.proto").unlink()
    expect_success(generate(config, runner, log))

    assert set(read_tree(_outputs(project))) == {"a_pb2.py"}


def test_without_rewrite_outputs_are_verbatim(
    project: Path, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}"})
    config = CodegenConfig(base_dir=project)

    expect_success(generate(config, runner, log))

    intermediate = project / "target" / "protoc" / "gen" / "main" / "protobuf" / "a_pb2.py"
    assert (_outputs(project) / "a_pb2.py").read_bytes() == intermediate.read_bytes()


def test_copy_suffixes_bypass_rewrite(project: Path) -> None:
    config = CodegenConfig(base_dir=project, rewrite_to="vendor.protobuf", copy_suffixes=(".pyi",))
    transformable = transformable_for(config)

    assert transformable(Path("a_pb2.py"))
    assert not transformable(Path("a_pb2.pyi"))
    assert not transformable_for(CodegenConfig(base_dir=project))(Path("a_pb2.py"))


def test_pending_reports_without_applying(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}"})
    expect_success(generate(config, runner, log))
    intermediate = project / "target" / "protoc" / "gen" / "main" / "protobuf"
    write_tree(intermediate, {"extra_pb2.py": "x = 1\n"})
    before = stat_tree(_outputs(project))

    deltas = expect_success(pending(config, log))

    (main_pair, main_delta), (_, test_delta) = deltas
    assert main_pair.intermediate_dir == intermediate
    assert main_delta.modified == frozenset({"extra_pb2.py"})
    assert test_delta.is_empty
    assert stat_tree(_outputs(project)) == before


def test_clean_removes_intermediates_and_manifests(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}"})
    reports = expect_success(generate(config, runner, log))
    assert reports
    (main_pair, _) = expect_success(config.pairs())
    store = store_for(config, main_pair)
    assert store.path.exists()

    removed = expect_success(clean(config, log))

    assert main_pair.intermediate_dir in removed
    assert store.path in removed
    assert not store.path.exists()
    assert (_outputs(project) / "a_pb2.py").exists()


def test_clean_with_outputs(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}"})
    expect_success(generate(config, runner, log))

    expect_success(clean(config, log, outputs=True))

    assert not _outputs(project).exists()


def test_generate_after_clean_rebuilds(
    project: Path, config: CodegenConfig, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}"})
    expect_success(generate(config, runner, log))
    expect_success(clean(config, log, outputs=True))

    (main_report, _) = expect_success(generate(config, runner, log))

    assert main_report.written == 1
    assert (_outputs(project) / "a_pb2.py").exists()


def test_source_dir_named_cache_keeps_manifests(
    project: Path, runner: FakeRunner, log: RecordingLog
) -> None:
    write_tree(project / "src" / "cache", {"c.proto": "message C {}", "old.proto": "message Old {}"})
    write_tree(_schemas(project), {"a.proto": "message A {}"})
    config = CodegenConfig(
        base_dir=project,
        source_dirs=(Path("src/cache"), Path("src/main/protobuf")),
        output_dirs=(Path("out/cache"), Path("src/main/python")),
    )
    expect_success(generate(config, runner, log))

    reports = expect_success(generate(config, runner, log))

    assert [report.written for report in reports] == [0, 0]

    (project / "src" / "cache" / "old.proto").unlink()
    expect_success(generate(config, runner, log))

    assert set(read_tree(project / "out" / "cache")) == {"c_pb2.py"}


def test_colliding_scopes_do_not_compile(project: Path, runner: FakeRunner, log: RecordingLog) -> None:
    write_tree(_schemas(project), {"a.proto": ""})
    write_tree(project / "src" / "main_protobuf", {"b.proto": ""})
    config = CodegenConfig(
        base_dir=project,
        source_dirs=(Path("src/main/protobuf"), Path("src/main_protobuf")),
        output_dirs=(Path("out/a"), Path("out/b")),
    )

    error = expect_failure(generate(config, runner, log))

    assert isinstance(error, ScopeCollision)
    assert runner.compile_calls == []


def test_empty_replacement_strips_literal(project: Path, runner: FakeRunner, log: RecordingLog) -> None:
    write_tree(_schemas(project), {"a.proto": "message A {}"})
    config = CodegenConfig(base_dir=project, rewrite_from="google.", rewrite_to="")

    expect_success(generate(config, runner, log))

    text = (_outputs(project) / "a_pb2.py").read_text(encoding="utf-8")
    assert "from protobuf import descriptor as _descriptor" in text
    assert "google." not in text


def test_transform_for_empty_replacement(tmp_path: Path) -> None:
    source = tmp_path / "in_pb2.py"
    target = tmp_path / "out_pb2.py"
    source.write_text("import google.protobuf\n", encoding="utf-8")

    transform_for(CodegenConfig(rewrite_from="google.", rewrite_to=""))(source, target)

    assert target.read_text(encoding="utf-8").strip() == "import protobuf"


def test_unused_root_outside_source_root_is_noop(
    project: Path, runner: FakeRunner, log: RecordingLog
) -> None:
    config = CodegenConfig(
        base_dir=project,
        source_dirs=(Path("src/main/protobuf"), Path("schemas/test")),
        output_dirs=(Path("src/main/python"), Path("out/test")),
    )
    (project / "src" / "main" / "protobuf").rmdir()

    reports = expect_success(generate(config, runner, log))

    assert reports == []
    assert runner.calls == []
