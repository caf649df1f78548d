from __future__ import annotations

import logging
import shutil
from pathlib import Path

import pytest

from parse.workspace_parser import parse_file, parse_package, parse_workspace, read_go_mod
from resolve.symbol_table import build_symbol_table
from scan.files import find_package_dirs
from workspace.errors import ErrorKind, FileSystemError, ParseError
from workspace.positions import PositionRegistry

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_module"


def _write_go_file(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _copy_fixture(tmp_path: Path) -> Path:
    root = tmp_path / "mini"
    shutil.copytree(FIXTURE_ROOT, root)
    return root.resolve()


def test_read_go_mod_reads_module_and_go_version() -> None:
    module = read_go_mod(
        "// comment\nmodule example.com/app // trailing\n\ngo 1.22\n\nrequire x v1\n"
    )

    assert module.path == "example.com/app"
    assert module.go_version == "1.22"
    assert module.go_mod.startswith("// comment")


def test_parse_workspace_discovers_packages_and_import_paths(tmp_path: Path) -> None:
    root = _copy_fixture(tmp_path)

    ws = parse_workspace(root)

    assert ws.module is not None
    assert ws.module.path == "example.com/mini"
    assert {pkg.name for pkg in ws.packages.values()} == {"main", "shapes", "util"}
    assert sorted(ws.import_to_path) == [
        "example.com/mini",
        "example.com/mini/internal/util",
        "example.com/mini/shapes",
    ]
    for import_path, fs_path in ws.import_to_path.items():
        assert ws.packages[fs_path].import_path == import_path


def test_parse_workspace_skips_vendor_and_hidden_dirs(tmp_path: Path) -> None:
    root = _copy_fixture(tmp_path)

    dirs = [p.relative_to(root).as_posix() for p in find_package_dirs(root)]

    assert dirs == [".", "internal/util", "shapes"]


def test_test_files_are_kept_apart(tmp_path: Path) -> None:
    root = _copy_fixture(tmp_path)

    ws = parse_workspace(root)
    shapes = ws.packages[str(root / "shapes")]

    assert list(shapes.files) == ["shapes.go"]
    assert list(shapes.test_files) == ["shapes_test.go"]
    assert shapes.imports == []
    assert shapes.test_files["shapes_test.go"].is_test


def test_every_file_belongs_to_its_package(tmp_path: Path) -> None:
    root = _copy_fixture(tmp_path)

    ws = parse_workspace(root)

    for pkg in ws.packages.values():
        for name, file in pkg.files.items():
            assert file.package is pkg
            assert pkg.files[name] is file
        for file in pkg.test_files.values():
            assert file.package is pkg


def test_imports_are_deduplicated_in_first_seen_order(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "go.mod", "module example.com/app\n")
    _write_go_file(
        tmp_path,
        "a.go",
        'package app\n\nimport (\n\t"os"\n\t"fmt"\n)\n\nvar _ = fmt.Sprint\nvar _ = os.Args\n',
    )
    _write_go_file(
        tmp_path,
        "b.go",
        'package app\n\nimport "fmt"\nimport s "strings"\n\nvar _ = fmt.Sprint\nvar _ = s.ToUpper\n',
    )
    _write_go_file(
        tmp_path, "a_test.go", 'package app\n\nimport "testing"\n\nfunc TestA(t *testing.T) {}\n'
    )

    pkg = parse_package(tmp_path, PositionRegistry())

    assert pkg.name == "app"
    assert pkg.imports == ["os", "fmt", "strings"]


def test_package_with_only_test_files_is_rejected(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "x_test.go", "package x\n")

    with pytest.raises(ParseError, match="no non-test Go files"):
        parse_package(tmp_path, PositionRegistry())


def test_parse_file_reports_syntax_error_location(tmp_path: Path) -> None:
    path = _write_go_file(tmp_path, "bad.go", "package bad\n\nfunc broken( {\n")

    with pytest.raises(ParseError) as exc_info:
        parse_file(path, PositionRegistry())

    assert exc_info.value.kind is ErrorKind.PARSE
    assert exc_info.value.file == str(path)
    assert exc_info.value.line >= 3


def test_parse_file_missing_file_is_file_system_error(tmp_path: Path) -> None:
    with pytest.raises(FileSystemError):
        parse_file(tmp_path / "missing.go", PositionRegistry())


def test_broken_package_is_skipped_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _write_go_file(tmp_path, "good/good.go", "package good\n\nfunc Good() {}\n")
    _write_go_file(tmp_path, "bad/bad.go", "package bad\n\nfunc broken( {\n")

    with caplog.at_level(logging.WARNING, logger="parse.workspace_parser"):
        ws = parse_workspace(tmp_path, max_workers=2)

    assert [pkg.name for pkg in ws.packages.values()] == ["good"]
    assert any("failed to parse package" in r.getMessage() for r in caplog.records)


def test_workspace_without_go_mod_has_no_import_paths(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "lib/lib.go", "package lib\n\nfunc Lib() {}\n")

    ws = parse_workspace(tmp_path)

    assert ws.module is None
    assert ws.import_to_path == {}
    (pkg,) = ws.packages.values()
    assert pkg.import_path == ""
    assert pkg.key == pkg.path


def test_missing_root_is_file_system_error(tmp_path: Path) -> None:
    with pytest.raises(FileSystemError):
        parse_workspace(tmp_path / "nope")


@pytest.mark.parametrize("max_workers", [1, 4])
def test_parse_workspace_is_idempotent(tmp_path: Path, max_workers: int) -> None:
    root = _copy_fixture(tmp_path)

    first = parse_workspace(root, max_workers=max_workers)
    second = parse_workspace(root, max_workers=max_workers)

    assert list(first.packages) == list(second.packages)
    for key, pkg in first.packages.items():
        other = second.packages[key]
        assert list(pkg.files) == list(other.files)
        for name, file in pkg.files.items():
            assert str(file.root) == str(other.files[name].root)
        table = build_symbol_table(pkg)
        other_table = build_symbol_table(other)
        assert table.functions.keys() == other_table.functions.keys()
        assert table.types.keys() == other_table.types.keys()
        assert table.variables.keys() == other_table.variables.keys()
        assert table.constants.keys() == other_table.constants.keys()
        assert table.methods.keys() == other_table.methods.keys()


def test_respect_gitignore_prunes_ignored_dirs(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "kept/kept.go", "package kept\n")
    _write_go_file(tmp_path, "generated/gen.go", "package generated\n")
    (tmp_path / ".gitignore").write_text("generated\n", encoding="utf-8")

    default_dirs = find_package_dirs(tmp_path)
    ignoring_dirs = find_package_dirs(tmp_path, respect_gitignore=True)

    assert [p.name for p in default_dirs] == ["generated", "kept"]
    assert [p.name for p in ignoring_dirs] == ["kept"]
