from __future__ import annotations

import shutil
from pathlib import Path

from parse.workspace_parser import parse_workspace
from typecheck.importer import ensure_type_checked, workspace_importer
from utils import resolve_package_path
from workspace.model import Workspace

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_module"


def _write_go_file(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _fixture_workspace(tmp_path: Path) -> Workspace:
    root = tmp_path / "mini"
    shutil.copytree(FIXTURE_ROOT, root)
    return parse_workspace(root)


def test_fixture_packages_type_check(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    main_pkg = ws.packages[resolve_package_path(ws, "main")]

    ensure_type_checked(ws, main_pkg)

    assert main_pkg.typed is not None
    assert main_pkg.typed.complete
    assert main_pkg.type_info is not None
    shapes = ws.package_for_import("example.com/mini/shapes")
    assert shapes is not None
    assert shapes.typed is not None, "imports are checked on demand"


def test_selector_into_workspace_package_records_use(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    main_pkg = ws.packages[resolve_package_path(ws, "main")]
    ensure_type_checked(ws, main_pkg)
    main_file = main_pkg.files["main.go"]
    offset = main_file.content.index(b"NewSquare")

    obj = main_pkg.type_info.uses[(main_file.path, offset)]

    shapes = ws.package_for_import("example.com/mini/shapes")
    assert shapes is not None
    shapes_file = shapes.files["shapes.go"]
    assert obj.name == "NewSquare"
    assert obj.kind == "func"
    assert obj.file == shapes_file.path
    assert obj.offset == shapes_file.content.index(b"NewSquare(side")


def test_ensure_type_checked_is_idempotent(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    pkg = ws.packages[resolve_package_path(ws, "shapes")]

    ensure_type_checked(ws, pkg)
    typed, info = pkg.typed, pkg.type_info
    ensure_type_checked(ws, pkg)

    assert pkg.typed is typed
    assert pkg.type_info is info


def test_importer_is_shared_and_external_handles_are_cached(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)

    importer = workspace_importer(ws)
    fmt = importer.import_("fmt")

    assert workspace_importer(ws) is importer
    assert importer.import_("fmt") is fmt
    assert fmt.opaque
    assert fmt.name == "fmt"
    assert fmt.lookup("Println") is fmt.lookup("Println")


def test_workspace_import_returns_checked_package(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    importer = workspace_importer(ws)

    typed = importer.import_("example.com/mini/shapes")

    shapes = ws.package_for_import("example.com/mini/shapes")
    assert shapes is not None
    assert typed is shapes.typed
    assert not typed.opaque
    assert typed.lookup("Square") is not None
    assert typed.lookup("Missing") is None


def test_undefined_identifier_keeps_partial_info(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "go.mod", "module example.com/broken\n")
    _write_go_file(
        tmp_path,
        "main.go",
        "package main\n\nfunc helper() int { return 1 }\n\nfunc main() {\n\tmissing()\n\t_ = helper()\n}\n",
    )
    ws = parse_workspace(tmp_path)
    (pkg,) = ws.packages.values()

    ensure_type_checked(ws, pkg)
    info = pkg.type_info
    ensure_type_checked(ws, pkg)

    assert pkg.typed is None
    assert info is not None
    assert pkg.type_info is info, "a failed check is not retried"
    file = pkg.files["main.go"]
    use_offset = file.content.index(b"helper()\n}")
    assert info.uses[(file.path, use_offset)].name == "helper"


def test_import_cycle_does_not_recurse(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "go.mod", "module example.com/cyc\n")
    _write_go_file(
        tmp_path,
        "a/a.go",
        'package a\n\nimport "example.com/cyc/b"\n\nfunc A() int {\n\treturn b.B()\n}\n',
    )
    _write_go_file(
        tmp_path,
        "b/b.go",
        'package b\n\nimport "example.com/cyc/a"\n\nfunc B() int {\n\treturn 1\n}\n\n'
        "func C() int {\n\treturn a.A()\n}\n",
    )
    ws = parse_workspace(tmp_path)
    a = ws.package_for_import("example.com/cyc/a")
    b = ws.package_for_import("example.com/cyc/b")
    assert a is not None
    assert b is not None

    ensure_type_checked(ws, a)

    assert a.typed is not None
    assert b.typed is not None
    assert a.typed.complete
    assert b.typed.complete
    b_file = b.files["b.go"]
    obj = b.type_info.uses[(b_file.path, b_file.content.index(b"A()\n"))]
    assert obj.package == "example.com/cyc/a"


def test_local_declarations_shadow_package_names(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "go.mod", "module example.com/shadow\n")
    _write_go_file(
        tmp_path,
        "main.go",
        "package main\n\nvar count = 1\n\nfunc main() {\n\tcount := 2\n\t_ = count\n}\n",
    )
    ws = parse_workspace(tmp_path)
    (pkg,) = ws.packages.values()

    ensure_type_checked(ws, pkg)

    file = pkg.files["main.go"]
    local_def = file.content.index(b"count := 2")
    use = file.content.index(b"count\n}")
    obj = pkg.type_info.uses[(file.path, use)]
    assert obj.offset == local_def
    assert obj.type == "int"
    assert pkg.type_info.defs[(file.path, local_def)] is obj
