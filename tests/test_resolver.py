from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from parse.workspace_parser import parse_workspace
from resolve.resolver import SymbolResolver
from utils import is_exported, resolve_package_path
from workspace.errors import ErrorKind, SymbolNotFound
from workspace.model import Package, Workspace

FIXTURE_ROOT = Path(__file__).parent / "fixtures" / "mini_module"

SHADOWING_SOURCE = """package main

func helper() int { return 1 }

func main() {
\thelper := func() int { return 2 }
\t_ = helper()
\t_ = other()
}

func other() int { return helper() }
"""


def _write_go_file(root: Path, rel_path: str, content: str) -> Path:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _fixture_workspace(tmp_path: Path) -> Workspace:
    root = tmp_path / "mini"
    shutil.copytree(FIXTURE_ROOT, root)
    return parse_workspace(root)


def _package(ws: Workspace, name: str) -> Package:
    return ws.packages[resolve_package_path(ws, name)]


def test_symbol_table_buckets(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)

    table = resolver.build_symbol_table(_package(ws, "shapes"))

    assert sorted(table.functions) == ["NewSquare", "Perimeter", "clamp", "unusedHelper"]
    assert sorted(table.types) == ["Shape", "Square"]
    assert table.types["Shape"].kind == "interface"
    assert table.types["Square"].kind == "type"
    assert list(table.variables) == ["unusedCounter"]
    assert list(table.constants) == ["sides"]
    assert [m.name for m in table.methods["Square"]] == ["Area", "perimeter"]
    assert [m.name for m in table.methods["Shape"]] == ["Area", "perimeter"]
    assert all(m.kind == "method" for m in table.methods["Shape"])


def test_exported_flag_matches_name(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)
    resolver.build_all()

    for pkg in ws.packages.values():
        assert pkg.symbols is not None
        for symbol in pkg.symbols.iter_symbols():
            assert symbol.exported == is_exported(symbol.name)


def test_signatures_list_parameter_names(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)
    util = _package(ws, "util")

    assert resolver.resolve(util, "Max").signature == "Max(a, b)"
    assert resolver.resolve(util, "Label").signature == "Label(n)"
    assert resolver.resolve(_package(ws, "shapes"), "Square.Area").signature == "Area()"


def test_include_tests_adds_test_declarations(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)
    shapes = _package(ws, "shapes")

    without = resolver.build_symbol_table(shapes)
    with_tests = resolver.build_symbol_table(shapes, include_tests=True)

    assert "TestArea" not in without.functions
    assert "helperForTests" in with_tests.functions
    assert with_tests.functions["NewSquare"].file.endswith("shapes.go")


def test_resolve_method_forms(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)
    shapes = _package(ws, "shapes")

    method = resolver.resolve(shapes, "Square.perimeter")

    assert method.kind == "method"
    assert method.receiver == "Square"
    assert method.qualified_name == "Square.perimeter"

    with pytest.raises(SymbolNotFound, match="ambiguous") as exc_info:
        resolver.resolve(shapes, "Area")
    assert "Shape.Area, Square.Area" in str(exc_info.value)


def test_resolve_unknown_name_raises(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)

    with pytest.raises(SymbolNotFound) as exc_info:
        resolver.resolve(_package(ws, "shapes"), "Circle")

    assert exc_info.value.kind is ErrorKind.SYMBOL_NOT_FOUND
    with pytest.raises(SymbolNotFound):
        resolver.resolve(_package(ws, "shapes"), "Circle.Area")


def test_resolve_round_trip(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)
    resolver.build_all()

    for pkg in ws.packages.values():
        assert pkg.symbols is not None
        for symbol in pkg.symbols.iter_symbols():
            if symbol.kind == "method":
                continue
            resolved = resolver.resolve(pkg, symbol.name)
            assert resolved.file == symbol.file
            assert resolved.line == symbol.line


def test_find_references_across_packages(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)
    symbol = resolver.resolve(_package(ws, "shapes"), "NewSquare")

    refs = resolver.find_references(symbol)

    assert [(Path(r.file).name, r.line) for r in refs] == [
        ("main.go", 25),
        ("shapes_test.go", 6),
    ]
    assert refs[0].column == 15
    assert refs[0].context == "call"
    assert all(r.symbol == symbol for r in refs)


def test_find_references_uses_type_info_for_shadowed_names(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "go.mod", "module example.com/shadow\n")
    _write_go_file(tmp_path, "main.go", SHADOWING_SOURCE)
    ws = parse_workspace(tmp_path)
    (pkg,) = ws.packages.values()

    typed = SymbolResolver(ws)
    by_name = SymbolResolver(ws, use_types=False)
    symbol = typed.resolve(pkg, "helper")

    assert [r.line for r in typed.find_references(symbol)] == [11]
    assert [r.line for r in by_name.find_references(symbol)] == [7, 11]


def test_find_definition(tmp_path: Path) -> None:
    _write_go_file(tmp_path, "go.mod", "module example.com/shadow\n")
    path = _write_go_file(tmp_path, "main.go", SHADOWING_SOURCE)
    ws = parse_workspace(tmp_path)
    (pkg,) = ws.packages.values()
    file = pkg.files["main.go"]
    resolver = SymbolResolver(ws)

    offset = file.content.index(b"helper() }")
    symbol = resolver.find_definition(file.path, offset + 2)

    assert symbol.name == "helper"
    assert symbol.kind == "function"
    assert symbol.line == 3

    with pytest.raises(SymbolNotFound):
        resolver.find_definition(str(path.parent / "elsewhere.go"), 0)


def test_find_definition_follows_package_qualifier(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    main_file = _package(ws, "main").files["main.go"]

    for resolver in (SymbolResolver(ws), SymbolResolver(ws, use_types=False)):
        offset = main_file.content.index(b"Perimeter(s)")
        symbol = resolver.find_definition(main_file.path, offset)

        assert symbol.name == "Perimeter"
        assert symbol.file.endswith("shapes.go")


@pytest.mark.parametrize("needle", [b".Perimeter(s)", b"(s)"])
def test_find_definition_excludes_identifier_end(tmp_path: Path, needle: bytes) -> None:
    ws = _fixture_workspace(tmp_path)
    main_file = _package(ws, "main").files["main.go"]
    resolver = SymbolResolver(ws)

    offset = main_file.content.index(b"shapes.Perimeter(s)") + (
        b"shapes.Perimeter(s)".index(needle)
    )

    with pytest.raises(SymbolNotFound, match="no identifier at offset"):
        resolver.find_definition(main_file.path, offset)


def test_reference_index_marks_declarations(tmp_path: Path) -> None:
    ws = _fixture_workspace(tmp_path)
    resolver = SymbolResolver(ws)

    index = resolver.index

    occurrences = index.occurrences("unusedHelper")
    assert len(occurrences) == 1
    assert occurrences[0].is_declaration
    assert index.uses("unusedHelper") == []
    assert "clamp" in index.referenced_names()
    assert "unusedHelper" not in index.referenced_names()
    qualified = [e for e in index.uses("NewSquare") if e.qualifier is not None]
    assert [e.qualifier for e in qualified] == ["shapes"]
