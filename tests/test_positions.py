from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from workspace.positions import NO_POS, PositionRegistry


def test_registered_ranges_are_contiguous_and_disjoint() -> None:
    registry = PositionRegistry()
    first = registry.add_file("a.go", b"package a\n")
    second = registry.add_file("b.go", b"package b\n\nfunc f() {}\n")

    assert first.base == 1
    assert second.base == first.base + first.size + 1
    assert registry.file(first.pos(first.size)) is first
    assert registry.file(second.pos(0)) is second
    assert len(registry) == 2


def test_position_reports_one_based_line_and_column() -> None:
    registry = PositionRegistry()
    content = b"package a\n\nfunc f() {}\n"
    registered = registry.add_file("a.go", content)

    func_pos = registry.position(registered.pos(content.index(b"func")))
    name_pos = registry.position(registered.pos(content.index(b"f()")))

    assert func_pos is not None
    assert (func_pos.filename, func_pos.line, func_pos.column) == ("a.go", 3, 1)
    assert name_pos is not None
    assert (name_pos.line, name_pos.column) == (3, 6)


def test_unknown_positions_resolve_to_none() -> None:
    registry = PositionRegistry()
    registered = registry.add_file("a.go", b"package a\n")

    assert registry.file(NO_POS) is None
    assert registry.position(registered.base + registered.size + 100) is None


def test_offset_outside_file_is_rejected() -> None:
    registry = PositionRegistry()
    registered = registry.add_file("a.go", b"package a\n")

    with pytest.raises(ValueError, match="out of range"):
        registered.pos(registered.size + 1)


def test_concurrent_registration_keeps_ranges_disjoint() -> None:
    registry = PositionRegistry()
    contents = [b"package p\n" * (i % 7 + 1) for i in range(200)]

    with ThreadPoolExecutor(max_workers=8) as executor:
        registered = list(
            executor.map(
                lambda item: registry.add_file(f"f{item[0]}.go", item[1]),
                enumerate(contents),
            )
        )

    ordered = sorted(registered, key=lambda r: r.base)
    for previous, current in zip(ordered, ordered[1:]):
        assert current.base > previous.base + previous.size
    for item in registered:
        assert registry.file(item.pos(0)) is item
    assert len(registry) == len(contents)
