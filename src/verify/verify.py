"""Determinism verification for goscope-core reports."""

from __future__ import annotations

import filecmp
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.write import generate_all_reports

if TYPE_CHECKING:
    from rules.config import GoScopeConfig


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)


def _list_relative_files(root: Path) -> set[Path]:
    return {path.relative_to(root) for path in root.rglob("*") if path.is_file()}


def verify_determinism(
    *,
    root: Path,
    reports_dir: Path,
    config: GoScopeConfig | None = None,
) -> DeterminismResult:
    """Verify that goscope-core reports are deterministic.

    Regenerates every report into a temporary directory and compares them
    byte-for-byte against the existing reports directory. File sets are
    compared as relative paths.

    Args:
        root: Workspace root to analyze.
        reports_dir: Directory containing previously written reports.
        config: Optional configuration used for regeneration.

    Returns:
        DeterminismResult with ok status and lists of missing, extra, and
        mismatched relative paths.

    Raises:
        FileNotFoundError: If reports_dir does not exist.
        NotADirectoryError: If reports_dir is not a directory.
    """
    if not reports_dir.exists():
        msg = f"Reports directory does not exist: {reports_dir}"
        raise FileNotFoundError(msg)
    if not reports_dir.is_dir():
        msg = f"Reports path is not a directory: {reports_dir}"
        raise NotADirectoryError(msg)
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        generate_all_reports(root=root, out_dir=temp_path, config=config)

        original_files = _list_relative_files(reports_dir)
        regenerated_files = _list_relative_files(temp_path)

        missing = sorted(str(path) for path in original_files - regenerated_files)
        extra = sorted(str(path) for path in regenerated_files - original_files)

        mismatches = sorted(
            str(path)
            for path in original_files & regenerated_files
            if not filecmp.cmp(reports_dir / path, temp_path / path, shallow=False)
        )

    ok = not missing and not extra and not mismatches
    return DeterminismResult(
        ok=ok,
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
    )


__all__ = ["DeterminismResult", "verify_determinism"]
