"""Report generation entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from rules.config import GoScopeConfig


def generate_all_reports(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: GoScopeConfig | None = None,
    package: str | None = None,
) -> dict[str, object]:
    """Generate reports via lazy import to avoid package import cycles."""
    from artifacts.write import generate_all_reports as _generate_all_reports

    return _generate_all_reports(
        root=root, out_dir=out_dir, config=config, package=package
    )


__all__ = ["generate_all_reports"]
