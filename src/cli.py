"""Command-line interface for goscope-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from artifacts.write import generate_all_reports
from rules.config import ConfigError, load_config, resolve_output_dir
from verify.verify import verify_determinism
from workspace.errors import AnalysisError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Workspace root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="goscope")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze a Go workspace and write reports"
    )
    _add_common_paths(analyze_parser)
    analyze_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for reports (default: config output dir)",
    )
    analyze_parser.add_argument(
        "--package",
        default=None,
        help="Limit reports to one package (directory, import path or name)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify determinism of written reports"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--reports-dir",
        default=None,
        help="Reports directory (default: config output dir)",
    )

    return parser


def _resolve_out_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _resolve_reports_dir(root: Path, reports_dir: str | None) -> Path:
    if reports_dir is None:
        config = load_config(root)
        return resolve_output_dir(root, config.output_dir)
    return Path(reports_dir).expanduser().resolve()


def _handle_analyze(root: Path, out_dir: str | None, package: str | None) -> int:
    summary = generate_all_reports(
        root=root, out_dir=_resolve_out_dir(out_dir), package=package
    )
    sys.stdout.write(
        f"packages: {summary['package_count']}  "
        f"symbols: {summary['symbol_count']}  "
        f"unused: {summary['unused_count']}  "
        f"complex: {summary['complexity_count']}  "
        f"if-init: {summary['if_init_count']}  "
        f"boolean-branching: {summary['boolean_branching_count']}\n"
        f"deep-if-else: {summary['deep_if_else_count']}  "
        f"error-wrapping: {summary['error_wrapping_count']}  "
        f"missing-context: {summary['missing_context_count']}  "
        f"env-booleans: {summary['env_booleans_count']}\n"
    )
    return 0


def _handle_verify(root: Path, reports_dir: str | None) -> int:
    resolved_reports_dir = _resolve_reports_dir(root, reports_dir)
    try:
        result = verify_determinism(root=root, reports_dir=resolved_reports_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"reports-dir: {resolved_reports_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    root = Path(args.root).expanduser().resolve()

    try:
        if args.command == "analyze":
            return _handle_analyze(root, args.out_dir, args.package)

        if args.command == "verify":
            return _handle_verify(root, args.reports_dir)
    except (AnalysisError, ConfigError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
