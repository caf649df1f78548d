from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from analyzers.boolean_branching import BooleanBranchingAnalyzer
from analyzers.complexity import ComplexityAnalyzer
from analyzers.deep_if_else import DeepIfElseAnalyzer
from analyzers.dependencies import analyze_dependencies
from analyzers.env_booleans import EnvBooleanAnalyzer
from analyzers.error_wrapping import ErrorWrappingAnalyzer
from analyzers.if_init import IfInitAnalyzer
from analyzers.missing_context import MissingContextAnalyzer
from analyzers.unused import UnusedAnalyzer
from artifacts.utils import _write_json, _write_jsonl, to_report_payload
from contract.artifacts import (
    BOOLEAN_BRANCHING_JSONL,
    COMPLEXITY_JSONL,
    DEEP_IF_ELSE_JSONL,
    DEPENDENCIES_JSON,
    ENV_BOOLEANS_JSONL,
    ERROR_WRAPPING_JSONL,
    IF_INIT_JSONL,
    MISSING_CONTEXT_JSONL,
    REPORT_SPECS,
    SYMBOLS_JSONL,
    UNUSED_JSONL,
    build_diagnostic_id,
)
from parse.workspace_parser import parse_workspace
from resolve.resolver import SymbolResolver
from rules.config import load_config, resolve_output_dir
from utils import resolve_package_path
from workspace.errors import AnalysisError, ErrorKind

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from artifacts.models.artifacts.diagnostics import (
        BooleanBranchingViolation,
        ComplexityResult,
        DeepIfElseViolation,
        EnvBooleanViolation,
        ErrorWrappingViolation,
        IfInitViolation,
        MissingContextViolation,
        UnusedSymbol,
    )
    from rules.config import GoScopeConfig
    from workspace.model import Package, Workspace

logger = logging.getLogger(__name__)


def _select_packages(ws: Workspace, package: str | None) -> list[Package]:
    if package is None:
        return list(ws.packages.values())
    key = resolve_package_path(ws, package)
    if key not in ws.packages:
        msg = f"package not found: {package}"
        raise AnalysisError(msg, kind=ErrorKind.INVALID_OPERATION)
    return [ws.packages[key]]


def _symbol_records(packages: list[Package], root: str) -> list[object]:
    records: list[object] = []
    for pkg in packages:
        if pkg.symbols is None:
            continue
        symbols = sorted(
            pkg.symbols.iter_symbols(), key=lambda s: (s.file, s.line, s.column)
        )
        for symbol in symbols:
            payload = to_report_payload(symbol, root)
            assert isinstance(payload, dict)
            payload["symbol_id"] = symbol.symbol_id(payload["file"])
            records.append(payload)
    return records


def _diagnostic_records(
    records: Sequence[object],
    kind: str,
    subject: Callable[[dict[str, object]], str],
    root: str,
) -> list[object]:
    payloads: list[object] = []
    for record in records:
        payload = to_report_payload(record, root)
        assert isinstance(payload, dict)
        location = payload.get("symbol", payload)
        assert isinstance(location, dict)
        payload["diagnostic_id"] = build_diagnostic_id(
            kind,
            str(location["file"]),
            int(location["line"]),
            int(location["column"]),
            subject(payload),
        )
        payloads.append(payload)
    return payloads


def _unused_subject(payload: dict[str, object]) -> str:
    symbol = payload["symbol"]
    assert isinstance(symbol, dict)
    receiver = symbol.get("receiver")
    return f"{receiver}.{symbol['name']}" if receiver else str(symbol["name"])


def generate_all_reports(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: GoScopeConfig | None = None,
    package: str | None = None,
) -> dict[str, object]:
    """Analyze a Go workspace and write every report.

    Args:
        root: Root directory of the workspace to analyze
        out_dir: Optional output directory for generated reports
        config: Optional configuration; loaded from goscope.toml when omitted
        package: Optional package (directory, import path or name) to limit
            the per-package reports to

    Returns:
        Dictionary with counts and list of generated report paths.

    Raises:
        FileSystemError: If the workspace cannot be read.
        AnalysisError: If ``package`` does not name a workspace package.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    ws = parse_workspace(
        root,
        max_workers=config.max_workers,
        respect_gitignore=config.respect_gitignore,
    )
    packages = _select_packages(ws, package)

    resolver = SymbolResolver(ws)
    resolver.build_all(include_tests=config.unused.include_tests)
    index = resolver.build_reference_index()
    referenced = index.referenced_names()

    unused_analyzer = UnusedAnalyzer(
        include_exported=config.unused.include_exported,
        include_tests=config.unused.include_tests,
    )
    complexity_analyzer = ComplexityAnalyzer(config.complexity.min_complexity)
    if_init_analyzer = IfInitAnalyzer()
    boolean_analyzer = BooleanBranchingAnalyzer(config.boolean_branching.min_branches)
    deep_if_else_analyzer = DeepIfElseAnalyzer(
        config.deep_if_else.max_nesting, config.deep_if_else.min_else_lines
    )
    error_wrapping_analyzer = ErrorWrappingAnalyzer(config.error_wrapping.severity)
    missing_context_analyzer = MissingContextAnalyzer()
    env_booleans_analyzer = EnvBooleanAnalyzer(config.env_booleans.max_depth)

    unused: list[UnusedSymbol] = []
    complexity: list[ComplexityResult] = []
    if_init: list[IfInitViolation] = []
    boolean_branching: list[BooleanBranchingViolation] = []
    deep_if_else: list[DeepIfElseViolation] = []
    error_wrapping: list[ErrorWrappingViolation] = []
    missing_context: list[MissingContextViolation] = []
    env_booleans: list[EnvBooleanViolation] = []
    for pkg in packages:
        unused.extend(unused_analyzer.analyze_package(pkg, referenced))
        complexity.extend(complexity_analyzer.analyze_package(pkg))
        if_init.extend(if_init_analyzer.analyze_package(pkg))
        boolean_branching.extend(boolean_analyzer.analyze_package(pkg))
        deep_if_else.extend(deep_if_else_analyzer.analyze_package(pkg))
        error_wrapping.extend(error_wrapping_analyzer.analyze_package(pkg))
        missing_context.extend(missing_context_analyzer.analyze_package(pkg))
        env_booleans.extend(env_booleans_analyzer.analyze_package(pkg))
    complexity.sort(key=lambda r: r.metrics.cyclomatic_complexity, reverse=True)

    dependencies = analyze_dependencies(ws)

    out_dir.mkdir(parents=True, exist_ok=True)
    root_str = ws.root

    _write_jsonl(out_dir / SYMBOLS_JSONL, _symbol_records(packages, root_str))
    _write_jsonl(
        out_dir / UNUSED_JSONL,
        _diagnostic_records(unused, "unused", _unused_subject, root_str),
    )
    _write_jsonl(
        out_dir / COMPLEXITY_JSONL,
        _diagnostic_records(
            complexity,
            "complexity",
            lambda p: str(p["function"]["name"]),  # type: ignore[index]
            root_str,
        ),
    )
    _write_jsonl(
        out_dir / IF_INIT_JSONL,
        _diagnostic_records(
            if_init, "if_init", lambda p: str(p["expression"]), root_str
        ),
    )
    _write_jsonl(
        out_dir / BOOLEAN_BRANCHING_JSONL,
        _diagnostic_records(
            boolean_branching,
            "boolean_branching",
            lambda p: str(p["source_variable"]),
            root_str,
        ),
    )
    _write_jsonl(
        out_dir / DEEP_IF_ELSE_JSONL,
        _diagnostic_records(
            deep_if_else, "deep_if_else", lambda p: str(p["function"]), root_str
        ),
    )
    _write_jsonl(
        out_dir / ERROR_WRAPPING_JSONL,
        _diagnostic_records(
            error_wrapping,
            "error_wrapping",
            lambda p: str(p["violation_type"]),
            root_str,
        ),
    )
    _write_jsonl(
        out_dir / MISSING_CONTEXT_JSONL,
        _diagnostic_records(
            missing_context, "missing_context", lambda p: str(p["function"]), root_str
        ),
    )
    _write_jsonl(
        out_dir / ENV_BOOLEANS_JSONL,
        _diagnostic_records(
            env_booleans,
            "env_booleans",
            lambda p: str(p["parameter_name"]),
            root_str,
        ),
    )
    _write_json(out_dir / DEPENDENCIES_JSON, dependencies)

    reports_list = [spec.filename for spec in REPORT_SPECS.values()]
    logger.info("wrote %d reports to %s", len(reports_list), out_dir)

    return {
        "package_count": len(packages),
        "symbol_count": sum(
            len(list(pkg.symbols.iter_symbols())) for pkg in packages if pkg.symbols
        ),
        "unused_count": len(unused),
        "complexity_count": len(complexity),
        "if_init_count": len(if_init),
        "boolean_branching_count": len(boolean_branching),
        "deep_if_else_count": len(deep_if_else),
        "error_wrapping_count": len(error_wrapping),
        "missing_context_count": len(missing_context),
        "env_booleans_count": len(env_booleans),
        "cycle_count": len(dependencies.cycles),
        "reports": [str(out_dir / name) for name in reports_list],
    }


__all__ = ["generate_all_reports"]
