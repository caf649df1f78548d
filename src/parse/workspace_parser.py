"""Workspace parsing: discovery, per-package parsing and import-path mapping."""

from __future__ import annotations

import logging
import os
import queue
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from parse.go_imports import extract_imports, package_clause_name
from parse.treesitter_go import first_syntax_error, parse_source
from scan.files import find_package_dirs, list_go_files
from utils import compute_import_path
from workspace.errors import AnalysisError, FileSystemError, ParseError
from workspace.model import GO_MOD, TEST_SUFFIX, File, Module, Package, Workspace
from workspace.positions import PositionRegistry

logger = logging.getLogger(__name__)


@dataclass
class _PackageResult:
    package: Package | None = None
    error: AnalysisError | None = None


def read_go_mod(content: str) -> Module:
    """Read the module descriptor from ``go.mod`` text.

    The first ``module <path>`` line names the module; a ``go <version>``
    directive is recorded when present.
    """
    module_path = ""
    go_version: str | None = None
    for raw_line in content.splitlines():
        line = raw_line.split("//", 1)[0].strip()
        if not module_path and line.startswith("module "):
            module_path = line[len("module ") :].strip().strip('"')
        elif go_version is None and line.startswith("go "):
            go_version = line[len("go ") :].strip()
    return Module(path=module_path, go_mod=content, go_version=go_version)


def parse_file(path: Path, registry: PositionRegistry) -> File:
    """Read and parse one Go file.

    Raises:
        FileSystemError: If the file cannot be read.
        ParseError: If the file contains syntax errors.
    """
    try:
        content = path.read_bytes()
    except OSError as exc:
        msg = f"failed to read file: {exc}"
        raise FileSystemError(msg, file=str(path), cause=exc) from exc

    tree = parse_source(content)
    error_node = first_syntax_error(tree.root_node)
    if error_node is not None:
        line, column = error_node.start_point
        msg = "syntax error" if error_node.type == "ERROR" else (
            f"syntax error: missing {error_node.type}"
        )
        raise ParseError(msg, file=str(path), line=line + 1, column=column + 1)

    registered = registry.add_file(str(path), content)
    return File(path=str(path), content=content, tree=tree, registered=registered)


def parse_package(directory: Path, registry: PositionRegistry) -> Package:
    """Parse the Go files directly inside ``directory`` into a package.

    Test files (``*_test.go``) are kept apart from the main files. The
    package name comes from the first non-test file; imports are collected
    from non-test files, deduplicated in first-seen order.

    Raises:
        FileSystemError: If the directory or a file cannot be read.
        ParseError: If any file has a syntax error, or there is no non-test file.
    """
    package = Package(name="", path=str(directory))
    seen_imports: set[str] = set()

    for file_path in list_go_files(directory):
        file = parse_file(file_path, registry)
        file.package = package

        if file_path.name.endswith(TEST_SUFFIX):
            package.test_files[file_path.name] = file
            continue

        package.files[file_path.name] = file
        if not package.name:
            package.name = package_clause_name(file.root)

        for spec in extract_imports(file.root):
            if spec.path not in seen_imports:
                seen_imports.add(spec.path)
                package.imports.append(spec.path)

    if not package.files:
        msg = "no non-test Go files found in package"
        raise ParseError(msg, file=str(directory))

    return package


def _resolve_worker_count(max_workers: int, jobs: int) -> int:
    workers = max_workers if max_workers > 0 else (os.cpu_count() or 1)
    return max(1, min(workers, jobs))


def _parse_packages(
    package_dirs: list[Path],
    registry: PositionRegistry,
    max_workers: int,
) -> list[_PackageResult]:
    results = [_PackageResult() for _ in package_dirs]
    if not package_dirs:
        return results

    work: queue.Queue[int] = queue.Queue()
    for index in range(len(package_dirs)):
        work.put(index)

    def _worker() -> None:
        while True:
            try:
                index = work.get_nowait()
            except queue.Empty:
                return
            try:
                results[index].package = parse_package(package_dirs[index], registry)
            except AnalysisError as exc:
                results[index].error = exc

    workers = _resolve_worker_count(max_workers, len(package_dirs))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_worker) for _ in range(workers)]
        for future in futures:
            future.result()

    return results


def parse_workspace(
    root: str | Path,
    *,
    max_workers: int = 0,
    respect_gitignore: bool = False,
) -> Workspace:
    """Parse every Go package under ``root``.

    Package directories are discovered sequentially, then parsed in parallel
    by a bounded pool of ``max_workers`` threads (CPU count when 0). A
    package that fails to parse is logged and skipped.

    Args:
        root: Workspace root directory.
        max_workers: Upper bound on parser threads; 0 means CPU count.
        respect_gitignore: Skip directories ignored by the root ``.gitignore``.

    Returns:
        The populated workspace.

    Raises:
        FileSystemError: If the root cannot be walked or ``go.mod`` cannot be read.
    """
    root_path = Path(root).expanduser().resolve()
    logger.info("parsing workspace %s", root_path)

    ws = Workspace(root=str(root_path))

    go_mod_path = root_path / GO_MOD
    if go_mod_path.is_file():
        try:
            ws.module = read_go_mod(go_mod_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"failed to read {GO_MOD}: {exc}"
            raise FileSystemError(msg, file=str(go_mod_path), cause=exc) from exc

    package_dirs = find_package_dirs(root_path, respect_gitignore=respect_gitignore)
    logger.debug("discovered %d package directories", len(package_dirs))

    results = _parse_packages(package_dirs, ws.positions, max_workers)

    for directory, result in zip(package_dirs, results):
        if result.error is not None:
            logger.warning("failed to parse package %s: %s", directory, result.error)
            continue
        if result.package is not None:
            ws.packages[result.package.path] = result.package

    if ws.module is not None:
        for fs_path, package in ws.packages.items():
            package.import_path = compute_import_path(ws, fs_path)
            ws.import_to_path[package.import_path] = fs_path

    logger.info(
        "workspace parsed: %d packages, module %s",
        len(ws.packages),
        ws.module.path if ws.module else "<none>",
    )
    return ws


__all__ = ["parse_file", "parse_package", "parse_workspace", "read_go_mod"]
