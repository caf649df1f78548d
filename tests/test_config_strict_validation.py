from __future__ import annotations

from pathlib import Path

import pytest

from rules.config import ConfigError, GoScopeConfig, load_config, resolve_output_dir


def _write_config(repo_root: Path, toml_content: str) -> None:
    (repo_root / "goscope.toml").write_text(toml_content, encoding="utf-8")


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == GoScopeConfig()
    assert config.output_dir == ".goscope"
    assert config.complexity.min_complexity == 10
    assert config.boolean_branching.min_branches == 2
    assert not config.unused.include_exported


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_unknown_nested_key_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[complexity]
min_complexity = 12
bogus = true
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "output_dir = ")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
output_dir = "reports"
max_workers = 2

[unused]
include_exported = true

[boolean_branching]
min_branches = 3
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.output_dir == "reports"
    assert config.max_workers == 2
    assert config.unused.include_exported
    assert config.boolean_branching.min_branches == 3


@pytest.mark.parametrize(
    ("toml_content", "expected_complexity", "expected_branches"),
    [
        ("[complexity]\nmin_complexity = 0", 10, 2),
        ("[boolean_branching]\nmin_branches = 1", 10, 2),
        ("[boolean_branching]\nmin_branches = 0", 10, 2),
    ],
)
def test_out_of_range_thresholds_are_normalized(
    tmp_path: Path, toml_content: str, expected_complexity: int, expected_branches: int
) -> None:
    _write_config(tmp_path, toml_content)

    config = load_config(tmp_path)

    assert config.complexity.min_complexity == expected_complexity
    assert config.boolean_branching.min_branches == expected_branches


def test_negative_max_workers_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "max_workers = -1")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


@pytest.mark.parametrize("output_dir", ["", "/tmp/out", "~/out", "../outside"])
def test_resolve_output_dir_rejects_unsafe_paths(tmp_path: Path, output_dir: str) -> None:
    with pytest.raises(ConfigError):
        resolve_output_dir(tmp_path, output_dir)


def test_resolve_output_dir_stays_inside_root(tmp_path: Path) -> None:
    resolved = resolve_output_dir(tmp_path, "reports/go")

    assert resolved == (tmp_path / "reports" / "go").resolve()


def test_code_smell_sections_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[deep_if_else]
max_nesting = 3
min_else_lines = 5

[error_wrapping]
severity = "warning"

[env_booleans]
max_depth = 0
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.deep_if_else.max_nesting == 3
    assert config.deep_if_else.min_else_lines == 5
    assert config.error_wrapping.severity == "warning"
    assert config.env_booleans.max_depth == 0


def test_unknown_error_wrapping_severity_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, '[error_wrapping]\nseverity = "fatal"')

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_code_smell_thresholds_are_normalized(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[deep_if_else]
max_nesting = -1
min_else_lines = 0

[env_booleans]
max_depth = -2
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.deep_if_else.max_nesting == 2
    assert config.deep_if_else.min_else_lines == 3
    assert config.env_booleans.max_depth == 1
