from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from analyzers.boolean_branching import DEFAULT_MIN_BRANCHES
from analyzers.complexity import DEFAULT_MIN_COMPLEXITY
from analyzers.deep_if_else import DEFAULT_MAX_NESTING, DEFAULT_MIN_ELSE_LINES
from analyzers.env_booleans import DEFAULT_MAX_DEPTH
from analyzers.error_wrapping import DEFAULT_SEVERITY
from artifacts.models.artifacts.diagnostics import ErrorWrappingSeverity

CONFIG_FILENAME = "goscope.toml"


class ComplexityConfig(BaseModel):
    """Options for the complexity analyzer."""

    model_config = ConfigDict(extra="forbid")

    min_complexity: int = Field(
        default=DEFAULT_MIN_COMPLEXITY,
        ge=0,
        description="Report functions at or above this cyclomatic complexity "
        "(0 = default)",
    )

    @field_validator("min_complexity")
    @classmethod
    def default_when_zero(cls, v: int) -> int:
        return v or DEFAULT_MIN_COMPLEXITY


class UnusedConfig(BaseModel):
    """Options for the unused-symbol analyzer."""

    model_config = ConfigDict(extra="forbid")

    include_exported: bool = Field(
        default=False,
        description="Also report exported symbols (they may have external users)",
    )
    include_tests: bool = Field(
        default=False,
        description="Also collect symbols declared in _test.go files",
    )


class BooleanBranchingConfig(BaseModel):
    """Options for the boolean-fanout analyzer."""

    model_config = ConfigDict(extra="forbid")

    min_branches: int = Field(
        default=DEFAULT_MIN_BRANCHES,
        description="Minimum booleans in one family before reporting",
    )

    @field_validator("min_branches")
    @classmethod
    def at_least_two(cls, v: int) -> int:
        return max(v, DEFAULT_MIN_BRANCHES)


class DeepIfElseConfig(BaseModel):
    """Options for the deep if/else analyzer."""

    model_config = ConfigDict(extra="forbid")

    max_nesting: int = Field(
        default=DEFAULT_MAX_NESTING,
        description="Deepest acceptable if/else chain (negative = default)",
    )
    min_else_lines: int = Field(
        default=DEFAULT_MIN_ELSE_LINES,
        description="Minimum lines across else branches before reporting "
        "(0 or less = default)",
    )

    @field_validator("max_nesting")
    @classmethod
    def default_when_negative(cls, v: int) -> int:
        return v if v >= 0 else DEFAULT_MAX_NESTING

    @field_validator("min_else_lines")
    @classmethod
    def default_when_not_positive(cls, v: int) -> int:
        return v if v > 0 else DEFAULT_MIN_ELSE_LINES


class ErrorWrappingConfig(BaseModel):
    """Options for the error-wrapping analyzer."""

    model_config = ConfigDict(extra="forbid")

    severity: ErrorWrappingSeverity = Field(
        default=DEFAULT_SEVERITY,
        description="Lowest severity reported: critical, warning or info",
    )


class EnvBooleansConfig(BaseModel):
    """Options for the environment-boolean analyzer."""

    model_config = ConfigDict(extra="forbid")

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        description="Calls a flag must reach before reporting (negative = default)",
    )

    @field_validator("max_depth")
    @classmethod
    def default_when_negative(cls, v: int) -> int:
        return v if v >= 0 else DEFAULT_MAX_DEPTH


class GoScopeConfig(BaseModel):
    """Configuration for goscope-core report generation."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".goscope",
        description="Output directory for generated reports",
    )
    respect_gitignore: bool = Field(
        default=False,
        description="Skip package directories ignored by the root .gitignore",
    )
    max_workers: int = Field(
        default=0,
        ge=0,
        description="Parser threads (0 = CPU count)",
    )
    complexity: ComplexityConfig = Field(default_factory=ComplexityConfig)
    unused: UnusedConfig = Field(default_factory=UnusedConfig)
    boolean_branching: BooleanBranchingConfig = Field(
        default_factory=BooleanBranchingConfig
    )
    deep_if_else: DeepIfElseConfig = Field(default_factory=DeepIfElseConfig)
    error_wrapping: ErrorWrappingConfig = Field(default_factory=ErrorWrappingConfig)
    env_booleans: EnvBooleansConfig = Field(default_factory=EnvBooleansConfig)


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the workspace root.

    The config output_dir must be a non-empty relative path that remains
    within the workspace root after resolution. Absolute paths and paths
    that escape the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_dir.startswith("~") or output_path.is_absolute():
        msg = "output_dir must be a relative path within the workspace root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the workspace root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> GoScopeConfig:
    """Load configuration from goscope.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return GoScopeConfig()

    try:
        with config_path.open("rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return GoScopeConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


__all__ = [
    "CONFIG_FILENAME",
    "BooleanBranchingConfig",
    "ComplexityConfig",
    "ConfigError",
    "DeepIfElseConfig",
    "EnvBooleansConfig",
    "ErrorWrappingConfig",
    "GoScopeConfig",
    "UnusedConfig",
    "load_config",
    "resolve_output_dir",
]
