"""Configuration rules for goscope-core."""

from rules.config import (
    ConfigError,
    GoScopeConfig,
    load_config,
    resolve_output_dir,
)

__all__ = [
    "ConfigError",
    "GoScopeConfig",
    "load_config",
    "resolve_output_dir",
]
