"""Dependency models for workspace package relationships."""

from __future__ import annotations

from pydantic import BaseModel, Field

from contract.artifacts import ARTIFACT_SCHEMA_VERSION


class DependencyReport(BaseModel):
    """Import relationships between workspace packages."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    package_imports: dict[str, list[str]] = Field(
        default_factory=dict,
        description="package -> direct workspace-internal imports",
    )
    package_deps: dict[str, list[str]] = Field(
        default_factory=dict,
        description="package -> transitive workspace-internal imports",
    )
    external_imports: dict[str, list[str]] = Field(
        default_factory=dict,
        description="package -> imports that resolve outside the workspace",
    )
    cycles: list[list[str]] = Field(default_factory=list)


__all__ = ["DependencyReport"]
