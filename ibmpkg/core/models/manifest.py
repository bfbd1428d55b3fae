"""
Manifest model — the desired-state declaration loaded from packages.yml.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ibmpkg.core.models.package import DesiredSpec


class Settings(BaseModel):
    """Host-wide settings shared by every declaration."""

    model_config = ConfigDict(extra="forbid")

    data_dir: str = "/var/ibm"        # IM data directory of privileged installs
    imcl_path: str | None = None      # overrides discovery through installed.xml


class Manifest(BaseModel):
    """Root of packages.yml."""

    model_config = ConfigDict(extra="forbid")

    settings: Settings = Field(default_factory=Settings)
    packages: list[DesiredSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> Manifest:
        seen: set[str] = set()
        for spec in self.packages:
            if not spec.name:
                continue
            if spec.name in seen:
                raise ValueError(f"duplicate package name: {spec.name}")
            seen.add(spec.name)
        return self

    def get_package(self, name: str) -> DesiredSpec | None:
        """Look up a declaration by name."""
        for spec in self.packages:
            if spec.name == name:
                return spec
        return None
