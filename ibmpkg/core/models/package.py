"""
Package models — installed records and desired declarations.

``PackageRecord`` is what the installation registry says is on disk.
``DesiredSpec`` is what the manifest says should be on disk.  Both are
frozen: response-file values are applied by building a new spec, never
by patching an existing one.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class PackageRecord(BaseModel):
    """One offering or fix version found in installRegistry.xml."""

    model_config = ConfigDict(frozen=True)

    product_name: str                 # profile id, e.g. "IBM WebSphere Application Server"
    installation_path: str            # profile installLocation
    package_id: str                   # offering/fix id, e.g. "com.ibm.websphere.ND.v85"
    version: str                      # vendor version string, e.g. "8.5.5000.20130514_1044"
    repository_origin: str = ""       # first value of the repoInfo attribute

    @property
    def identity(self) -> tuple[str, str, str]:
        """(installation_path, package_id, version) — the uniqueness key."""
        return (self.installation_path, self.package_id, self.version)

    @property
    def name(self) -> str:
        return f"{self.installation_path}:{self.package_id}:{self.version}"


Inventory = list[PackageRecord]


class ResponseFileData(BaseModel):
    """The four values read from an imcl response file."""

    model_config = ConfigDict(frozen=True)

    repository_location: str
    install_target: str
    version: str
    package_id: str


class DesiredSpec(BaseModel):
    """A declared package installation.

    The combination of ``package``, ``version`` and ``target`` is what
    makes a declaration unique: the same package at the same version may
    be installed to several targets.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    ensure: Literal["present", "absent"] = "present"

    package: str | None = None
    version: str | None = None
    target: str | None = None
    user: str = "root"

    response: str | None = None
    repository: str | None = None
    jdk_package_name: str | None = None
    jdk_package_version: str | None = None
    options: str | None = None

    package_owner: str | None = None
    package_group: str | None = None
    manage_ownership: bool = False

    imcl_path: str | None = None

    @field_validator("repository", mode="before")
    @classmethod
    def _join_repositories(cls, value):
        if isinstance(value, (list, tuple)):
            return ",".join(str(v) for v in value)
        return value

    @field_validator("package", "version", "jdk_package_version", mode="before")
    @classmethod
    def _require_quoted(cls, value, info):
        # YAML reads 1.10 as the float 1.1; the original text is gone
        if isinstance(value, (bool, int, float)):
            raise ValueError(
                f"{info.field_name} must be a quoted string "
                f"(got {value!r}); write it as '{info.field_name}: \"...\"'"
            )
        return value

    @model_validator(mode="after")
    def _check_required(self) -> DesiredSpec:
        if not self.response:
            missing = [f for f in ("package", "version", "target") if not getattr(self, f)]
            if missing:
                raise ValueError(
                    f"{', '.join(missing)} required when no response file is given"
                )
        if self.jdk_package_name and not self.jdk_package_version:
            raise ValueError("jdk_package_version is required with jdk_package_name")
        if self.manage_ownership and not self.package_owner:
            raise ValueError("package_owner is required when manage_ownership is set")
        return self

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.package:
            return f"{self.target}:{self.package}:{self.version}"
        return self.response or "<unnamed>"

    @property
    def privileged(self) -> bool:
        return self.user == "root"

    def with_response(self, data: ResponseFileData) -> DesiredSpec:
        """Return a copy populated from response-file values.

        Target, version and package always come from the file.  The
        repository is only filled when the declaration has none.
        """
        return self.model_copy(update={
            "target": data.install_target,
            "version": data.version,
            "package": data.package_id,
            "repository": self.repository or data.repository_location,
        })
