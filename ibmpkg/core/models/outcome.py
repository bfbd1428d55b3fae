"""
Reconcile outcome models — what happened to each declared package.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from ibmpkg.core.models.package import DesiredSpec, PackageRecord


class ReconcileOutcome(BaseModel):
    """Result of reconciling a single declaration."""

    spec: DesiredSpec
    action: Literal["create", "destroy", "none"] = "none"
    status: Literal["ok", "planned", "failed"] = "ok"
    record: PackageRecord | None = None
    command: str = ""
    error: str | None = None
    notes: list[str] = Field(default_factory=list)

    @property
    def exists(self) -> bool:
        """Whether an installed record was bound to this declaration."""
        return self.record is not None

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.spec.display_name,
            "package": self.spec.package,
            "version": self.spec.version,
            "target": self.spec.target,
            "ensure": self.spec.ensure,
            "exists": self.exists,
            "action": self.action,
            "status": self.status,
            "command": self.command,
            "error": self.error,
            "notes": list(self.notes),
        }
