"""
Domain models — pydantic types for package reconciliation.

All models are re-exported here for convenient access:

    from ibmpkg.core.models import DesiredSpec, PackageRecord, CommandResult
"""

from ibmpkg.core.models.command import CommandResult
from ibmpkg.core.models.manifest import Manifest, Settings
from ibmpkg.core.models.outcome import ReconcileOutcome
from ibmpkg.core.models.package import (
    DesiredSpec,
    Inventory,
    PackageRecord,
    ResponseFileData,
)

__all__ = [
    # command.py
    "CommandResult",
    # package.py
    "DesiredSpec",
    "Inventory",
    # manifest.py
    "Manifest",
    "PackageRecord",
    # outcome.py
    "ReconcileOutcome",
    "ResponseFileData",
    "Settings",
]
