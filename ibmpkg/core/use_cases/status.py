"""
Status use cases — what is declared, what is installed.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from pathlib import Path

from ibmpkg.core.config.loader import ConfigError, load_manifest
from ibmpkg.core.context import InstallContext
from ibmpkg.core.errors import IbmPkgError
from ibmpkg.core.models.manifest import Settings
from ibmpkg.core.models.package import Inventory, PackageRecord
from ibmpkg.core.services.imcl.processes import OsFamily, detect_os_family
from ibmpkg.core.services.imcl.registry import read_registry
from ibmpkg.core.services.imcl.versions import versioncmp
from ibmpkg.core.use_cases.reconcile import ReconcileResult, plan


def get_status(
    config_path: Path | None = None,
    os_family: OsFamily | None = None,
) -> ReconcileResult:
    """Match every declaration against the installed inventory.

    Same as a dry-run reconcile; ``outcome.exists`` answers whether
    each declaration is satisfied.
    """
    result = ReconcileResult(dry_run=True, config_path=config_path)
    try:
        manifest = load_manifest(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.manifest = manifest

    try:
        outcomes, inventory, _ = plan(manifest, os_family or detect_os_family())
    except IbmPkgError as e:
        result.error = str(e)
        return result
    result.outcomes = outcomes
    result.inventory = inventory
    return result


@dataclass
class InventoryResult:
    """Everything recorded in one installation registry."""

    user: str = "root"
    registry: Path | None = None
    packages: Inventory = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "user": self.user,
            "registry": str(self.registry),
            "packages": [
                {
                    "name": p.name,
                    "product": p.product_name,
                    "package": p.package_id,
                    "version": p.version,
                    "target": p.installation_path,
                    "repository": p.repository_origin,
                }
                for p in self.packages
            ],
        }


def list_inventory(user: str = "root", settings: Settings | None = None) -> InventoryResult:
    """Read the registry for ``user`` and sort it for display.

    Records are grouped by target and package id, newest version first.
    """
    result = InventoryResult(user=user)
    try:
        context = InstallContext.for_user(user, settings or Settings(), OsFamily.POSIX)
        result.registry = context.registry_path
        records = read_registry(context.registry_path)
    except IbmPkgError as e:
        result.error = str(e)
        return result

    result.packages = sorted(records, key=functools.cmp_to_key(_display_order))
    return result


def _display_order(a: PackageRecord, b: PackageRecord) -> int:
    if (a.installation_path, a.package_id) != (b.installation_path, b.package_id):
        return -1 if (a.installation_path, a.package_id) < (b.installation_path, b.package_id) else 1
    return versioncmp(b.version, a.version)
