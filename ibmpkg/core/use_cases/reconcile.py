"""
Reconcile use case — bring installed packages in line with packages.yml.

One pass:
    1. load the manifest and build one InstallContext per acting user
    2. resolve response files into effective declarations
    3. read each registry once and bind installed records
    4. create / destroy each declaration in turn

A failure is fatal to the declaration it happened in; the pass moves on
to the next one.  Failing to read the registry aborts the whole pass,
since nothing can be decided without it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ibmpkg.adapters.base import CommandRunner
from ibmpkg.core.config.loader import ConfigError, load_manifest
from ibmpkg.core.context import InstallContext
from ibmpkg.core.errors import IbmPkgError
from ibmpkg.core.models.manifest import Manifest
from ibmpkg.core.models.outcome import ReconcileOutcome
from ibmpkg.core.models.package import DesiredSpec, Inventory
from ibmpkg.core.services.imcl.installer import (
    ImclDriver,
    build_install_args,
    build_uninstall_args,
)
from ibmpkg.core.services.imcl.matcher import (
    find_current_state,
    match_resources,
    newer_installed,
    resolve_spec,
)
from ibmpkg.core.services.imcl.processes import OsFamily, detect_os_family

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconcile pass."""

    manifest: Manifest | None = None
    config_path: Path | None = None
    outcomes: list[ReconcileOutcome] = field(default_factory=list)
    inventory: Inventory = field(default_factory=list)
    dry_run: bool = False
    error: str | None = None

    @property
    def changed(self) -> int:
        return sum(1 for o in self.outcomes if o.action != "none" and o.status == "ok")

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    @property
    def present(self) -> int:
        return sum(1 for o in self.outcomes if o.exists)

    @property
    def ok(self) -> bool:
        return self.error is None and self.failed == 0

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        if self.error:
            return {"error": self.error}
        return {
            "dry_run": self.dry_run,
            "packages": [o.to_dict() for o in self.outcomes],
            "summary": {
                "total": len(self.outcomes),
                "present": self.present,
                "changed": self.changed,
                "failed": self.failed,
            },
        }


class _ContextCache:
    """One InstallContext per (user, imcl_path) for the current pass."""

    def __init__(self, manifest: Manifest, os_family: OsFamily) -> None:
        self._manifest = manifest
        self._os_family = os_family
        self._contexts: dict[tuple[str, str | None], InstallContext] = {}

    def __call__(self, spec: DesiredSpec) -> InstallContext:
        key = (spec.user, spec.imcl_path)
        if key not in self._contexts:
            self._contexts[key] = InstallContext.for_user(
                spec.user,
                self._manifest.settings,
                self._os_family,
                imcl_path=spec.imcl_path,
            )
        return self._contexts[key]


def plan(
    manifest: Manifest,
    os_family: OsFamily,
) -> tuple[list[ReconcileOutcome], Inventory, _ContextCache]:
    """Resolve, discover and decide — no side effects.

    Returns outcomes with ``action`` set and ``status`` ``planned`` (or
    ``failed`` when a declaration cannot be resolved).

    Raises:
        IbmPkgError: The installed state could not be read.
    """
    contexts = _ContextCache(manifest, os_family)
    outcomes: list[ReconcileOutcome] = []
    resolved: list[DesiredSpec] = []

    for spec in manifest.packages:
        try:
            effective = resolve_spec(spec)
            contexts(effective)
        except IbmPkgError as e:
            logger.error("Cannot resolve %s: %s", spec.display_name, e)
            outcomes.append(ReconcileOutcome(spec=spec, status="failed", error=str(e)))
            continue
        resolved.append(effective)

    inventory = find_current_state(resolved, lambda s: contexts(s).registry_path)

    for spec, record in match_resources(resolved, inventory):
        outcome = ReconcileOutcome(spec=spec, record=record, status="planned")
        if spec.ensure == "present" and record is None:
            outcome.action = "create"
            outcome.command = "imcl " + " ".join(build_install_args(spec))
            for newer in newer_installed(inventory, spec):
                outcome.notes.append(
                    f"newer version {newer.version} of {newer.package_id} "
                    f"is already installed at {newer.installation_path}"
                )
        elif spec.ensure == "absent" and record is not None:
            outcome.action = "destroy"
            outcome.command = "imcl " + " ".join(build_uninstall_args(spec))
        else:
            outcome.status = "ok"
        outcomes.append(outcome)

    return outcomes, inventory, contexts


def run_reconcile(
    config_path: Path | None = None,
    *,
    runner: CommandRunner | None = None,
    dry_run: bool = False,
    os_family: OsFamily | None = None,
) -> ReconcileResult:
    """Run one reconcile pass.

    Args:
        config_path: Explicit path to packages.yml (default: search upward).
        runner: Command runner; required unless ``dry_run``.
        dry_run: Decide actions but do not stop processes or run imcl.
        os_family: Override host OS detection.
    """
    result = ReconcileResult(dry_run=dry_run, config_path=config_path)

    try:
        manifest = load_manifest(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.manifest = manifest

    family = os_family or detect_os_family()
    try:
        outcomes, inventory, contexts = plan(manifest, family)
    except IbmPkgError as e:
        logger.error("Cannot read installed state: %s", e)
        result.error = str(e)
        return result
    result.inventory = inventory
    result.outcomes = outcomes

    if dry_run:
        return result

    if runner is None:
        raise ValueError("runner is required unless dry_run is set")

    for outcome in outcomes:
        if outcome.failed:
            continue
        if outcome.action == "none":
            continue
        _apply(outcome, ImclDriver(contexts(outcome.spec), runner))

    logger.info(
        "Reconcile finished: %d changed, %d failed of %d",
        result.changed, result.failed, len(outcomes),
    )
    return result


def _apply(outcome: ReconcileOutcome, driver: ImclDriver) -> None:
    spec = outcome.spec
    logger.info("%s %s", outcome.action, spec.display_name)
    try:
        if outcome.action == "create":
            driver.create(spec)
        else:
            driver.destroy(spec)
    except IbmPkgError as e:
        logger.error("%s of %s failed: %s", outcome.action, spec.display_name, e)
        outcome.status = "failed"
        outcome.error = str(e)
        return
    outcome.status = "ok"
