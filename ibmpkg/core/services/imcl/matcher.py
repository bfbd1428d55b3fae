"""
Domain — match declarations against the installed inventory.

The combination of package id, version and path is what makes an
installation unique: the same package at the same version can live in
several targets.  Matching is exact string equality on all three;
``versioncmp`` is deliberately not consulted here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from ibmpkg.core.models.package import DesiredSpec, Inventory, PackageRecord
from ibmpkg.core.services.imcl.registry import read_registry
from ibmpkg.core.services.imcl.response_file import read_response_file
from ibmpkg.core.services.imcl.versions import is_newer

logger = logging.getLogger(__name__)


def resolve_spec(spec: DesiredSpec) -> DesiredSpec:
    """Apply the response file (if any) and return the effective spec."""
    if not spec.response:
        return spec
    data = read_response_file(spec.response)
    resolved = spec.with_response(data)
    logger.debug(
        "Resolved %s from %s: %s %s -> %s",
        spec.display_name, spec.response, resolved.package, resolved.version, resolved.target,
    )
    return resolved


def find_current_state(
    specs: Iterable[DesiredSpec],
    registry_for: Callable[[DesiredSpec], Path],
) -> Inventory:
    """Build the inventory for a set of declarations.

    Declarations usually share one registry; each distinct registry is
    read exactly once and the records are concatenated in first-seen
    order.

    Args:
        specs: Resolved declarations.
        registry_for: Maps a declaration to its registry path.
    """
    inventory: Inventory = []
    seen: set[Path] = set()
    for spec in specs:
        path = registry_for(spec)
        if path in seen:
            continue
        seen.add(path)
        inventory.extend(read_registry(path))
    return inventory


def compare_package(record: PackageRecord, spec: DesiredSpec) -> bool:
    """True iff path, version and package id are all exactly equal."""
    return (
        record.installation_path == spec.target
        and record.version == spec.version
        and record.package_id == spec.package
    )


def find_match(inventory: Inventory, spec: DesiredSpec) -> PackageRecord | None:
    """First installed record matching ``spec``; duplicates are not an error."""
    for record in inventory:
        if compare_package(record, spec):
            return record
    return None


def match_resources(
    specs: Iterable[DesiredSpec],
    inventory: Inventory,
) -> list[tuple[DesiredSpec, PackageRecord | None]]:
    """Bind each declaration to its installed record (or None)."""
    return [(spec, find_match(inventory, spec)) for spec in specs]


def newer_installed(inventory: Inventory, spec: DesiredSpec) -> list[PackageRecord]:
    """Records of the same package at the same target with a higher version."""
    if not spec.version:
        return []
    return [
        r for r in inventory
        if r.installation_path == spec.target
        and r.package_id == spec.package
        and is_newer(r.version, spec.version)
    ]
