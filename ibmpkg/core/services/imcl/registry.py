"""
Detection — installation registry reader.

IBM Installation Manager keeps ``installRegistry.xml`` in its data
directory.  It lists every profile (one per product root), and under
each profile the offerings and fixes installed there with their
versions.  This is much faster and more complete than asking imcl.

Shape::

    <installRegistry>
      <profile id="IBM WebSphere Application Server V8.5">
        <property name="installLocation" value="/opt/IBM/WebSphere/AppServer"/>
        <offering id="com.ibm.websphere.ND.v85">
          <version value="8.5.5000.20130514_1044" repoInfo="repoUrl=/mnt/was,repoId=..."/>
        </offering>
        <fix id="8.5.5.0-WS-WAS-IFPM89996">
          <version value="8.5.5000.20130703_1658" repoInfo="repoUrl=/mnt/fix"/>
        </fix>
      </profile>
    </installRegistry>

Read-only.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from ibmpkg.core.errors import MissingFileError, ParseError
from ibmpkg.core.models.package import Inventory, PackageRecord

logger = logging.getLogger(__name__)

REGISTRY_FILE = "installRegistry.xml"
IM_DIR = "InstallationManager"

# Offerings are products, fixes are patches layered onto them.
# Both carry identical version records.
_PACKAGE_KINDS = ("offering", "fix")


def registry_path(data_dir: Path) -> Path:
    """``<data_dir>/InstallationManager/installRegistry.xml``."""
    return data_dir / IM_DIR / REGISTRY_FILE


def read_registry(path: Path) -> Inventory:
    """Parse an installation registry into a flat list of records.

    Each ``version`` node under an ``offering`` or ``fix`` yields one
    record whose path is the enclosing profile's ``installLocation``.

    Raises:
        MissingFileError: No registry at ``path``.
        ParseError: Malformed XML or a required attribute is absent.
    """
    if not path.is_file():
        raise MissingFileError(f"No installation registry found at {path}")

    logger.debug("Reading installation registry %s", path)
    try:
        with path.open("rb") as fh:
            root = ET.parse(fh).getroot()
    except ET.ParseError as e:
        raise ParseError(f"Malformed installation registry {path}: {e}") from e

    if root.tag != "installRegistry":
        raise ParseError(f"{path}: expected <installRegistry> root, got <{root.tag}>")

    packages: Inventory = []
    for profile in root.findall("profile"):
        product_name = _attr(profile, "id", path)
        location = profile.find("property[@name='installLocation']")
        if location is None:
            raise ParseError(f"{path}: profile {product_name!r} has no installLocation property")
        install_path = _attr(location, "value", path)

        for kind in _PACKAGE_KINDS:
            for node in profile.findall(kind):
                package_id = _attr(node, "id", path)
                for version in node.findall("version"):
                    packages.append(PackageRecord(
                        product_name=product_name,
                        installation_path=install_path,
                        package_id=package_id,
                        version=_attr(version, "value", path),
                        repository_origin=parse_repo_info(_attr(version, "repoInfo", path)),
                    ))

    logger.info("Found %d installed packages in %s", len(packages), path)
    return packages


def parse_repo_info(repo_info: str) -> str:
    """Return the value of the first ``key=value`` entry of a repoInfo string.

    >>> parse_repo_info("repoUrl=/mnt/repos/was,repoId=uniqueRepo")
    '/mnt/repos/was'
    """
    first = repo_info.split(",", 1)[0]
    key, sep, value = first.partition("=")
    if not sep:
        raise ParseError(f"Malformed repoInfo entry: {first!r}")
    return value


def _attr(node: ET.Element, name: str, path: Path) -> str:
    value = node.get(name)
    if value is None:
        raise ParseError(f"{path}: <{node.tag}> is missing the {name!r} attribute")
    return value
