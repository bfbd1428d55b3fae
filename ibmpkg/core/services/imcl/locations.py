"""
Detection — user homes, IM data directories and the imcl binary.

imcl is rarely on PATH.  Installation Manager records its own location
in ``installed.xml`` under the data directory, so the binary is found
from there unless an explicit path is configured.
"""

from __future__ import annotations

import logging
import os
import pwd
import xml.etree.ElementTree as ET
from pathlib import Path

from ibmpkg.core.errors import (
    MissingFileError,
    NotExecutableError,
    ParseError,
    UserLookupError,
)

logger = logging.getLogger(__name__)

INSTALLED_FILE = "installed.xml"
IM_LOCATION_ID = "IBM Installation Manager"


def find_user_home(user: str) -> Path:
    """Return the home directory of a Unix account."""
    try:
        home = pwd.getpwnam(user).pw_dir
    except KeyError:
        raise UserLookupError(f"Could not find home directory for user {user}") from None
    if not home:
        raise UserLookupError(f"Could not find home directory for user {user}")
    return Path(home)


def user_data_dir(user: str, system_data_dir: Path) -> Path:
    """IM data directory: the system one for root, ``~/var/ibm`` otherwise."""
    if user == "root":
        return system_data_dir
    return find_user_home(user) / "var" / "ibm"


def find_installed_xml(data_dir: Path) -> Path:
    """Search ``data_dir`` for ``InstallationManager/installed.xml``.

    IM can be configured with a non-default appDataLocation below the
    data directory, so the whole tree is walked.
    """
    default = data_dir / "InstallationManager" / INSTALLED_FILE
    if default.is_file():
        return default

    if data_dir.is_dir():
        for dirpath, _dirnames, filenames in os.walk(data_dir):
            if INSTALLED_FILE in filenames and Path(dirpath).name == "InstallationManager":
                return Path(dirpath) / INSTALLED_FILE

    raise MissingFileError(f"Could not find installed.xml file at {default}")


def imcl_from_installed_xml(installed_xml: Path) -> Path:
    """Derive ``<IM location>/tools/imcl`` from installed.xml."""
    logger.debug("Reading IM location from %s", installed_xml)
    try:
        with installed_xml.open("rb") as fh:
            root = ET.parse(fh).getroot()
    except ET.ParseError as e:
        raise ParseError(f"Malformed {installed_xml}: {e}") from e

    for location in root.findall("location"):
        if location.get("id") == IM_LOCATION_ID:
            path = location.get("path")
            if path is None:
                break
            return Path(path) / "tools" / "imcl"

    raise ParseError(f"{installed_xml}: no location for {IM_LOCATION_ID!r}")


def check_executable(path: Path) -> Path:
    """Ensure ``path`` exists and carries the execute bit."""
    if not path.exists():
        raise MissingFileError(f"{path} file does not exist")
    if not os.access(path, os.X_OK):
        raise NotExecutableError(f"{path} is not executable, use chmod")
    return path
