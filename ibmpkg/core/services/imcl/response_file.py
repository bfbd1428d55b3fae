"""
Detection — imcl response file reader.

A response file fully describes an installation (repositories, target,
offering, preferences).  Only four values matter for reconciliation;
they must all be present or the file is rejected.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from ibmpkg.core.errors import MissingFileError, ParseError
from ibmpkg.core.models.package import ResponseFileData

logger = logging.getLogger(__name__)

# (element path under <agent-input>, attribute, field)
_FIELDS = (
    ("server/repository", "location", "repository_location"),
    ("profile", "installLocation", "install_target"),
    ("install/offering", "version", "version"),
    ("install/offering", "id", "package_id"),
)


def read_response_file(path: Path | str) -> ResponseFileData:
    """Extract repository, target, version and package id.

    Raises:
        MissingFileError: The file does not exist.
        ParseError: Malformed XML or any expected node/attribute missing.
    """
    path = Path(path)
    if not path.is_file():
        raise MissingFileError(f"Cannot open response file {path}")

    logger.debug("Reading the response file at %s", path)
    try:
        with path.open("rb") as fh:
            root = ET.parse(fh).getroot()
    except ET.ParseError as e:
        raise ParseError(f"Malformed response file {path}: {e}") from e

    if root.tag != "agent-input":
        raise ParseError(f"{path}: expected <agent-input> root, got <{root.tag}>")

    values: dict[str, str] = {}
    for element_path, attribute, field in _FIELDS:
        node = root.find(element_path)
        if node is None:
            raise ParseError(f"{path}: missing agent-input/{element_path}")
        value = node.get(attribute)
        if value is None:
            raise ParseError(f"{path}: agent-input/{element_path} has no {attribute!r} attribute")
        values[field] = value

    return ResponseFileData(**values)
