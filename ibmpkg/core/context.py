"""
Install context — everything resolved once about "who installs where".

A context is built explicitly for one acting user at the start of a
reconcile pass and handed to every operation that needs paths:

    - registry lookup:  context.registry_path
    - imcl execution:   context.imcl_path(), context.home
    - process teardown: context.os_family

Nothing here is cached across passes; a new pass builds new contexts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ibmpkg.core.models.manifest import Settings
from ibmpkg.core.services.imcl.locations import (
    check_executable,
    find_installed_xml,
    find_user_home,
    imcl_from_installed_xml,
    user_data_dir,
)
from ibmpkg.core.services.imcl.processes import OsFamily
from ibmpkg.core.services.imcl.registry import registry_path

logger = logging.getLogger(__name__)


@dataclass
class InstallContext:
    """Resolved paths for one acting user."""

    user: str
    data_dir: Path
    os_family: OsFamily = OsFamily.POSIX
    imcl_override: str | None = None
    _imcl: Path | None = field(default=None, init=False, repr=False)

    @classmethod
    def for_user(
        cls,
        user: str,
        settings: Settings,
        os_family: OsFamily,
        imcl_path: str | None = None,
    ) -> InstallContext:
        """Build a context, resolving the user's IM data directory.

        Raises:
            UserLookupError: A non-root user has no resolvable home.
        """
        data_dir = user_data_dir(user, Path(settings.data_dir))
        logger.debug("Context for %s: data_dir=%s", user, data_dir)
        return cls(
            user=user,
            data_dir=data_dir,
            os_family=os_family,
            imcl_override=imcl_path or settings.imcl_path,
        )

    @property
    def privileged(self) -> bool:
        return self.user == "root"

    @property
    def registry_path(self) -> Path:
        return registry_path(self.data_dir)

    @property
    def home(self) -> Path:
        return find_user_home(self.user)

    def imcl_path(self) -> Path:
        """Path to the imcl binary, validated on every call.

        Raises:
            MissingFileError: installed.xml or the binary is missing.
            NotExecutableError: The binary lacks the execute bit.
        """
        if self._imcl is None:
            if self.imcl_override:
                self._imcl = Path(self.imcl_override)
            else:
                self._imcl = imcl_from_installed_xml(find_installed_xml(self.data_dir))
        return check_executable(self._imcl)
