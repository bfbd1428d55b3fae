"""
Tests for user home, data directory and installed.xml discovery.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from ibmpkg.core.context import InstallContext
from ibmpkg.core.errors import MissingFileError, ParseError, UserLookupError
from ibmpkg.core.models.manifest import Settings
from ibmpkg.core.services.imcl.locations import (
    find_installed_xml,
    find_user_home,
    imcl_from_installed_xml,
    user_data_dir,
)
from ibmpkg.core.services.imcl.processes import OsFamily


class TestFindUserHome:
    def test_unknown_user(self):
        with pytest.raises(UserLookupError, match="no-such-user-xyz"):
            find_user_home("no-such-user-xyz")

    def test_empty_home(self):
        with patch("ibmpkg.core.services.imcl.locations.pwd.getpwnam") as getpwnam:
            getpwnam.return_value.pw_dir = ""
            with pytest.raises(UserLookupError):
                find_user_home("nohome")


class TestUserDataDir:
    def test_root_uses_system_dir(self):
        assert user_data_dir("root", Path("/var/ibm")) == Path("/var/ibm")

    def test_other_users_use_home(self):
        with patch(
            "ibmpkg.core.services.imcl.locations.find_user_home",
            return_value=Path("/home/wasadmin"),
        ):
            assert user_data_dir("wasadmin", Path("/var/ibm")) == Path("/home/wasadmin/var/ibm")


class TestInstalledXml:
    def test_default_location(self, installed_xml: Path, data_dir: Path):
        assert find_installed_xml(data_dir) == installed_xml

    def test_nested_app_data_location(self, data_dir: Path):
        nested = data_dir / "custom" / "InstallationManager"
        nested.mkdir(parents=True)
        (nested / "installed.xml").write_text("<installInfo/>")
        assert find_installed_xml(data_dir) == nested / "installed.xml"

    def test_missing(self, tmp_path: Path):
        with pytest.raises(MissingFileError, match="installed.xml"):
            find_installed_xml(tmp_path)

    def test_imcl_path(self, installed_xml: Path, imcl_binary: Path):
        assert imcl_from_installed_xml(installed_xml) == imcl_binary

    def test_no_im_location(self, tmp_path: Path):
        path = tmp_path / "installed.xml"
        path.write_text('<installInfo><location id="Other" path="/x"/></installInfo>')
        with pytest.raises(ParseError):
            imcl_from_installed_xml(path)


class TestInstallContext:
    def test_root_context(self, data_dir: Path):
        ctx = InstallContext.for_user("root", Settings(data_dir=str(data_dir)), OsFamily.POSIX)
        assert ctx.privileged
        assert ctx.registry_path == data_dir / "InstallationManager" / "installRegistry.xml"

    def test_non_root_context(self, tmp_path: Path):
        with patch(
            "ibmpkg.core.services.imcl.locations.find_user_home",
            return_value=tmp_path,
        ):
            ctx = InstallContext.for_user("wasadmin", Settings(), OsFamily.BSD)
        assert not ctx.privileged
        assert ctx.registry_path == tmp_path / "var" / "ibm" / "InstallationManager" / "installRegistry.xml"
        assert ctx.os_family is OsFamily.BSD

    def test_spec_imcl_path_overrides_settings(self, data_dir: Path):
        settings = Settings(data_dir=str(data_dir), imcl_path="/from/settings")
        ctx = InstallContext.for_user("root", settings, OsFamily.POSIX, imcl_path="/from/spec")
        assert ctx.imcl_override == "/from/spec"

    def test_unknown_user_fails(self):
        with pytest.raises(UserLookupError):
            InstallContext.for_user("no-such-user-xyz", Settings(), OsFamily.POSIX)
