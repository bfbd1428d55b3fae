"""
Shared test fixtures and configuration.
"""

import os
import textwrap
from pathlib import Path

import pytest

from ibmpkg.adapters.mock import MockRunner


REGISTRY_XML = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <installRegistry>
      <profile id="IBM Installation Manager">
        <property name="installLocation" value="/opt/IBM/InstallationManager/eclipse"/>
        <offering id="com.ibm.cic.agent">
          <version value="1.6.2000.20130301_2248" repoInfo="repoUrl=/mnt/im,repoId=im"/>
        </offering>
      </profile>
      <profile id="IBM WebSphere Application Server V8.5">
        <property name="installLocation" value="/opt/IBM/WebSphere"/>
        <offering id="com.ibm.was">
          <version value="8.5.0" repoInfo="repoUrl=/mnt/was,repoId=was"/>
        </offering>
        <fix id="8.5.0.0-WS-WAS-IFPM89996">
          <version value="8.5.0.20130703_1658" repoInfo="repoUrl=/mnt/fixes"/>
        </fix>
      </profile>
    </installRegistry>
""")

INSTALLED_XML = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <installInfo>
      <location id="IBM Installation Manager" path="{path}"/>
    </installInfo>
""")

RESPONSE_XML = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <agent-input>
      <server>
        <repository location="/mnt/was"/>
      </server>
      <profile id="IBM WebSphere Application Server V8.5" installLocation="/opt/IBM/WebSphere">
        <data key="eclipseLocation" value="/opt/IBM/WebSphere"/>
      </profile>
      <install>
        <offering profile="IBM WebSphere Application Server V8.5" id="com.ibm.was" version="8.5.0"/>
      </install>
    </agent-input>
""")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """An empty IM data directory (stands in for /var/ibm)."""
    path = tmp_path / "var" / "ibm"
    (path / "InstallationManager").mkdir(parents=True)
    return path


@pytest.fixture
def registry_file(data_dir: Path) -> Path:
    """The sample installation registry written into ``data_dir``."""
    path = data_dir / "InstallationManager" / "installRegistry.xml"
    path.write_text(REGISTRY_XML)
    return path


@pytest.fixture
def response_file(tmp_path: Path) -> Path:
    path = tmp_path / "was.rsp.xml"
    path.write_text(RESPONSE_XML)
    return path


@pytest.fixture
def imcl_binary(tmp_path: Path) -> Path:
    """An executable stand-in for imcl."""
    path = tmp_path / "im" / "tools" / "imcl"
    path.parent.mkdir(parents=True)
    path.write_text("#!/bin/sh\nexit 0\n")
    os.chmod(path, 0o755)
    return path


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def runner() -> MockRunner:
    return MockRunner()


@pytest.fixture
def installed_xml(data_dir: Path, imcl_binary: Path) -> Path:
    """installed.xml pointing at the ``imcl_binary`` IM location."""
    path = data_dir / "InstallationManager" / "installed.xml"
    path.write_text(INSTALLED_XML.format(path=imcl_binary.parent.parent))
    return path
