"""
Tests for the reconcile pass — plan, apply, and failure isolation.
"""

import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

from ibmpkg.adapters.mock import MockRunner
from ibmpkg.core.services.imcl.processes import OsFamily
from ibmpkg.core.use_cases.reconcile import run_reconcile
from ibmpkg.core.use_cases.status import get_status, list_inventory
from ibmpkg.core.models.manifest import Settings

PACKAGES = """\
    - name: was-installed
      package: com.ibm.was
      version: 8.5.0
      target: /opt/IBM/WebSphere
      repository: /mnt/was
    - name: was9
      package: com.ibm.was
      version: 9.0.0
      target: /opt/IBM/WAS9
      repository: /mnt/was9
    - name: old-fix
      ensure: absent
      package: 8.5.0.0-WS-WAS-IFPM89996
      version: 8.5.0.20130703_1658
      target: /opt/IBM/WebSphere
"""


def _manifest(tmp_path: Path, data_dir: Path, imcl: Path, packages: str = PACKAGES) -> Path:
    content = textwrap.dedent(f"""\
        settings:
          data_dir: {data_dir}
          imcl_path: {imcl}
        packages:
    """) + textwrap.indent(textwrap.dedent(packages), "  ")
    path = tmp_path / "packages.yml"
    path.write_text(content)
    return path


@pytest.fixture
def manifest(tmp_path: Path, data_dir: Path, imcl_binary: Path, registry_file: Path) -> Path:
    return _manifest(tmp_path, data_dir, imcl_binary)


@pytest.fixture(autouse=True)
def fake_home(home_dir: Path):
    with patch("ibmpkg.core.context.find_user_home", return_value=home_dir):
        yield


def _by_name(result):
    return {o.spec.name: o for o in result.outcomes}


class TestPlan:
    def test_dry_run_decides_actions(self, manifest: Path):
        result = run_reconcile(manifest, dry_run=True, os_family=OsFamily.POSIX)
        assert result.error is None
        outcomes = _by_name(result)

        assert outcomes["was-installed"].action == "none"
        assert outcomes["was-installed"].exists
        assert outcomes["was9"].action == "create"
        assert outcomes["was9"].status == "planned"
        assert outcomes["was9"].command == (
            "imcl install com.ibm.was_9.0.0 -repositories /mnt/was9 "
            "-installationDirectory /opt/IBM/WAS9 -acceptLicense"
        )
        assert outcomes["old-fix"].action == "destroy"
        assert outcomes["old-fix"].command == (
            "imcl uninstall 8.5.0.0-WS-WAS-IFPM89996_8.5.0.20130703_1658 "
            "-s -installationDirectory /opt/IBM/WebSphere"
        )

    def test_dry_run_runs_nothing(self, manifest: Path):
        runner = MockRunner()
        run_reconcile(manifest, runner=runner, dry_run=True, os_family=OsFamily.POSIX)
        assert runner.call_count == 0

    def test_absent_and_missing_is_noop(self, tmp_path, data_dir, imcl_binary, registry_file):
        path = _manifest(tmp_path, data_dir, imcl_binary, """\
            - name: gone
              ensure: absent
              package: com.ibm.was
              version: 7.0.0
              target: /opt/IBM/WebSphere
        """)
        result = run_reconcile(path, dry_run=True, os_family=OsFamily.POSIX)
        assert result.outcomes[0].action == "none"

    def test_newer_version_noted(self, tmp_path, data_dir, imcl_binary, registry_file):
        path = _manifest(tmp_path, data_dir, imcl_binary, """\
            - name: older
              package: com.ibm.was
              version: 8.0.0
              target: /opt/IBM/WebSphere
        """)
        outcome = run_reconcile(path, dry_run=True, os_family=OsFamily.POSIX).outcomes[0]
        assert outcome.action == "create"
        assert "newer version 8.5.0" in outcome.notes[0]

    def test_response_file_resolution(self, tmp_path, data_dir, imcl_binary, registry_file, response_file):
        path = _manifest(tmp_path, data_dir, imcl_binary, f"""\
            - name: from-response
              response: {response_file}
        """)
        outcome = run_reconcile(path, dry_run=True, os_family=OsFamily.POSIX).outcomes[0]
        assert outcome.exists
        assert outcome.spec.target == "/opt/IBM/WebSphere"

    def test_bad_response_file_fails_only_that_package(
        self, tmp_path, data_dir, imcl_binary, registry_file,
    ):
        missing = tmp_path / "missing.xml"
        path = _manifest(tmp_path, data_dir, imcl_binary, f"""\
            - name: broken
              response: {missing}
            - name: fine
              package: com.ibm.was
              version: 8.5.0
              target: /opt/IBM/WebSphere
        """)
        result = run_reconcile(path, dry_run=True, os_family=OsFamily.POSIX)
        outcomes = _by_name(result)
        assert outcomes["broken"].failed
        assert "Cannot open response file" in outcomes["broken"].error
        assert outcomes["fine"].exists

    def test_missing_registry_aborts_pass(self, tmp_path, data_dir, imcl_binary):
        path = _manifest(tmp_path, data_dir, imcl_binary)
        result = run_reconcile(path, dry_run=True, os_family=OsFamily.POSIX)
        assert result.error is not None
        assert "installation registry" in result.error
        assert not result.ok

    def test_missing_manifest(self, tmp_path):
        result = run_reconcile(tmp_path / "packages.yml", dry_run=True)
        assert "not found" in result.error


class TestApply:
    def test_create_and_destroy(self, manifest: Path, imcl_binary: Path):
        runner = MockRunner()
        result = run_reconcile(manifest, runner=runner, os_family=OsFamily.POSIX)

        assert result.ok
        assert result.changed == 2
        assert runner.commands == [
            "ps -ef",
            f"{imcl_binary} install com.ibm.was_9.0.0 -repositories /mnt/was9 "
            "-installationDirectory /opt/IBM/WAS9 -acceptLicense",
            "ps -ef",
            f"{imcl_binary} uninstall 8.5.0.0-WS-WAS-IFPM89996_8.5.0.20130703_1658 "
            "-s -installationDirectory /opt/IBM/WebSphere",
        ]
        assert all(o.status == "ok" for o in result.outcomes)

    def test_failure_isolated_per_package(self, manifest: Path):
        runner = MockRunner()
        runner.set_failure("imcl", output="CRIMA1076E Install failed")
        result = run_reconcile(manifest, runner=runner, os_family=OsFamily.POSIX)

        assert result.failed == 2
        assert result.changed == 0
        outcomes = _by_name(result)
        assert "CRIMA1076E" in outcomes["was9"].error
        assert outcomes["was-installed"].status == "ok"

    def test_missing_home_fails_each_package(self, manifest: Path, tmp_path: Path):
        runner = MockRunner()
        with patch("ibmpkg.core.context.find_user_home", return_value=tmp_path / "nohome"):
            result = run_reconcile(manifest, runner=runner, os_family=OsFamily.POSIX)

        assert result.error is None
        assert result.failed == 2
        assert result.changed == 0
        outcomes = _by_name(result)
        assert "nohome" in outcomes["was9"].error
        assert "nohome" in outcomes["old-fix"].error
        assert outcomes["was-installed"].status == "ok"

    def test_runner_required(self, manifest: Path):
        with pytest.raises(ValueError):
            run_reconcile(manifest, os_family=OsFamily.POSIX)

    def test_to_dict(self, manifest: Path):
        data = run_reconcile(manifest, runner=MockRunner(), os_family=OsFamily.POSIX).to_dict()
        assert data["summary"] == {"total": 3, "present": 2, "changed": 2, "failed": 0}
        assert data["packages"][1]["action"] == "create"


class TestStatus:
    def test_status(self, manifest: Path):
        result = get_status(manifest, os_family=OsFamily.POSIX)
        assert result.present == 2
        assert [o.exists for o in result.outcomes] == [True, False, True]

    def test_inventory_sorted_newest_first(self, tmp_path: Path):
        registry = tmp_path / "InstallationManager" / "installRegistry.xml"
        registry.parent.mkdir()
        registry.write_text(textwrap.dedent("""\
            <installRegistry>
              <profile id="P">
                <property name="installLocation" value="/opt/p"/>
                <offering id="a">
                  <version value="1.9" repoInfo="repoUrl=/r"/>
                  <version value="1.10" repoInfo="repoUrl=/r"/>
                </offering>
              </profile>
            </installRegistry>
        """))
        result = list_inventory("root", Settings(data_dir=str(tmp_path)))
        assert [p.version for p in result.packages] == ["1.10", "1.9"]

    def test_inventory_missing_registry(self, tmp_path: Path):
        result = list_inventory("root", Settings(data_dir=str(tmp_path)))
        assert result.error is not None
        assert result.to_dict() == {"error": result.error}
