"""
Execution — imcl install/uninstall driver.

Builds imcl argument lists from a resolved declaration and runs them
as the declaration's user, from that user's home directory.  Process
teardown always precedes the imcl call.
"""

from __future__ import annotations

import contextlib
import grp
import logging
import os
import pwd
import shlex
from collections.abc import Iterator
from pathlib import Path

from ibmpkg.adapters.base import CommandRunner
from ibmpkg.core.context import InstallContext
from ibmpkg.core.errors import ExecutionFailure, UserLookupError
from ibmpkg.core.models.package import DesiredSpec
from ibmpkg.core.services.imcl.processes import stop_processes

logger = logging.getLogger(__name__)


# ── Argument assembly (pure) ────────────────────────────────────


def build_install_args(spec: DesiredSpec) -> list[str]:
    """imcl arguments for installing ``spec``.

    >>> spec = DesiredSpec(package="com.ibm.was", version="8.5.0",
    ...                    target="/opt/IBM/WebSphere", repository="/mnt/repo")
    >>> " ".join(build_install_args(spec))
    'install com.ibm.was_8.5.0 -repositories /mnt/repo -installationDirectory /opt/IBM/WebSphere -acceptLicense'
    """
    if spec.response:
        args = ["input", spec.response]
    else:
        args = ["install", f"{spec.package}_{spec.version}"]
        if spec.jdk_package_name:
            args.append(f"{spec.jdk_package_name}_{spec.jdk_package_version}")
        if spec.repository:
            args += ["-repositories", spec.repository]
        args += ["-installationDirectory", str(spec.target)]
        if not spec.privileged:
            args += ["-accessRights", "nonAdmin"]
    args.append("-acceptLicense")
    if spec.options:
        args += shlex.split(spec.options)
    return args


def build_uninstall_args(spec: DesiredSpec) -> list[str]:
    """imcl arguments for removing ``spec`` from its target."""
    return [
        "uninstall", f"{spec.package}_{spec.version}",
        "-s",
        "-installationDirectory", str(spec.target),
    ]


# ── Helpers ─────────────────────────────────────────────────────


@contextlib.contextmanager
def working_directory(path: Path) -> Iterator[None]:
    """Temporarily chdir to ``path``; the previous cwd is always restored."""
    previous = os.getcwd()
    os.chdir(path)
    try:
        yield
    finally:
        os.chdir(previous)


def chown_tree(root: Path, owner: str, group: str | None = None) -> int:
    """Recursively change ownership of ``root``. Returns entries changed."""
    try:
        uid = pwd.getpwnam(owner).pw_uid
    except KeyError:
        raise UserLookupError(f"Unknown package owner: {owner}") from None
    gid = -1
    if group:
        try:
            gid = grp.getgrnam(group).gr_gid
        except KeyError:
            raise UserLookupError(f"Unknown package group: {group}") from None

    os.chown(root, uid, gid, follow_symlinks=False)
    count = 1
    for dirpath, dirnames, filenames in os.walk(root):
        for entry in dirnames + filenames:
            os.chown(os.path.join(dirpath, entry), uid, gid, follow_symlinks=False)
            count += 1
    logger.info("Changed ownership of %d entries under %s to %s:%s", count, root, owner, group or "")
    return count


# ── Driver ──────────────────────────────────────────────────────


class ImclDriver:
    """Run imcl for one acting user."""

    def __init__(self, context: InstallContext, runner: CommandRunner) -> None:
        self.context = context
        self.runner = runner

    def imcl(self, args: list[str], operation: str) -> str:
        """Run imcl with ``args`` and return its output.

        Raises:
            ExecutionFailure: imcl exited non-zero; the message names the
                operation and user and carries imcl's output verbatim.
                Also raised when the home directory cannot be entered.
        """
        command = [str(self.context.imcl_path()), *args]
        home = self.context.home
        try:
            with working_directory(home):
                result = self.runner.run(command, user=self.context.user, cwd=os.getcwd())
        except OSError as e:
            raise ExecutionFailure(
                f"Failed to {operation} as {self.context.user}: cannot run from {home}: {e}"
            ) from e
        if not result.ok:
            raise ExecutionFailure(
                f"Failed to {operation} as {self.context.user}: "
                f"'{result.rendered}' exited with {result.return_code}\n{result.output}",
                output=result.output,
            )
        return result.output

    def create(self, spec: DesiredSpec) -> list[str]:
        """Install ``spec``. Returns the imcl arguments used."""
        args = build_install_args(spec)
        stop_processes(str(spec.target), self.runner, self.context.os_family)
        self.imcl(args, f"install {spec.display_name}")

        if spec.manage_ownership and spec.target and Path(spec.target).exists():
            try:
                chown_tree(Path(spec.target), str(spec.package_owner), spec.package_group)
            except OSError as e:
                raise ExecutionFailure(
                    f"Installed {spec.display_name} but could not change ownership of "
                    f"{spec.target} to {spec.package_owner}: {e}"
                ) from e
        return args

    def destroy(self, spec: DesiredSpec) -> list[str]:
        """Uninstall ``spec``. Returns the imcl arguments used."""
        stop_processes(str(spec.target), self.runner, self.context.os_family)
        args = build_uninstall_args(spec)
        self.imcl(args, f"uninstall {spec.display_name}")
        return args
