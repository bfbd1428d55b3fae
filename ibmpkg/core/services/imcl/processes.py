"""
Execution — stop processes running from an installation target.

Installation Manager requires that everything running out of a target
directory is stopped before it is modified, and it will not do that
itself.  There is no reliable way to ask "which services matter", so
the process table is searched for anything mentioning the target and
those processes are killed.
"""

from __future__ import annotations

import logging
import os
import platform
import re
from enum import Enum
from pathlib import Path

from ibmpkg.adapters.base import CommandRunner
from ibmpkg.core.errors import ExecutionFailure

logger = logging.getLogger(__name__)

KILL_COMMAND = "/bin/kill"

_BSD_SYSTEMS = frozenset({"freebsd", "netbsd", "openbsd", "darwin", "dragonfly"})
_OPENWRT_RELEASE = Path("/etc/openwrt_release")


class OsFamily(str, Enum):
    """Operating system families with distinct ``ps`` flags."""

    OPENWRT = "openwrt"
    BSD = "bsd"
    POSIX = "posix"

    @property
    def ps_command(self) -> list[str]:
        return {
            OsFamily.OPENWRT: ["ps", "www"],
            OsFamily.BSD: ["ps", "auxwww"],
            OsFamily.POSIX: ["ps", "-ef"],
        }[self]


def detect_os_family(
    system: str | None = None,
    openwrt_release: Path = _OPENWRT_RELEASE,
) -> OsFamily:
    """Resolve the running host's OS family (done once at startup)."""
    system = (system or platform.system()).lower()
    if system in _BSD_SYSTEMS:
        return OsFamily.BSD
    if system == "linux" and openwrt_release.exists():
        return OsFamily.OPENWRT
    return OsFamily.POSIX


def find_pids(process_table: str, target: str) -> list[str]:
    """Collect the pid (second field) of every line mentioning ``target``.

    The target is matched as a literal substring.
    """
    pattern = re.compile(re.escape(target))
    own_pid = str(os.getpid())
    pids: list[str] = []
    for line in process_table.splitlines():
        if not pattern.search(line):
            continue
        fields = line.split()
        if len(fields) < 2 or fields[1] == own_pid:
            continue
        logger.debug("Process matched: %s", line)
        pids.append(fields[1])
    return pids


def stop_processes(target: str, runner: CommandRunner, family: OsFamily) -> list[str]:
    """Kill every process whose command line references ``target``.

    Returns the pids that were signalled (empty when nothing matched).

    Raises:
        ExecutionFailure: ``ps`` failed, or the processes could not be killed.
    """
    ps = family.ps_command
    logger.debug("Executing '%s' to find processes that match %s", " ".join(ps), target)
    listing = runner.run(ps)
    if not listing.ok:
        raise ExecutionFailure(
            f"Could not list processes with '{listing.rendered}'",
            output=listing.output,
        )

    pids = find_pids(listing.output, target)
    if not pids:
        return []

    joined = " ".join(pids)
    logger.info("Attempting to kill PID %s", joined)
    result = runner.run([KILL_COMMAND, *pids])
    if not result.ok:
        raise ExecutionFailure(
            f"Could not kill PID {joined}.\n"
            f"In order to install/upgrade to specified target: {target},\n"
            f"all related processes need to be stopped.\n"
            f"Output of 'kill {joined}': {result.output}",
            output=result.output,
        )
    return pids
