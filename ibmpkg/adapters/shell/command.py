"""
Subprocess runner — execute commands and capture combined output.

Blocking, with no timeout: a hung imcl hangs the reconcile pass.
"""

from __future__ import annotations

import logging
import os
import pwd
import subprocess
import time

from ibmpkg.adapters.base import CommandRunner
from ibmpkg.core.models.command import CommandResult

logger = logging.getLogger(__name__)
# Full command output; kept at WARNING by setup_logging unless debugging
output_logger = logging.getLogger(f"{__name__}.output")


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run``, stderr merged into stdout."""

    @property
    def name(self) -> str:
        return "subprocess"

    def run(
        self,
        command: list[str],
        *,
        user: str | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        kwargs: dict = {}
        if user and user != _current_user():
            try:
                entry = pwd.getpwnam(user)
            except KeyError:
                return CommandResult.failure(
                    command=command,
                    output=f"Unknown user: {user}",
                    return_code=127,
                )
            kwargs["user"] = entry.pw_uid
            kwargs["group"] = entry.pw_gid
            env = os.environ.copy()
            env["HOME"] = entry.pw_dir
            env["USER"] = env["LOGNAME"] = user
            kwargs["env"] = env

        logger.debug("Executing: %s (user=%s, cwd=%s)", " ".join(command), user, cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                **kwargs,
            )
        except OSError as e:
            return CommandResult.failure(
                command=command,
                output=f"Command execution error: {e}",
                return_code=127,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = (result.stdout or "").strip()
        if result.returncode != 0:
            logger.debug("Command exited with %d: %s", result.returncode, output[-500:])
        if output:
            output_logger.info("%s output:\n%s", os.path.basename(command[0]), output)
        return CommandResult(
            command=command,
            return_code=result.returncode,
            output=output,
            duration_ms=elapsed_ms,
            metadata={"user": user, "cwd": cwd},
        )


def _current_user() -> str:
    try:
        return pwd.getpwuid(os.geteuid()).pw_name
    except KeyError:
        return ""
