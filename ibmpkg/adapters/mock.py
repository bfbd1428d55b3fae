"""
Mock runner — test double for every external command.

Used by ``--mock`` mode and the test suite to simulate ps, kill and
imcl without touching the host.  Responses are keyed by the program
name (``command[0]`` basename) or by the full rendered command line.
"""

from __future__ import annotations

import os

from ibmpkg.adapters.base import CommandRunner
from ibmpkg.core.models.command import CommandResult


class MockRunner(CommandRunner):
    """Universal mock runner.

    By default, returns success with empty output for everything.
    """

    def __init__(self, default_output: str = "") -> None:
        self._default_output = default_output
        self._responses: dict[str, CommandResult] = {}
        self._call_log: list[dict] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[dict]:
        """Every call received: ``{"command", "user", "cwd"}``."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[str]:
        """Rendered command lines in call order."""
        return [" ".join(c["command"]) for c in self._call_log]

    def set_output(self, key: str, output: str) -> None:
        """Make commands matching ``key`` succeed with ``output``."""
        self._responses[key] = CommandResult.success(command=[key], output=output)

    def set_failure(self, key: str, output: str = "Mock failure", return_code: int = 1) -> None:
        """Make commands matching ``key`` fail."""
        self._responses[key] = CommandResult.failure(
            command=[key], output=output, return_code=return_code,
        )

    def run(
        self,
        command: list[str],
        *,
        user: str | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        self._call_log.append({"command": list(command), "user": user, "cwd": cwd})

        rendered = " ".join(command)
        program = os.path.basename(command[0]) if command else ""
        for key in (rendered, program):
            if key in self._responses:
                canned = self._responses[key]
                return canned.model_copy(update={"command": list(command)})

        return CommandResult.success(
            command=list(command),
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
