"""
Command result model — the outcome of one external process.

Runners never raise for a non-zero exit; they return a ``CommandResult``
and the caller decides whether the failure is fatal.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Result of running an external command."""

    command: list[str]
    return_code: int = 0
    output: str = ""                  # stdout, with stderr merged in when combined
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.return_code == 0

    @property
    def rendered(self) -> str:
        """The command as a single space-joined line (for logs and errors)."""
        return " ".join(self.command)

    @classmethod
    def success(cls, command: list[str], output: str = "", **kwargs: Any) -> CommandResult:
        return cls(command=command, return_code=0, output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        command: list[str],
        output: str = "",
        return_code: int = 1,
        **kwargs: Any,
    ) -> CommandResult:
        return cls(command=command, return_code=return_code, output=output, **kwargs)
