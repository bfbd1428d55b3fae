"""
Runner base — the contract between the reconciler and external tools.

Every process the reconciler starts (ps, kill, imcl) goes through a
``CommandRunner``.  Services only talk to runners through this
protocol, never directly to ``subprocess``, so that tests and
``--mock`` mode can swap in a double.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ibmpkg.core.models.command import CommandResult


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Runners NEVER raise for a failing command — the exit status and
    output are captured in the CommandResult.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def run(
        self,
        command: list[str],
        *,
        user: str | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run ``command`` to completion and return its result.

        Args:
            command: Program and arguments.
            user: Run under this account's identity (None = current).
            cwd: Working directory for the child (None = inherit).
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
