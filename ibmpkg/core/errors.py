"""
Error taxonomy for registry discovery and imcl execution.

Read and parse errors are raised as-is and propagate to the caller.
Execution failures carry the operation context (what was being done,
for whom) together with the raw tool output.
"""

from __future__ import annotations


class IbmPkgError(Exception):
    """Base class for every error raised by ibmpkg."""


class MissingFileError(IbmPkgError, FileNotFoundError):
    """A registry, response file, installed.xml or imcl binary is missing."""


class NotExecutableError(IbmPkgError):
    """The imcl binary exists but lacks the execute bit."""


class ParseError(IbmPkgError):
    """Malformed or structurally incomplete vendor XML."""


class UserLookupError(IbmPkgError):
    """No home directory could be resolved for a named user."""


class ExecutionFailure(IbmPkgError):
    """An external command failed or processes could not be killed."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output
