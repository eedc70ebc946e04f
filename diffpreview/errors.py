"""
Error types for diffpreview.

Every failure is terminal for the run. Low-level code raises one of these;
the CLI catches PreviewError once, prints a diagnostic and exits non-zero.
"""

from dataclasses import dataclass


class PreviewError(Exception):
    """Base class for all fatal diffpreview errors."""
    exit_code = 1


class ToolNotFound(PreviewError):
    """A required executable is not on PATH."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Couldn't find '{tool}' on PATH")


class EnvironmentMissing(PreviewError):
    """Required environment configuration is absent."""


@dataclass
class StatusParseError(PreviewError):
    """A status line did not match '<code> <path>' or used an unknown code."""
    line: str
    reason: str = "invalid line"

    def __str__(self):
        return f"{self.reason}: '{self.line}'"


class SnapshotError(PreviewError):
    """Building the before/after trees failed."""


class WorkspaceError(PreviewError):
    """The scratch root could not be created or swept."""


@dataclass
class ToolError(PreviewError):
    """An external command failed or timed out."""
    cmd: list[str]
    returncode: int
    stderr: str = ""
    timed_out: bool = False

    def __str__(self):
        if self.timed_out:
            return f"command timed out: {' '.join(self.cmd)}"
        msg = f"command failed ({self.returncode}): {' '.join(self.cmd)}"
        if self.stderr.strip():
            msg += f"\n{self.stderr.strip()}"
        return msg


class RepoNotFound(PreviewError):
    """No ancestor of the starting directory holds a .git directory."""

    def __init__(self, start):
        self.start = start
        super().__init__(f"not a git repository (or any parent up to /): {start}")


class ConfigError(PreviewError):
    """Configuration file is missing, unparsable or invalid."""
    exit_code = 2
