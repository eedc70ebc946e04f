"""Git command runner with timeout handling."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from diffpreview.errors import ToolError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@dataclass
class GitResult:
    """Result of a git command."""
    cmd: list[str]
    returncode: int
    stdout: str | bytes
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def check(self) -> "GitResult":
        """Raise ToolError unless the command succeeded."""
        if not self.success:
            raise ToolError(
                cmd=self.cmd,
                returncode=self.returncode,
                stderr=self.stderr,
                timed_out=self.timed_out,
            )
        return self


def run_git(
    args: list[str],
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT,
    text: bool = True,
    git: str = "git",
) -> GitResult:
    """
    Run a git command with timeout handling.

    Args:
        args: Git command arguments (e.g., ["status", "--porcelain"])
        cwd: Working directory for the command
        timeout: Timeout in seconds
        text: Decode stdout as text. Pass False to get raw bytes.
        git: Path to the git executable

    Returns:
        GitResult with returncode, stdout, stderr, and timed_out flag
    """
    cmd = [git, "-C", str(cwd)] + args
    logger.debug("running: git %s", args)
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=text,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return GitResult(
            cmd=cmd,
            returncode=-1,
            stdout="" if text else b"",
            stderr=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except OSError as e:
        raise ToolError(cmd=cmd, returncode=-1, stderr=str(e)) from e

    stderr = result.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return GitResult(
        cmd=cmd,
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=stderr,
    )
