"""
External tools used by the preview.

The core logic only talks to the ExternalTools protocol, so parsing and
snapshot policy can be exercised without git or a viewer installed.
GitTools is the real subprocess-backed implementation.
"""

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from diffpreview.errors import ConfigError, ToolError, ToolNotFound
from diffpreview.git import get_file_at_revision, get_status_porcelain
from diffpreview.lib.config import PreviewConfig
from diffpreview.lib.constants import DEFAULT_REVISION

logger = logging.getLogger(__name__)


class ExternalTools(Protocol):
    def status_query(self) -> bytes:
        """Raw `git status --porcelain` output."""
        ...

    def show_at_revision(self, path: str) -> bytes:
        """Committed content of a repo-relative path."""
        ...

    def launch_viewer(self, before: Path, after: Path) -> int:
        """Open the diff viewer on two directories and wait for it to exit."""
        ...


@dataclass(frozen=True)
class ToolPaths:
    """Resolved executables."""
    git: str
    viewer: str | None = None  # None when the viewer won't be launched


def split_template(template: str) -> list[str]:
    """shlex-split a viewer template. Unbalanced quotes are a ConfigError."""
    try:
        return shlex.split(template)
    except ValueError as e:
        raise ConfigError(f"Can't parse viewer command {template!r}: {e}") from e


def viewer_binary(template: str) -> str:
    """First word of the viewer command template."""
    parts = split_template(template)
    if not parts:
        raise ConfigError("viewer command is empty")
    return parts[0]


def check_tools(config: PreviewConfig, need_viewer: bool = True) -> ToolPaths:
    """Resolve git and, if need_viewer, the viewer on PATH.

    Raises:
        ToolNotFound: naming the first tool that is missing
    """
    wanted = [("git", "git")]
    if need_viewer:
        wanted.append(("viewer", viewer_binary(config.viewer)))
    resolved = {}
    for key, name in wanted:
        path = shutil.which(name)
        if path is None:
            raise ToolNotFound(name)
        logger.info("'%s' is '%s'", name, path)
        resolved[key] = path
    return ToolPaths(**resolved)


def build_viewer_command(template: str, before: Path, after: Path, binary: str | None = None) -> list[str]:
    """Split the template and substitute {before}/{after} per argument.

    Substituting after splitting keeps paths with spaces intact.
    """
    cmd = [
        arg.replace("{before}", str(before)).replace("{after}", str(after))
        for arg in split_template(template)
    ]
    if binary:
        cmd[0] = binary
    return cmd


@dataclass
class GitTools:
    """ExternalTools backed by the git executable and a viewer subprocess."""
    repo_root: Path
    viewer: str  # Command template
    git: str = "git"
    viewer_path: str | None = None
    revision: str = DEFAULT_REVISION
    untracked_all: bool = False

    @classmethod
    def from_config(cls, repo_root: Path, config: PreviewConfig, paths: ToolPaths) -> "GitTools":
        return cls(
            repo_root=repo_root,
            viewer=config.viewer,
            git=paths.git,
            viewer_path=paths.viewer,
            revision=config.revision,
            untracked_all=config.include_untracked,
        )

    def status_query(self) -> bytes:
        return get_status_porcelain(self.repo_root, git=self.git, untracked_all=self.untracked_all)

    def show_at_revision(self, path: str) -> bytes:
        return get_file_at_revision(self.repo_root, self.revision, path, git=self.git)

    def launch_viewer(self, before: Path, after: Path) -> int:
        # No timeout: blocks until the user closes the viewer
        cmd = build_viewer_command(self.viewer, before, after, binary=self.viewer_path)
        logger.info("running: %s", cmd)
        try:
            result = subprocess.run(cmd)
        except OSError as e:
            raise ToolError(cmd=cmd, returncode=-1, stderr=str(e)) from e
        return result.returncode
