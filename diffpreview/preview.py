"""
diffpreview run - snapshot uncommitted changes and open them in a viewer.

One linear pass, no retries:
detect tools -> init workspace -> locate repo root -> query changes
-> (stop if none) -> build snapshot -> launch viewer.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Mapping, Optional

from diffpreview.errors import RepoNotFound, ToolError
from diffpreview.git import parse_status
from diffpreview.lib.config import PreviewConfig
from diffpreview.lib.types import ChangeRecord, SnapshotPair
from diffpreview.snapshot import build_snapshot
from diffpreview.tools import ExternalTools, GitTools, check_tools, viewer_binary
from diffpreview.workspace import Workspace, resolve_scratch_root

logger = logging.getLogger(__name__)


@dataclass
class PreviewOutcome:
    """What a run did."""
    changes: list[ChangeRecord]
    snapshot: Optional[SnapshotPair] = None
    viewer_exit: Optional[int] = None
    swept: list[Path] = field(default_factory=list)


def find_repo_root(start: Path) -> Path:
    """Walk up from start to the first directory holding a .git directory.

    git status reports paths relative to this directory.
    """
    path = Path(start).resolve()
    for candidate in (path, *path.parents):
        if (candidate / ".git").is_dir():
            return candidate
    raise RepoNotFound(start)


def run_preview(
    config: PreviewConfig,
    tools: Optional[ExternalTools] = None,
    cwd: Optional[Path] = None,
    launch: bool = True,
    environ: Mapping[str, str] = os.environ,
    now: Optional[datetime] = None,
) -> PreviewOutcome:
    """Run one preview end to end.

    When tools is None the real git/viewer executables are resolved on PATH
    first, before anything touches the filesystem.
    """
    paths = check_tools(config, need_viewer=launch) if tools is None else None

    workspace = Workspace.create(resolve_scratch_root(environ, config.scratch_root))
    print(f"temp dir: {workspace.root}")
    swept = workspace.sweep(timedelta(hours=config.retention_hours))
    if swept:
        print(f"Removed {len(swept)} old snapshot(s)")

    repo_root = find_repo_root(cwd or Path.cwd())
    logger.info("repo root: %s", repo_root)
    if tools is None:
        tools = GitTools.from_config(repo_root, config, paths)

    changes = parse_status(tools.status_query(), include_untracked=config.include_untracked)
    if not changes:
        print("No changes to preview!")
        return PreviewOutcome(changes=[], swept=swept)
    print(f"{len(changes)} change(s)")

    pair = workspace.allocate(now)
    build_snapshot(repo_root, pair, changes, tools, layout=config.layout)
    outcome = PreviewOutcome(changes=changes, snapshot=pair, swept=swept)

    if not launch:
        print(f"Snapshot ready:\n  before: {pair.before}\n  after:  {pair.after}")
        return outcome

    returncode = tools.launch_viewer(pair.before, pair.after)
    outcome.viewer_exit = returncode
    if returncode != 0:
        raise ToolError(
            cmd=[viewer_binary(config.viewer), str(pair.before), str(pair.after)],
            returncode=returncode,
        )
    return outcome
