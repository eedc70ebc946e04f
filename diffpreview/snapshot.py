"""
Snapshot builder.

Writes a before/after pair of directory trees for a list of changes:

    kind        before/<name>           after/<name>
    ADDED       empty file              working tree content
    DELETED     committed content       empty file
    MODIFIED    committed content       working tree content
    UNTRACKED   treated as ADDED (only present if the caller asked for it)

A file that doesn't exist on one side is an empty file rather than a missing
one, so the viewer always has a concrete pair to compare. Committed content
is written as raw bytes from git; working tree files are stream-copied.

Any failure raises. A half-built tree is never handed to the viewer.
"""

import logging
import shutil
from collections import defaultdict
from pathlib import Path, PurePosixPath
from typing import Iterable

from diffpreview.errors import SnapshotError
from diffpreview.lib.constants import LAYOUT_FLAT, LAYOUT_MIRROR, VALID_LAYOUTS
from diffpreview.lib.types import ChangeKind, ChangeRecord, SnapshotPair
from diffpreview.tools import ExternalTools

logger = logging.getLogger(__name__)


def find_name_collisions(changes: Iterable[ChangeRecord]) -> dict[str, list[str]]:
    """Display names shared by more than one change, mapped to their paths."""
    by_name = defaultdict(list)
    for change in changes:
        by_name[change.name].append(change.path)
    return {name: paths for name, paths in by_name.items() if len(paths) > 1}


def snapshot_paths(pair: SnapshotPair, change: ChangeRecord, layout: str = LAYOUT_FLAT) -> tuple[Path, Path]:
    """Where a change lands in the before and after trees."""
    if layout == LAYOUT_MIRROR:
        rel = Path(*PurePosixPath(change.path).parts)
    else:
        rel = Path(change.name)
    return pair.before / rel, pair.after / rel


def _write_empty(dst: Path) -> None:
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.touch()
    except OSError as e:
        raise SnapshotError(f"Failed to create {dst}: {e}") from e


def _write_committed(dst: Path, change: ChangeRecord, tools: ExternalTools) -> None:
    logger.debug("committed: %s => %s", change.path, dst)
    content = tools.show_at_revision(change.path)
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_bytes(content)
    except OSError as e:
        raise SnapshotError(f"Failed to write {dst}: {e}") from e


def _copy_working(dst: Path, change: ChangeRecord, repo_root: Path) -> None:
    src = repo_root / change.path
    logger.debug("working tree: %s => %s", src, dst)
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        with open(src, "rb") as fsrc, open(dst, "wb") as fdst:
            shutil.copyfileobj(fsrc, fdst)
    except OSError as e:
        raise SnapshotError(f"Failed to copy {src} to {dst}: {e}") from e


def _snapshot_change(
    repo_root: Path,
    pair: SnapshotPair,
    change: ChangeRecord,
    tools: ExternalTools,
    layout: str,
) -> None:
    before, after = snapshot_paths(pair, change, layout)

    if change.kind in (ChangeKind.ADDED, ChangeKind.UNTRACKED):
        _write_empty(before)
        _copy_working(after, change, repo_root)
    elif change.kind is ChangeKind.DELETED:
        _write_committed(before, change, tools)
        _write_empty(after)
    elif change.kind is ChangeKind.MODIFIED:
        _write_committed(before, change, tools)
        _copy_working(after, change, repo_root)
    else:
        raise SnapshotError(f"unknown change {change}")


def build_snapshot(
    repo_root: Path,
    pair: SnapshotPair,
    changes: list[ChangeRecord],
    tools: ExternalTools,
    layout: str = LAYOUT_FLAT,
) -> None:
    """Populate pair.before and pair.after for every change.

    Raises:
        SnapshotError: on I/O failure, unknown layout, or (flat layout) two
            changes sharing a file name
        ToolError: if committed content can't be retrieved
    """
    if layout not in VALID_LAYOUTS:
        raise SnapshotError(f"unknown layout '{layout}', expected one of {VALID_LAYOUTS}")

    if layout == LAYOUT_FLAT:
        collisions = find_name_collisions(changes)
        if collisions:
            details = "; ".join(f"{name}: {', '.join(paths)}" for name, paths in sorted(collisions.items()))
            raise SnapshotError(
                f"changed files share a name and would overwrite each other ({details}). "
                f"Use the '{LAYOUT_MIRROR}' layout."
            )

    try:
        pair.before.mkdir(parents=True, exist_ok=True)
        pair.after.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SnapshotError(f"Failed to create snapshot dirs under {pair.root}: {e}") from e

    for change in changes:
        _snapshot_change(repo_root, pair, change, tools, layout)
