"""
Scratch workspace for snapshot trees.

All runs share one stable scratch root so stale runs can be found by age.
Each run gets its own timestamped subdirectory, which is only ever removed
by the retention sweep of a later run.
"""

import logging
import os
import shutil
import stat
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Mapping, Optional

from diffpreview.errors import EnvironmentMissing, WorkspaceError
from diffpreview.lib.constants import RUN_DIR_FORMAT, SCRATCH_DIR_NAME, TEMP_ENV_VARS
from diffpreview.lib.types import SnapshotPair

logger = logging.getLogger(__name__)


def resolve_scratch_root(
    environ: Mapping[str, str] = os.environ,
    override: Optional[Path] = None,
) -> Path:
    """Return the stable scratch root.

    <override|TEMP|TMP|TMPDIR>/diff-preview. The sweep deletes old
    subdirectories of this root, so it is always a directory of our own,
    even when the parent is user-chosen. No fallback location is attempted.
    """
    if override is not None:
        return Path(override) / SCRATCH_DIR_NAME
    for var in TEMP_ENV_VARS:
        value = environ.get(var)
        if value:
            return Path(value) / SCRATCH_DIR_NAME
    raise EnvironmentMissing(
        f"env variables {', '.join(TEMP_ENV_VARS)} are not set"
    )


@dataclass
class Workspace:
    root: Path

    @classmethod
    def create(cls, root: Path) -> "Workspace":
        """Create the scratch root if needed."""
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceError(f"Failed to create scratch dir {root}: {e}") from e
        return cls(root=root)

    def sweep(self, max_age: timedelta, now: Optional[float] = None) -> list[Path]:
        """Delete run directories whose mtime is older than max_age.

        Non-directories are left alone; we never create anything else here.
        Returns the directories removed.
        """
        if now is None:
            now = time.time()
        try:
            entries = sorted(self.root.iterdir())
        except OSError as e:
            raise WorkspaceError(f"Failed to list {self.root}: {e}") from e

        removed = []
        for entry in entries:
            try:
                st = entry.lstat()
            except FileNotFoundError:
                continue
            if not stat.S_ISDIR(st.st_mode):
                continue

            age = timedelta(seconds=now - st.st_mtime)
            if age <= max_age:
                logger.info("Not deleting %s, younger than %s (%s)", entry, max_age, age)
                continue

            logger.info("Deleting %s, older than %s", entry, max_age)
            try:
                shutil.rmtree(entry)
            except FileNotFoundError:
                # Already gone, e.g. swept by a concurrent run
                continue
            except OSError as e:
                raise WorkspaceError(f"Failed to delete {entry}: {e}") from e
            removed.append(entry)

        return removed

    def allocate(self, now: Optional[datetime] = None) -> SnapshotPair:
        """Create a fresh timestamped run directory.

        Two runs in the same second get _2, _3, ... suffixes.
        """
        if now is None:
            now = datetime.now()
        base = now.strftime(RUN_DIR_FORMAT)
        candidate = self.root / base
        n = 1
        while True:
            try:
                candidate.mkdir()
                break
            except FileExistsError:
                n += 1
                candidate = self.root / f"{base}_{n}"
            except OSError as e:
                raise WorkspaceError(f"Failed to create {candidate}: {e}") from e

        logger.debug("Allocated run dir %s", candidate)
        return SnapshotPair.under(candidate)
