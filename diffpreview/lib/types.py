"""
Shared data types for diffpreview.

This module contains dataclasses used across multiple modules to avoid
circular imports.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ChangeKind(Enum):
    MODIFIED = "M"
    ADDED = "A"
    DELETED = "D"
    UNTRACKED = "??"


@dataclass(frozen=True)
class ChangeRecord:
    """One file with a pending difference, as reported by git status."""
    kind: ChangeKind
    path: str  # Relative to repo root, '/'-separated
    name: str  # Final path component, used inside the snapshot trees


@dataclass(frozen=True)
class SnapshotPair:
    """The before/after directory pair for a single run."""
    root: Path
    before: Path
    after: Path

    @classmethod
    def under(cls, root: Path) -> "SnapshotPair":
        return cls(root=root, before=root / "before", after=root / "after")
