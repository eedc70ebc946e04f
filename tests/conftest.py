# Shared pytest fixtures for diffpreview tests

from pathlib import Path

import pytest

from diffpreview.errors import ToolError


class FakeTools:
    """In-memory ExternalTools: canned status, committed blobs, recorded viewer calls."""

    def __init__(self, status=b"", committed=None, viewer_exit=0):
        self.status = status
        self.committed = committed or {}
        self.viewer_exit = viewer_exit
        self.shown = []
        self.viewer_calls = []

    def status_query(self) -> bytes:
        return self.status

    def show_at_revision(self, path: str) -> bytes:
        self.shown.append(path)
        if path not in self.committed:
            raise ToolError(
                cmd=["git", "show", f"HEAD:{path}"],
                returncode=128,
                stderr=f"fatal: path '{path}' does not exist in 'HEAD'",
            )
        return self.committed[path]

    def launch_viewer(self, before: Path, after: Path) -> int:
        self.viewer_calls.append((before, after))
        return self.viewer_exit


@pytest.fixture
def repo(tmp_path):
    # A directory that looks like a git checkout
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    return root


@pytest.fixture
def write_file():
    def _write(path: Path, content: bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _write
