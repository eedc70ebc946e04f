"""Historical content retrieval."""

from pathlib import Path

from diffpreview.git.runner import run_git


def get_file_at_revision(worktree: Path, revision: str, path: str, git: str = "git") -> bytes:
    """Return the exact bytes of path as of revision (e.g. HEAD:src/a.py).

    Raises ToolError if git can't produce it.
    """
    result = run_git(["show", f"{revision}:{path}"], worktree, text=False, git=git)
    return result.check().stdout
