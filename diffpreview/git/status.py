"""Git status operations and porcelain parsing."""

import re
from pathlib import Path, PurePosixPath

from diffpreview.errors import StatusParseError
from diffpreview.git.runner import run_git
from diffpreview.lib.types import ChangeKind, ChangeRecord

STATUS_CODES = {kind.value: kind for kind in ChangeKind}

# C-style escapes git uses when it quotes a path
_ESCAPE_RE = re.compile(r'\\([0-7]{3}|.)')
_SIMPLE_ESCAPES = {
    "a": b"\a", "b": b"\b", "t": b"\t", "n": b"\n",
    "v": b"\v", "f": b"\f", "r": b"\r", '"': b'"', "\\": b"\\",
}


def get_status_porcelain(worktree: Path, git: str = "git", untracked_all: bool = False) -> bytes:
    """Get git status in porcelain format. Raises ToolError on failure.

    untracked_all lists files inside untracked directories instead of the
    directory itself.
    """
    args = ["status", "--porcelain"]
    if untracked_all:
        args.append("--untracked-files=all")
    result = run_git(args, worktree, text=False, git=git)
    return result.check().stdout


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of paths with spaces or unusual characters."""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    raw = bytearray()
    body = path[1:-1]
    pos = 0
    for m in _ESCAPE_RE.finditer(body):
        raw += body[pos:m.start()].encode("utf-8", "surrogateescape")
        esc = m.group(1)
        if len(esc) == 3:
            raw.append(int(esc, 8))
        else:
            raw += _SIMPLE_ESCAPES.get(esc, esc.encode("utf-8"))
        pos = m.end()
    raw += body[pos:].encode("utf-8", "surrogateescape")
    return raw.decode("utf-8", "surrogateescape")


def parse_status_line(line: str) -> ChangeRecord:
    """
    Parse one '<code> <path>' line.

    Raises:
        StatusParseError: if the line has no space or an unknown code
    """
    parts = line.split(" ", 1)
    if len(parts) != 2:
        raise StatusParseError(line)

    code, path = parts
    kind = STATUS_CODES.get(code)
    if kind is None:
        raise StatusParseError(line, f"unknown status code '{code}'")

    path = unquote_path(path.strip())
    if not path:
        raise StatusParseError(line, "missing path")
    return ChangeRecord(kind=kind, path=path, name=PurePosixPath(path).name)


def parse_status(output: str | bytes, include_untracked: bool = False) -> list[ChangeRecord]:
    """
    Parse `git status --porcelain` output into change records.

    A malformed line aborts the whole batch; no partial list is returned.
    Untracked files are dropped unless include_untracked is set.
    """
    if isinstance(output, bytes):
        output = output.decode("utf-8", "surrogateescape")

    changes = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        change = parse_status_line(line)
        if change.kind is ChangeKind.UNTRACKED and not include_untracked:
            continue
        changes.append(change)
    return changes
