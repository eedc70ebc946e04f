"""Git operations for diffpreview.

This module provides clean interfaces for the git queries the preview needs.

Return type conventions:
- run_git() returns GitResult: Caller must check .success (or call .check())
  before using output.
- Query helpers (get_status_porcelain, get_file_at_revision) return raw bytes
  and raise ToolError on failure.
- parse_status() raises StatusParseError on the first malformed line.
"""

from diffpreview.git.runner import (
    GitResult,
    run_git,
)
from diffpreview.git.status import (
    get_status_porcelain,
    parse_status,
    parse_status_line,
    unquote_path,
)
from diffpreview.git.show import (
    get_file_at_revision,
)

__all__ = [
    # runner
    "GitResult",
    "run_git",
    # status
    "get_status_porcelain",
    "parse_status",
    "parse_status_line",
    "unquote_path",
    # show
    "get_file_at_revision",
]
