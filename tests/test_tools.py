"""Tests for diffpreview.tools module."""

from pathlib import Path
from unittest.mock import patch, MagicMock

import pytest

from diffpreview.errors import ConfigError, ToolError, ToolNotFound
from diffpreview.lib.config import PreviewConfig
from diffpreview.tools import (
    GitTools,
    ToolPaths,
    build_viewer_command,
    check_tools,
    viewer_binary,
)

MELD = "meld {before} {after}"


class TestViewerBinary:
    """Test viewer_binary."""

    def test_first_word(self):
        assert viewer_binary("WinMergeU /u /wl /wr /r {before} {after}") == "WinMergeU"

    def test_quoted_binary(self):
        assert viewer_binary('"/opt/my tools/differ" {before} {after}') == "/opt/my tools/differ"

    def test_empty_raises(self):
        with pytest.raises(ConfigError):
            viewer_binary("   ")

    def test_unbalanced_quote_raises(self):
        with pytest.raises(ConfigError, match="Can't parse"):
            viewer_binary('meld "{before} {after}')


class TestBuildViewerCommand:
    """Test build_viewer_command."""

    def test_substitutes_dirs(self):
        cmd = build_viewer_command(MELD, Path("/s/before"), Path("/s/after"))
        assert cmd == ["meld", "/s/before", "/s/after"]

    def test_paths_with_spaces_stay_single_args(self):
        cmd = build_viewer_command(MELD, Path("/my temp/before"), Path("/my temp/after"))
        assert cmd == ["meld", "/my temp/before", "/my temp/after"]

    def test_placeholder_inside_argument(self):
        cmd = build_viewer_command("differ --left={before} --right={after}", Path("/b"), Path("/a"))
        assert cmd == ["differ", "--left=/b", "--right=/a"]

    def test_unbalanced_quote_raises(self):
        with pytest.raises(ConfigError):
            build_viewer_command('differ "{before} {after}', Path("/b"), Path("/a"))

    def test_binary_override(self):
        cmd = build_viewer_command(MELD, Path("/b"), Path("/a"), binary="/usr/bin/meld")
        assert cmd[0] == "/usr/bin/meld"


class TestCheckTools:
    """Test check_tools."""

    @patch("diffpreview.tools.shutil.which")
    def test_resolves_both(self, mock_which):
        mock_which.side_effect = lambda name: f"/usr/bin/{name}"
        paths = check_tools(PreviewConfig(viewer=MELD))
        assert paths == ToolPaths(git="/usr/bin/git", viewer="/usr/bin/meld")

    @patch("diffpreview.tools.shutil.which")
    def test_missing_git(self, mock_which):
        mock_which.side_effect = lambda name: None if name == "git" else f"/usr/bin/{name}"
        with pytest.raises(ToolNotFound) as exc_info:
            check_tools(PreviewConfig(viewer=MELD))
        assert exc_info.value.tool == "git"

    @patch("diffpreview.tools.shutil.which")
    def test_viewer_not_needed(self, mock_which):
        mock_which.side_effect = lambda name: "/usr/bin/git" if name == "git" else None
        paths = check_tools(PreviewConfig(viewer=MELD), need_viewer=False)
        assert paths == ToolPaths(git="/usr/bin/git")
        mock_which.assert_called_once_with("git")

    @patch("diffpreview.tools.shutil.which")
    def test_missing_viewer(self, mock_which):
        mock_which.side_effect = lambda name: "/usr/bin/git" if name == "git" else None
        with pytest.raises(ToolNotFound, match="WinMergeU"):
            check_tools(PreviewConfig(viewer="WinMergeU /u /wl /wr /r {before} {after}"))


class TestGitTools:
    """Test the subprocess-backed tools."""

    def _tools(self, **kwargs):
        return GitTools(repo_root=Path("/repo"), viewer=MELD, **kwargs)

    @patch("diffpreview.tools.get_status_porcelain")
    def test_status_query(self, mock_status):
        mock_status.return_value = b"M a.txt\n"
        tools = self._tools(git="/usr/bin/git", untracked_all=True)
        assert tools.status_query() == b"M a.txt\n"
        mock_status.assert_called_once_with(Path("/repo"), git="/usr/bin/git", untracked_all=True)

    @patch("diffpreview.tools.get_file_at_revision")
    def test_show_at_revision(self, mock_show):
        mock_show.return_value = b"old"
        tools = self._tools(revision="HEAD~2")
        assert tools.show_at_revision("src/a.py") == b"old"
        mock_show.assert_called_once_with(Path("/repo"), "HEAD~2", "src/a.py", git="git")

    @patch("diffpreview.tools.subprocess.run")
    def test_launch_viewer_returns_exit_code(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        tools = self._tools(viewer_path="/usr/bin/meld")
        assert tools.launch_viewer(Path("/s/before"), Path("/s/after")) == 0
        mock_run.assert_called_once_with(["/usr/bin/meld", "/s/before", "/s/after"])

    @patch("diffpreview.tools.subprocess.run")
    def test_launch_viewer_os_error(self, mock_run):
        mock_run.side_effect = PermissionError("denied")
        with pytest.raises(ToolError):
            self._tools().launch_viewer(Path("/b"), Path("/a"))

    def test_from_config(self):
        config = PreviewConfig(viewer=MELD, revision="main", include_untracked=True)
        tools = GitTools.from_config(Path("/repo"), config, ToolPaths(git="/g", viewer="/v"))
        assert tools == GitTools(
            repo_root=Path("/repo"),
            viewer=MELD,
            git="/g",
            viewer_path="/v",
            revision="main",
            untracked_all=True,
        )
