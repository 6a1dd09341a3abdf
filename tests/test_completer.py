"""Tests for the tab-completion engine.

The Completer's logic is pure apart from directory listings, so these
tests point ``PATH`` and the working directory at ``tmp_path``.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from pysh.completer import Completer
from pysh.shell import Shell


def _bin_dir(tmp_path: Path) -> Path:
    """Create a fake PATH directory with one executable and one data file."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    tool = bin_dir / "mytool"
    tool.write_text("#!/bin/sh\n")
    tool.chmod(0o755)
    (bin_dir / "mydata").write_text("not executable")
    return bin_dir


def _completer(tmp_path: Path) -> Completer:
    """Create a completer whose PATH is only the fake bin directory."""
    return Completer(Shell(), environ={"PATH": str(_bin_dir(tmp_path))})


class TestCommandCompletion:
    """Verify completion of the first word."""

    def test_builtin_prefix(self, tmp_path: Path) -> None:
        """A built-in prefix should complete to the built-in."""
        assert _completer(tmp_path).completions("bt", "bt") == ["btasks"]

    def test_executables_on_path(self, tmp_path: Path) -> None:
        """Executables on PATH should be offered, data files should not."""
        candidates = _completer(tmp_path).completions("my", "my")
        assert candidates == ["mytool"]

    def test_empty_line_includes_builtins(self, tmp_path: Path) -> None:
        """Tab on a blank line should include every built-in."""
        candidates = _completer(tmp_path).completions("", "")
        assert set(Shell().command_names) <= set(candidates)
        assert "mytool" in candidates

    def test_missing_path_dir_is_skipped(self, tmp_path: Path) -> None:
        """A PATH entry that does not exist should be ignored."""
        completer = Completer(Shell(), environ={"PATH": str(tmp_path / "nowhere")})
        assert completer.completions("ex", "ex") == ["exit"]


class TestPathCompletion:
    """Verify filesystem path completion."""

    def test_cd_argument(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The argument of cd should complete to paths, dirs with a slash."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "subdir").mkdir()
        (tmp_path / "subfile").write_text("")
        completer = Completer(Shell(), environ={"PATH": ""})
        assert completer.completions("sub", "cd sub") == ["subdir/", "subfile"]

    def test_slash_in_any_argument(self, tmp_path: Path) -> None:
        """A word containing a slash should complete as a path."""
        (tmp_path / "notes.txt").write_text("")
        completer = Completer(Shell(), environ={"PATH": ""})
        prefix = f"{tmp_path}/no"
        assert completer.completions(prefix, f"cat {prefix}") == [f"{tmp_path}/notes.txt"]

    def test_plain_argument_has_no_candidates(self, tmp_path: Path) -> None:
        """Other arguments have nothing to complete."""
        assert _completer(tmp_path).completions("he", "echo he") == []

    def test_unreadable_directory(self, tmp_path: Path) -> None:
        """A directory that cannot be listed should give no candidates."""
        completer = Completer(Shell(), environ={"PATH": ""})
        assert completer.completions(f"{tmp_path}/missing/x", "cd x") == []


class TestReadlineCallback:
    """Verify the readline state protocol."""

    def test_complete_walks_candidates(self, tmp_path: Path) -> None:
        """Successive states should yield candidates, then None."""
        completer = _completer(tmp_path)
        with patch("pysh.completer.readline.get_line_buffer", return_value="bt"):
            assert completer.complete("bt", 0) == "btasks"
            assert completer.complete("bt", 1) is None
