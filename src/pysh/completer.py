"""Tab completer for the pysh prompt.

The completer separates **what to complete** (pure logic, testable
with a fake ``PATH``) from **how to wire it** (readline integration in
the REPL).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which looks at the input so
far and returns a list of candidate strings:

- the first word completes to built-ins and executables on ``PATH``;
- the argument of ``cd``, or any word containing ``/``, completes to
  filesystem paths.
"""

from __future__ import annotations

import os
import readline
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pysh.shell import Shell

# Commands whose argument is a filesystem path.
_PATH_COMMANDS: frozenset[str] = frozenset(["cd"])


class Completer:
    """Context-aware tab completer for the shell."""

    def __init__(self, shell: Shell, *, environ: Mapping[str, str] | None = None) -> None:
        """Create a completer attached to a shell instance.

        Args:
            shell: The shell whose built-in names are offered.
            environ: Where ``PATH`` is read from (defaults to ``os.environ``).

        """
        self._shell = shell
        self._environ = environ if environ is not None else os.environ

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback: return the *state*-th candidate for *text*.

        Args:
            text: The partial word being completed.
            state: Index into the candidate list (0, 1, 2, …).

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        Returns:
            Sorted list of matching candidates.

        """
        words = line.lstrip().split()

        # No words yet, or still typing the first word → command completion
        if not words or (len(words) == 1 and not line.endswith(" ")):
            if "/" in text:
                return self._complete_paths(text)
            return self._complete_commands(text)

        if words[0] in _PATH_COMMANDS or "/" in text:
            return self._complete_paths(text)

        return []

    # -- private completers ------------------------------------------------

    def _complete_commands(self, text: str) -> list[str]:
        """Complete built-in names and executables found on ``PATH``."""
        names = {cmd for cmd in self._shell.command_names if cmd.startswith(text)}
        names.update(self._executables(text))
        return sorted(names)

    def _executables(self, prefix: str) -> set[str]:
        """Return executable file names on ``PATH`` starting with *prefix*."""
        found: set[str] = set()
        for directory in self._environ.get("PATH", "").split(os.pathsep):
            if not directory:
                continue
            try:
                entries = os.listdir(directory)
            except OSError:
                continue
            for entry in entries:
                if not entry.startswith(prefix):
                    continue
                full = os.path.join(directory, entry)
                if os.path.isfile(full) and os.access(full, os.X_OK):
                    found.add(entry)
        return found

    @staticmethod
    def _complete_paths(text: str) -> list[str]:
        """Complete filesystem paths relative to the working directory.

        Split the partial path into a directory and a name prefix, list
        the directory, and filter by prefix.  Directories get a
        trailing ``/`` suffix.
        """
        last_slash = text.rfind("/")
        directory = text[: last_slash + 1]
        prefix = text[last_slash + 1 :]

        try:
            entries = os.listdir(directory or ".")
        except OSError:
            return []

        candidates: list[str] = []
        for entry in entries:
            if not entry.startswith(prefix):
                continue
            full = f"{directory}{entry}"
            if os.path.isdir(full):
                full += "/"
            candidates.append(full)
        return sorted(candidates)
