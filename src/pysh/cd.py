"""The ``cd`` built-in.

``cd`` has to run inside the shell process itself: a forked child
changing *its* directory would leave the shell where it was.  So it is
a single ``chdir`` call, with the failure mapped onto a short list of
user-facing explanations.
"""

import errno
import os
from enum import StrEnum


class DirectoryError(StrEnum):
    """Why a directory change failed, as shown to the user."""

    MISSING_ARGUMENT = "Please specify a directory parameter when using cd"
    NOT_FOUND = "A component of the path does not name an existing directory"
    PERMISSION_DENIED = "Search permission are denied for any component of the pathname."
    NOT_A_DIRECTORY = "A component of the path is not a directory."
    UNHANDLED = "Unhandled error."


_ERRNO_REASONS: dict[int, DirectoryError] = {
    errno.ENOENT: DirectoryError.NOT_FOUND,
    errno.EACCES: DirectoryError.PERMISSION_DENIED,
    errno.ENOTDIR: DirectoryError.NOT_A_DIRECTORY,
}


class DirectoryChangeError(Exception):
    """Raised when ``cd`` cannot change the working directory."""

    def __init__(self, reason: DirectoryError, path: str | None = None) -> None:
        """Create the error for *path* failing with *reason*."""
        self.reason = reason
        self.path = path
        super().__init__(str(self))

    def __str__(self) -> str:
        """Format the diagnostic line shown on stderr."""
        if self.reason is DirectoryError.MISSING_ARGUMENT:
            return str(self.reason)
        return f'Error running builtin "cd {self.path}", {self.reason}'


def classify(err: OSError) -> DirectoryError:
    """Map an ``OSError`` from ``chdir`` to a user-facing reason."""
    if err.errno is None:
        return DirectoryError.UNHANDLED
    return _ERRNO_REASONS.get(err.errno, DirectoryError.UNHANDLED)


def change_directory(path: str | None) -> None:
    """Change the shell's working directory to *path*.

    Raises:
        DirectoryChangeError: If *path* is missing or ``chdir`` fails.
            The working directory is left unchanged.

    """
    if path is None:
        raise DirectoryChangeError(DirectoryError.MISSING_ARGUMENT)
    try:
        os.chdir(path)
    except OSError as exc:
        raise DirectoryChangeError(classify(exc), path) from exc
