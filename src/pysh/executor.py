"""Command execution: the double-fork launch protocol.

Every external command creates a short-lived three-level tree::

    shell ──fork──▶ intermediate ──fork──▶ grandchild ──exec──▶ argv

- The **grandchild** replaces itself with the requested program.
- The **intermediate** process waits for the grandchild, then prints
  the statistics block.  Its ``RUSAGE_CHILDREN`` accounting covers that
  one child and nothing else.
- The **shell** either waits for the intermediate process (foreground)
  or records it as a background job and returns immediately.

Each level fails on its own:

- **LaunchError**: the shell's fork failed; the command is abandoned.
- **SpawnError**: the intermediate's fork failed; it exits with status
  1 and prints no statistics.
- **Exec failure**: the program could not be executed; the grandchild
  reports the errno and exits with it.  The intermediate still prints
  statistics for the (very short) attempt.

Forked children never return into the caller's stack: every path out
of a child goes through ``os._exit``.

Ctrl-C reaches every process in the terminal's foreground group.  The
program reacts to it; the shell and the intermediate process keep
waiting, so neither leaves an unreaped child behind.
"""

import os
import sys
import time
from typing import NoReturn, TextIO

from pysh.jobs import JobRegistry
from pysh.logging import Logger, LogLevel
from pysh.stats import ExecutionOutcome, StatisticsReporter

_SOURCE = "executor"

# Exit status of a process killed by signal N, as shells report it.
_SIGNAL_EXIT_BASE = 128


class ExecutionError(Exception):
    """Base class for failures while launching a command."""


class LaunchError(ExecutionError):
    """The shell could not fork the intermediate process."""


class SpawnError(ExecutionError):
    """The intermediate process could not fork the grandchild."""


def exit_code(status: int) -> int:
    """Convert a ``waitpid`` status into a shell-style exit code.

    Normal exits keep their code; a death by signal N becomes
    ``128 + N`` so it fits in an exit status.
    """
    code = os.waitstatus_to_exitcode(status)
    return code if code >= 0 else _SIGNAL_EXIT_BASE - code


class CommandExecutor:
    """Fork and exec external commands in the foreground or background."""

    def __init__(
        self,
        *,
        registry: JobRegistry,
        reporter: StatisticsReporter | None = None,
        err: TextIO | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create an executor.

        Args:
            registry: Where background jobs are recorded.
            reporter: Prints statistics after each command.
            err: Diagnostic stream (defaults to stderr).
            logger: Audit log for launch failures and exit codes.

        """
        self._registry = registry
        self._reporter = reporter if reporter is not None else StatisticsReporter()
        self._err = err
        self._logger = logger if logger is not None else Logger()

    @property
    def registry(self) -> JobRegistry:
        """Return the job registry background launches go to."""
        return self._registry

    def run(self, argv: list[str], *, background: bool = False) -> int | None:
        """Launch *argv* as a foreground or background command.

        Args:
            argv: Program name followed by its arguments.
            background: Detach the command instead of waiting for it.

        Returns:
            The command's exit code for a foreground run, or None for a
            background launch or a launch that never started.

        Raises:
            ValueError: If *argv* is empty.

        """
        if not argv:
            msg = "Cannot run an empty command"
            raise ValueError(msg)

        argv = list(argv)
        if background and not self._registry.has_free_slot():
            self._report(
                f"Background job table is full ({self._registry.capacity} jobs), "
                "command not started.\n"
            )
            self._logger.log(
                LogLevel.WARNING, f"{argv[0]} refused, job table full", source=_SOURCE
            )
            return None

        try:
            pid = self._fork(LaunchError, "Couldn't fork the program, please retry.")
        except LaunchError as exc:
            self._report(f"{exc}\n")
            self._logger.log(LogLevel.ERROR, f"{argv[0]}: {exc}", source=_SOURCE)
            return None

        if pid == 0:
            self._intermediate(argv)

        if background:
            self._registry.add(pid=pid, name=argv[0])
            return None

        code = self._wait(pid, argv[0])
        self._logger.log(
            LogLevel.INFO, f"{argv[0]} exited with status {code}", source=_SOURCE, pid=pid
        )
        return code

    # -- child side --------------------------------------------------------

    def _intermediate(self, argv: list[str]) -> NoReturn:
        """Supervise one grandchild, print statistics, and exit.

        Runs in the forked intermediate process and never returns.
        """
        code = 1
        try:
            code = self._supervise(argv)
        except SpawnError as exc:
            self._report(f"{exc}\n")
        except BaseException as exc:  # noqa: BLE001
            self._report(f"pysh: {exc!r}\n")
        finally:
            os._exit(code)

    def _supervise(self, argv: list[str]) -> int:
        """Fork the grandchild, wait for it, and render statistics."""
        start_ns = time.monotonic_ns()
        pid = self._fork(SpawnError, "Couldn't fork the child process")
        if pid == 0:
            self._exec(argv)

        code = self._wait(pid, argv[0])
        outcome = ExecutionOutcome(start_ns=start_ns, end_ns=time.monotonic_ns(), status=code)
        self._reporter.render(outcome)
        return outcome.status

    def _exec(self, argv: list[str]) -> NoReturn:
        """Replace the grandchild with *argv*; exit with errno on failure."""
        code = 1
        try:
            os.execvp(argv[0], argv)
        except OSError as exc:
            code = exc.errno or 1
            self._report(
                f"Error no: {exc.errno} during execution of command, did you type correctly.\n"
            )
        finally:
            os._exit(code)

    # -- helpers -------------------------------------------------------------

    def _wait(self, pid: int, name: str) -> int:
        """Block until child *pid* exits and return its exit code.

        Ctrl-C is delivered to the command as well as to the waiting
        process.  The waiter logs it and keeps waiting, so it never
        abandons an unreaped child.
        """
        while True:
            try:
                _pid, status = os.waitpid(pid, 0)
            except KeyboardInterrupt:
                self._logger.log(LogLevel.INFO, f"{name} interrupted", source=_SOURCE, pid=pid)
                continue
            return exit_code(status)

    @staticmethod
    def _fork(error: type[ExecutionError], message: str) -> int:
        """Fork after flushing stdio; raise *error* if the fork fails."""
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            return os.fork()
        except OSError as exc:
            raise error(message) from exc

    def _report(self, text: str) -> None:
        """Write a diagnostic and flush it before any fork or exit."""
        err = self._err if self._err is not None else sys.stderr
        err.write(text)
        err.flush()
