"""The shell: tokenizer and command dispatcher.

The shell reads one line, splits it into an argument vector, and
decides what to do with it:

- a **built-in** (``exit``, ``btasks``/``ap``/``jobs``, ``cd``,
  ``help``, ``log``) runs inside the shell process;
- anything else is an **external command**, handed to the
  ``CommandExecutor``.  A trailing ``&`` token detaches it.

Design choices:
    - **Returns strings, not prints.**  Built-in output comes back to
      the caller (the REPL decides how to show it).  Output written by
      forked commands goes straight to the terminal.
    - **Command dispatch via a dict.**  Adding a built-in means writing
      a method and adding one dict entry.
    - **The shell owns its collaborators.**  The job registry, executor
      and audit log are explicit objects wired together here.
"""

import sys
from collections.abc import Callable
from typing import TextIO, TypeAlias

from pysh.cd import DirectoryChangeError, change_directory
from pysh.config import ShellConfig
from pysh.executor import CommandExecutor
from pysh.jobs import JobRegistry
from pysh.logging import Logger, LogLevel

# Type alias for a built-in handler: takes a list of args, returns output.
_Handler: TypeAlias = Callable[[list[str]], str]

_SOURCE = "shell"
_BACKGROUND_MARKER = "&"


def tokenize(line: str) -> list[str]:
    """Split a command line on whitespace, dropping empty tokens."""
    return line.split()


class Shell:
    """Command interpreter for external programs and a few built-ins."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(
        self,
        *,
        config: ShellConfig | None = None,
        registry: JobRegistry | None = None,
        executor: CommandExecutor | None = None,
        logger: Logger | None = None,
        err: TextIO | None = None,
    ) -> None:
        """Create a shell and wire up its job registry and executor.

        Args:
            config: Shell settings (capacity, prompt).
            registry: Background job table; built from *config* if omitted.
            executor: Command launcher; built around *registry* if omitted.
            logger: Audit log shared by all components.  Defaults to the
                given registry's log, so job events show up in ``log``.
            err: Stream for built-in diagnostics (defaults to stderr).

        """
        self._config = config if config is not None else ShellConfig()
        if logger is None:
            logger = registry.logger if registry is not None else Logger()
        self._logger = logger
        self._registry = (
            registry
            if registry is not None
            else JobRegistry(capacity=self._config.job_capacity, logger=self._logger)
        )
        self._executor = (
            executor
            if executor is not None
            else CommandExecutor(registry=self._registry, logger=self._logger)
        )
        self._err = err

        self._commands: dict[str, _Handler] = {
            "exit": self._cmd_exit,
            "btasks": self._cmd_btasks,
            "ap": self._cmd_btasks,
            "jobs": self._cmd_btasks,
            "cd": self._cmd_cd,
            "help": self._cmd_help,
            "log": self._cmd_log,
        }

    @property
    def config(self) -> ShellConfig:
        """Return the shell settings."""
        return self._config

    @property
    def registry(self) -> JobRegistry:
        """Return the background job registry."""
        return self._registry

    @property
    def logger(self) -> Logger:
        """Return the shell's audit log."""
        return self._logger

    @property
    def command_names(self) -> list[str]:
        """Return the sorted names of all built-in commands."""
        return sorted(self._commands)

    def execute(self, command: str) -> str:
        """Tokenize and run one command line.

        Args:
            command: The raw line typed by the user (e.g. "sleep 5 &").

        Returns:
            Built-in output, ``EXIT_SENTINEL`` when the shell should
            stop, or an empty string.

        """
        argv = tokenize(command)
        if not argv:
            return ""

        handler = self._commands.get(argv[0])
        if handler is not None:
            return handler(argv[1:])

        background = argv[-1] == _BACKGROUND_MARKER
        if background:
            argv = argv[:-1]
            if not argv:
                return ""

        self._executor.run(argv, background=background)
        return ""

    def live_jobs(self) -> int:
        """Reap finished jobs and return how many are still running."""
        return self._registry.reap_all()

    # -- built-ins ---------------------------------------------------------

    def _cmd_exit(self, _args: list[str]) -> str:
        """Stop the shell, unless background jobs are still running."""
        listing = self._cmd_btasks([])
        running = self._registry.reap_all()
        if running == 0:
            return self.EXIT_SENTINEL

        self._logger.log(
            LogLevel.WARNING, f"exit refused, {running} job(s) running", source=_SOURCE
        )
        message = f"There's still {running} background(s) process(es) running"
        return f"{listing}\n{message}" if listing else message

    def _cmd_btasks(self, _args: list[str]) -> str:
        """List background jobs that are still running."""
        return "\n".join(str(job) for job in self._registry.list_jobs())

    def _cmd_cd(self, args: list[str]) -> str:
        """Change the shell's working directory."""
        try:
            change_directory(args[0] if args else None)
        except DirectoryChangeError as exc:
            self._logger.log(LogLevel.WARNING, str(exc), source=_SOURCE)
            err = self._err if self._err is not None else sys.stderr
            err.write(f"{exc}\n")
            err.flush()
        return ""

    def _cmd_help(self, _args: list[str]) -> str:
        """Describe the built-in commands."""
        return "\n".join(
            [
                "<cmd> [args...]    run a program and print its statistics",
                "<cmd> [args...] &  run a program in the background",
                "btasks, ap, jobs   list background jobs",
                "cd <dir>           change the working directory",
                "log [filter...]    show the audit log (by level, source or pid)",
                "help               show this help",
                "exit               quit (refused while jobs are running)",
            ]
        )

    def _cmd_log(self, args: list[str]) -> str:
        """Show the audit log, narrowed by level, source or pid.

        A number selects a process, a level name (``warning``) sets the
        minimum level, and any other word selects a source (``jobs``).
        """
        min_level: LogLevel | None = None
        source: str | None = None
        pid: int | None = None
        for arg in args:
            level = LogLevel.from_name(arg)
            if arg.isdigit():
                pid = int(arg)
            elif level is not None:
                min_level = level
            else:
                source = arg
        entries = self._logger.filter(min_level=min_level, source=source, pid=pid)
        return "\n".join(str(entry) for entry in entries)
