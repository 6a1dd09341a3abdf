"""pysh: an interactive shell with background jobs and run statistics.

Re-exports public symbols so callers can write::

    from pysh import CommandExecutor, JobRegistry, Shell
"""

from pysh.cd import DirectoryChangeError, DirectoryError, change_directory
from pysh.config import ShellConfig
from pysh.executor import (
    CommandExecutor,
    ExecutionError,
    LaunchError,
    SpawnError,
)
from pysh.jobs import Job, JobRegistry
from pysh.logging import LogEntry, Logger, LogLevel
from pysh.shell import Shell, tokenize
from pysh.stats import (
    ChildUsage,
    ExecutionOutcome,
    StatisticsReporter,
    format_statistics,
)

__all__ = [
    "ChildUsage",
    "CommandExecutor",
    "DirectoryChangeError",
    "DirectoryError",
    "ExecutionError",
    "ExecutionOutcome",
    "Job",
    "JobRegistry",
    "LaunchError",
    "LogEntry",
    "LogLevel",
    "Logger",
    "Shell",
    "ShellConfig",
    "SpawnError",
    "StatisticsReporter",
    "change_directory",
    "format_statistics",
    "tokenize",
]
