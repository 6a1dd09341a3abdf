"""Shell audit log.

The logger records structured entries for the events the shell cares
about: jobs added and reaped, launches that failed, foreground exit
codes, and built-in errors.  It is an in-memory buffer, shown to the
user by the ``log`` built-in, which can narrow it by level, source or
process id (``log warning``, ``log jobs``, ``log 4242``).

- **LogLevel**: severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry**: a single structured record (level, message, source, pid).
- **Logger**: an append-only log with filtering.

Only the shell process writes here.  Forked children have their own
copy of the buffer, which dies with them, so they report failures on
stderr instead.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries, ordered for minimum-level filters."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @classmethod
    def from_name(cls, name: str) -> "LogLevel | None":
        """Return the level called *name* (any case), or None."""
        return cls.__members__.get(name.upper())


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "jobs").
        pid: The process the event concerns, if any.

    """

    level: LogLevel
    message: str
    source: str
    pid: int | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``, tagging the pid if known."""
        origin = self.source if self.pid is None else f"{self.source}[{self.pid}]"
        return f"[{self.level.name}] {origin}: {self.message}"

    def matches(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        pid: int | None = None,
    ) -> bool:
        """Return True if this entry passes every criterion that is set."""
        if min_level is not None and self.level < min_level:
            return False
        if source is not None and self.source != source:
            return False
        return pid is None or self.pid == pid


class Logger:
    """Append-only log of shell events."""

    def __init__(self) -> None:
        """Create an empty logger."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of all entries, oldest first."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        pid: int | None = None,
    ) -> None:
        """Record one event.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.
            pid: Process the event concerns (job or foreground command).

        """
        self._entries.append(LogEntry(level=level, message=message, source=source, pid=pid))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        pid: int | None = None,
    ) -> list[LogEntry]:
        """Return the entries that pass every criterion that is set.

        Args:
            min_level: Keep entries at or above this level.
            source: Keep entries from this component.
            pid: Keep entries about this process.

        """
        return [
            entry
            for entry in self._entries
            if entry.matches(min_level=min_level, source=source, pid=pid)
        ]
