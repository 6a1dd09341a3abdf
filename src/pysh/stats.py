"""Execution statistics for foreground commands.

After a foreground command finishes, the intermediate process that
waited for it prints a fixed block of metrics: wall-clock time, CPU
time, context switches, and page faults.

The resource numbers come from ``getrusage(RUSAGE_CHILDREN)``, which
reports what the calling process's *terminated, waited-for children*
consumed.  Because the intermediate process has exactly one child,
that is exactly the command's usage.

Formatting is a pure function (``format_statistics``) so it can be
tested without forking; ``StatisticsReporter.render`` only adds the
``getrusage`` call and the write.
"""

import resource
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

_USEC_PER_SEC = 1_000_000
_NSEC_PER_USEC = 1_000
_RULE = "-" * 40


@dataclass(frozen=True)
class ExecutionOutcome:
    """Timestamps and exit status of one foreground run.

    Attributes:
        start_ns: Monotonic clock reading taken before the fork.
        end_ns: Monotonic clock reading taken after the wait returned.
        status: Exit code of the command (``128 + N`` for death by signal N).

    """

    start_ns: int
    end_ns: int
    status: int = 0

    @property
    def wall_clock_us(self) -> int:
        """Return the elapsed wall-clock time in microseconds."""
        return (self.end_ns - self.start_ns) // _NSEC_PER_USEC


@dataclass(frozen=True)
class ChildUsage:
    """Resource usage accumulated by terminated children.

    Attributes:
        cpu_time_us: User plus system CPU time, in microseconds.
        voluntary_switches: Context switches the child gave up.
        involuntary_switches: Context switches forced by preemption.
        major_faults: Page faults that needed I/O.
        minor_faults: Page faults satisfied from the page cache.

    """

    cpu_time_us: int
    voluntary_switches: int
    involuntary_switches: int
    major_faults: int
    minor_faults: int

    @classmethod
    def collect(cls) -> "ChildUsage":
        """Read ``RUSAGE_CHILDREN`` for the calling process."""
        usage = resource.getrusage(resource.RUSAGE_CHILDREN)
        return cls(
            cpu_time_us=round((usage.ru_utime + usage.ru_stime) * _USEC_PER_SEC),
            voluntary_switches=usage.ru_nvcsw,
            involuntary_switches=usage.ru_nivcsw,
            major_faults=usage.ru_majflt,
            minor_faults=usage.ru_minflt,
        )


def format_statistics(outcome: ExecutionOutcome, usage: ChildUsage) -> str:
    """Render the statistics block for one foreground run.

    The unit label reads ``ms`` although the values are microseconds;
    the text is kept as users and scripts already know it.
    """
    lines = [
        "",
        _RULE,
        "Statistics",
        _RULE,
        f"\tWall-clock time: {outcome.wall_clock_us} ms",
        f"\tCPU time used (user and Kernel): {usage.cpu_time_us} ms",
        f"\tVoluntary context switches: {usage.voluntary_switches}",
        f"\tInvoluntary context switches: {usage.involuntary_switches}",
        f"\tPage faults: {usage.major_faults}",
        f"\tPage faults satisfied by cache read: {usage.minor_faults}",
    ]
    return "\n".join(lines) + "\n"


class StatisticsReporter:
    """Print the statistics block after a foreground command."""

    def __init__(
        self,
        *,
        out: TextIO | None = None,
        usage_source: Callable[[], ChildUsage] = ChildUsage.collect,
    ) -> None:
        """Create a reporter.

        Args:
            out: Destination stream (defaults to stdout at render time).
            usage_source: Callable returning the children's usage.

        """
        self._out = out
        self._usage_source = usage_source

    def render(self, outcome: ExecutionOutcome) -> None:
        """Write the statistics block for *outcome*."""
        out = self._out if self._out is not None else sys.stdout
        out.write(format_statistics(outcome, self._usage_source()))
        out.flush()
