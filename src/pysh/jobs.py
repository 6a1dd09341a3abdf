"""Job registry: the shell's table of background processes.

When you run ``sleep 60 &``, the shell forks a process and records it
here as a *job*: a small slot number, the process id, and the program
name.  ``btasks`` (or ``jobs``) lists them, and ``exit`` refuses to
leave while any are still running.

Key ideas:
    - **Fixed capacity**: the table has a set number of slots
      (10 by default).  A slot is reused once its job is reaped.
    - **Lowest free slot**: a new job takes the first empty slot,
      so numbers stay small and predictable.
    - **Lazy reaping**: nothing tells the shell when a background
      process finishes.  Every registry operation starts with a
      *reap pass*: a non-blocking ``waitpid`` on each job.  A finished
      job keeps its slot until the next pass notices it.

Design choices:
    - ``JobRegistry`` is an explicit object owned by the shell, not a
      module-level table.
    - A job counts as running only while ``waitpid(pid, WNOHANG)``
      reports *no state change* (``(0, 0)``).  The exit status value
      itself is never used to decide liveness.
"""

import os
import sys
from dataclasses import dataclass
from typing import TextIO

from pysh.config import DEFAULT_JOB_CAPACITY
from pysh.logging import Logger, LogLevel

_SOURCE = "jobs"


@dataclass
class Job:
    """A background process tracked by the shell.

    Attributes:
        slot: Index in the job table, stable for the job's lifetime.
        pid: The launched process id.
        name: The program name (``argv[0]``) used for display.

    """

    slot: int
    pid: int
    name: str

    def __str__(self) -> str:
        """Format as the job-list line ``[slot] pid<TAB>name``."""
        return f"\t\t[{self.slot}] {self.pid}\t{self.name}"


class JobRegistry:
    """Fixed-capacity table mapping slots to live background jobs.

    Only the single shell thread mutates the table.  Reaping before
    inserting keeps the capacity invariant without any locking.
    """

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_JOB_CAPACITY,
        out: TextIO | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create an empty registry.

        Args:
            capacity: Number of job slots.
            out: Stream for job announcements (defaults to stdout).
            logger: Audit log for added and reaped jobs.

        Raises:
            ValueError: If *capacity* is less than 1.

        """
        if capacity < 1:
            msg = f"Job capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        self._slots: list[Job | None] = [None] * capacity
        self._out = out
        self._logger = logger if logger is not None else Logger()

    @property
    def logger(self) -> Logger:
        """Return the audit log job events go to."""
        return self._logger

    @property
    def capacity(self) -> int:
        """Return the number of slots in the table."""
        return len(self._slots)

    def __len__(self) -> int:
        """Return the number of occupied slots, without reaping."""
        return sum(1 for job in self._slots if job is not None)

    def add(self, *, pid: int, name: str) -> bool:
        """Record a new background job in the lowest free slot.

        A reap pass runs first so finished jobs free their slots.  On
        success the slot and pid are announced on the output stream.

        Args:
            pid: The process id of the launched job.
            name: The program name to display.

        Returns:
            True if the job was recorded, False if the table was full.

        """
        self.reap_all()
        slot = self._first_free_slot()
        if slot is None:
            self._logger.log(
                LogLevel.WARNING,
                f"job table full, {name} not tracked",
                source=_SOURCE,
                pid=pid,
            )
            return False

        self._slots[slot] = Job(slot=slot, pid=pid, name=str(name))
        self._logger.log(LogLevel.INFO, f"job [{slot}] {name} added", source=_SOURCE, pid=pid)
        out = self._out if self._out is not None else sys.stdout
        out.write(f"\t\t[{slot}] {pid}\n\n")
        out.flush()
        return True

    def list_jobs(self) -> list[Job]:
        """Reap, then return every live job in ascending slot order."""
        self.reap_all()
        return [job for job in self._slots if job is not None]

    def has_free_slot(self) -> bool:
        """Reap, then report whether a new job would fit."""
        self.reap_all()
        return self._first_free_slot() is not None

    def reap_all(self) -> int:
        """Check every job without blocking and clear the finished ones.

        Returns:
            The number of jobs still running after the pass.

        """
        running = 0
        for slot, job in enumerate(self._slots):
            if job is None:
                continue
            if self._is_running(job):
                running += 1
            else:
                self._slots[slot] = None
                self._logger.log(
                    LogLevel.INFO,
                    f"job [{slot}] {job.name} reaped",
                    source=_SOURCE,
                    pid=job.pid,
                )
        return running

    def _first_free_slot(self) -> int | None:
        """Return the lowest empty slot index, or None when full."""
        return next((i for i, job in enumerate(self._slots) if job is None), None)

    @staticmethod
    def _is_running(job: Job) -> bool:
        """Return True while the job's process has not changed state.

        ``waitpid`` with ``WNOHANG`` returns ``(0, 0)`` for a child that
        is still running, and collects it otherwise.  A pid that is no
        longer our child (``ECHILD``) is treated as gone.
        """
        try:
            pid, _status = os.waitpid(job.pid, os.WNOHANG)
        except ChildProcessError:
            return False
        return pid == 0
