"""Shell configuration: the few knobs the interpreter exposes.

The configuration is deliberately tiny: how many background jobs the
shell tracks at once, and the prompt it prints before each read.

Values come from keyword arguments or from the process environment
(``PYSH_JOB_CAPACITY``, ``PYSH_PROMPT``).  Like a Unix environment
block, the mapping handed to ``from_environ`` is read, never kept.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_JOB_CAPACITY = 10
DEFAULT_PROMPT = "$>"

_CAPACITY_VAR = "PYSH_JOB_CAPACITY"
_PROMPT_VAR = "PYSH_PROMPT"


@dataclass(frozen=True)
class ShellConfig:
    """Immutable shell settings.

    Attributes:
        job_capacity: Maximum number of live background jobs.
        prompt: Text printed before each command is read.

    """

    job_capacity: int = DEFAULT_JOB_CAPACITY
    prompt: str = DEFAULT_PROMPT

    def __post_init__(self) -> None:
        """Reject a capacity that could never hold a job."""
        if self.job_capacity < 1:
            msg = f"Job capacity must be at least 1, got {self.job_capacity}"
            raise ValueError(msg)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "ShellConfig":
        """Build a config from ``PYSH_*`` environment variables.

        Args:
            environ: Variables to read (defaults to ``os.environ``).

        Raises:
            ValueError: If ``PYSH_JOB_CAPACITY`` is not a positive integer.

        """
        env = os.environ if environ is None else environ

        capacity = DEFAULT_JOB_CAPACITY
        raw = env.get(_CAPACITY_VAR)
        if raw is not None:
            try:
                capacity = int(raw)
            except ValueError:
                msg = f"{_CAPACITY_VAR} must be an integer, got {raw!r}"
                raise ValueError(msg) from None

        return cls(job_capacity=capacity, prompt=env.get(_PROMPT_VAR, DEFAULT_PROMPT))
