"""Tests for shell configuration."""

import pytest

from pysh.config import DEFAULT_JOB_CAPACITY, DEFAULT_PROMPT, ShellConfig


class TestShellConfig:
    """Verify defaults and validation."""

    def test_defaults(self) -> None:
        """The defaults should be ten jobs and the ``$>`` prompt."""
        config = ShellConfig()
        assert config.job_capacity == DEFAULT_JOB_CAPACITY == 10
        assert config.prompt == DEFAULT_PROMPT == "$>"

    def test_rejects_zero_capacity(self) -> None:
        """A capacity below one should be refused."""
        with pytest.raises(ValueError, match="at least 1"):
            ShellConfig(job_capacity=0)


class TestFromEnviron:
    """Verify reading PYSH_* variables."""

    def test_empty_environ_gives_defaults(self) -> None:
        """No variables should mean default settings."""
        assert ShellConfig.from_environ({}) == ShellConfig()

    def test_reads_capacity_and_prompt(self) -> None:
        """Both variables should be honoured."""
        config = ShellConfig.from_environ({"PYSH_JOB_CAPACITY": "4", "PYSH_PROMPT": "% "})
        expected = 4
        assert config.job_capacity == expected
        assert config.prompt == "% "

    def test_non_integer_capacity(self) -> None:
        """A non-numeric capacity should raise ValueError."""
        with pytest.raises(ValueError, match="must be an integer"):
            ShellConfig.from_environ({"PYSH_JOB_CAPACITY": "lots"})

    def test_negative_capacity(self) -> None:
        """A negative capacity should fail validation."""
        with pytest.raises(ValueError, match="at least 1"):
            ShellConfig.from_environ({"PYSH_JOB_CAPACITY": "-1"})

    def test_defaults_to_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an argument the process environment is read."""
        monkeypatch.setenv("PYSH_PROMPT", "pysh> ")
        monkeypatch.delenv("PYSH_JOB_CAPACITY", raising=False)
        assert ShellConfig.from_environ().prompt == "pysh> "
