"""Interactive REPL (Read-Eval-Print Loop) for pysh.

The classic loop:

    1. **Read**: display the prompt and read a line.
    2. **Eval**: pass the line to ``shell.execute()``.
    3. **Print**: display any built-in output.
    4. **Loop**: repeat until the shell returns the exit sentinel.

The shell is fully testable on its own (it returns strings); this
module is the thin I/O wrapper that connects it to ``stdin``/``stdout``.
"""

import readline
import sys

from pysh.completer import Completer
from pysh.config import ShellConfig
from pysh.shell import Shell


def build_prompt(config: ShellConfig) -> str:
    """Return the prompt printed before each read."""
    return config.prompt


def run(config: ShellConfig | None = None) -> int:
    """Run the interactive loop until ``exit`` or end of input.

    - ``exit`` is refused while background jobs are running.
    - Ctrl+D leaves the loop even with live jobs, after a warning.
    - Ctrl+C at the prompt discards the line and prompts again; during
      a command it stops the command, not the shell.

    Returns:
        The process exit status (always 0).

    """
    config = config if config is not None else ShellConfig()
    shell = Shell(config=config)

    # Wire up tab completion via readline.
    completer = Completer(shell)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    prompt = build_prompt(config)
    while True:
        try:
            command = input(prompt)
        except EOFError:
            # Ctrl+D: the input is gone, so we cannot keep waiting for jobs.
            print()  # noqa: T201
            running = shell.live_jobs()
            if running:
                print(f"Leaving {running} background(s) process(es) running")  # noqa: T201
            break
        except KeyboardInterrupt:
            print()  # noqa: T201
            continue

        try:
            result = shell.execute(command)
        except KeyboardInterrupt:
            # Ctrl+C outside a foreground wait (e.g. in a built-in).
            print()  # noqa: T201
            continue
        if result == Shell.EXIT_SENTINEL:
            break
        if result:
            print(result)  # noqa: T201

    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``pysh`` console script.

    The shell takes no command-line arguments.
    """
    args = sys.argv[1:] if argv is None else argv
    if args:
        print("Usage: pysh", file=sys.stderr)  # noqa: T201
        return 1
    return run(ShellConfig.from_environ())


if __name__ == "__main__":
    sys.exit(main())
