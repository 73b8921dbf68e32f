"""Default subprocess capability for driving the git client."""

import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .exceptions import CommandError

logger = logging.getLogger(__name__)

# Never block on an interactive credential prompt
_DEFAULT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


class SubprocessRunner:
    """Run external programs with subprocess (implements CommandRunner).

    Output is decoded as UTF-8 and undecodable bytes become U+FFFD. A
    non-zero exit, or a program that cannot be started, raises CommandError
    with the program, arguments, working directory, return code and stderr
    lines in its context.
    """

    def __init__(self, env: dict[str, str] | None = None):
        """Initialize runner.

        Args:
            env: Extra environment variables merged over os.environ
        """
        self.env = {**_DEFAULT_ENV, **(env or {})}

    def run(self, program: str, args: Sequence[str], *, cwd: Path | None = None) -> None:
        self._execute(program, args, cwd)

    def run_capture(self, program: str, args: Sequence[str], *, cwd: Path | None = None) -> list[str]:
        return self._execute(program, args, cwd).stdout.splitlines()

    def _execute(self, program: str, args: Sequence[str], cwd: Path | None) -> subprocess.CompletedProcess[str]:
        argv = [program, *(str(arg) for arg in args)]
        context = {"program": program, "args": argv[1:], "cwd": str(cwd) if cwd else None}
        logger.debug(f"Running {' '.join(argv)} (cwd={cwd})")

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                env={**os.environ, **self.env},
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise CommandError(f"Failed to run {program}: {e}", context=context) from e

        if result.returncode != 0:
            stderr = result.stderr.splitlines()
            raise CommandError(
                f"{program} exited with status {result.returncode}: {result.stderr.strip()[:500]}",
                context={**context, "returncode": result.returncode, "stderr": stderr},
            )
        return result
