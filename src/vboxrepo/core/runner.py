from __future__ import annotations

"""
External command execution.

Every package manager, gpg and dpkg invocation goes through CommandRunner so
that commands are logged in one place and a non-zero exit becomes a
PackageManagerError.
"""

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence

from vboxrepo.core.errors import PackageManagerError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs external commands with logging and error translation."""

    def __init__(self, env: Mapping[str, str] | None = None):
        """Initialize command runner.

        Args:
            env: Extra environment variables merged into os.environ for every command
        """
        self.extra_env = dict(env or {})

    def run(
        self,
        args: Sequence[str],
        *,
        check: bool = True,
        capture: bool = False,
        input: str | bytes | None = None,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess:
        """Run a command.

        Args:
            args: Command and arguments
            check: Raise PackageManagerError on non-zero exit
            capture: Capture stdout/stderr instead of inheriting the terminal
            input: Data written to stdin (bytes switch the pipe to binary mode)
            env: Extra environment variables for this command only

        Returns:
            Completed process

        Raises:
            PackageManagerError: If the command is missing, or exits non-zero with check=True
        """
        command = list(args)
        logger.info(f"Running: {' '.join(command)}")

        run_env = os.environ.copy()
        run_env.update(self.extra_env)
        if env:
            run_env.update(env)

        text = not isinstance(input, bytes)
        try:
            result = subprocess.run(
                command,
                input=input,
                capture_output=capture,
                text=text,
                env=run_env,
                stdin=None if input is not None else subprocess.DEVNULL,
            )
        except FileNotFoundError:
            raise PackageManagerError(command, None)

        if check and result.returncode != 0:
            stderr = result.stderr if capture and text else ""
            logger.error(f"Command failed ({result.returncode}): {' '.join(command)}")
            raise PackageManagerError(command, result.returncode, stderr or "")

        return result

    def output(self, args: Sequence[str], *, check: bool = True) -> str:
        """Run a command and return its stdout as text."""
        return self.run(args, check=check, capture=True).stdout or ""
