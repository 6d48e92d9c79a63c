# pyright: standard

"""afs-backup-ng: afs_backup_ng/__util__.py
Common utility code shared among modules.
"""

import contextlib
import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Steps shorter than this are not worth a timing line at INFO level
TIMING_THRESHOLD = 5


class AbortError(Exception):
    """Exception where run was aborted."""


def log_heading(caption: str) -> str:
    """Formatted heading for logging output sections."""
    return f"--[ {caption} ]--"


@contextlib.contextmanager
def timed(label: str, enabled: bool = False):
    """Log how long the wrapped step took.

    With ``enabled`` (the ``timing`` config option) slow steps are reported
    at INFO, otherwise the duration only shows up in debug output.
    """
    start = time.monotonic()
    logger.debug("%s ...", label)
    try:
        yield
    finally:
        delta = time.monotonic() - start
        if enabled and delta > TIMING_THRESHOLD:
            logger.info("%s (%d s)", label, delta)
        else:
            logger.debug("%s done in %.2f s", label, delta)


@dataclass
class CommandResult:
    """Outcome of an external command."""

    argv: list[str]
    success: bool
    output: str = ""
    returncode: int = 0


class CommandRunner:
    """Run external commands, honouring pretend and quiet modes.

    stderr is always merged into stdout; the captured text comes back on the
    CommandResult so callers can parse it.
    """

    def __init__(self, pretend: bool = False, quiet: bool = False) -> None:
        self.pretend = pretend
        self.quiet = quiet

    def run(
        self,
        argv: list[str],
        log_file: Path | str | None = None,
        output_file: Path | str | None = None,
        query: bool = False,
    ) -> CommandResult:
        """Execute argv and return its result.

        Args:
            argv: Command and arguments
            log_file: Append the command output to this file
            output_file: Write the command output to this file (truncating)
            query: Read-only query, executed even in pretend mode

        Returns:
            CommandResult with success flag and captured output
        """
        argv = [str(a) for a in argv]
        cmd_str = shlex.join(argv)

        if self.pretend and not query:
            logger.info("[cmd] %s", cmd_str)
            return CommandResult(argv, True)

        logger.debug("Executing: %s", cmd_str)
        try:
            proc = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            logger.error("Cannot exec %s: %s", argv[0], e)
            return CommandResult(argv, False, str(e), 127)

        output = proc.stdout or ""
        if output and not self.quiet and not query:
            for line in output.splitlines():
                logger.info("%s", line)

        if log_file is not None:
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(output)
        if output_file is not None:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(output)

        if proc.returncode != 0:
            logger.debug("%s exited with %d", argv[0], proc.returncode)
        return CommandResult(argv, proc.returncode == 0, output, proc.returncode)

    def capture(self, argv: list[str]) -> str:
        """Run a read-only query and return its output, failures included."""
        return self.run(argv, query=True).output
