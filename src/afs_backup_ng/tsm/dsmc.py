"""TSM backup-archive client calls."""

import logging
from pathlib import Path

from ..__util__ import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


def rotate_log(path: Path) -> None:
    """Move path to path.last, replacing an older one."""
    if path.exists():
        path.replace(path.with_name(path.name + ".last"))


class DsmcClient:
    """Wrapper around dsmc."""

    def __init__(self, runner: CommandRunner, dsmc: list[str] | None = None) -> None:
        self.runner = runner
        self.dsmc = list(dsmc or ["dsmc"])

    def query_filespace(self) -> str:
        """Return the raw ``dsmc query filespace`` report."""
        return self.runner.capture(self.dsmc + ["query", "filespace"])

    def incremental_args(self, path: str, snapshot_root: str | None = None) -> list[str]:
        args = self.dsmc + ["incremental", path]
        if snapshot_root:
            args.append(f"-snapshotroot={snapshot_root}")
        return args

    def incremental(
        self,
        path: str,
        snapshot_root: str | None = None,
        log_file: Path | None = None,
    ) -> CommandResult:
        """Run an incremental backup of path.

        dsmc exit codes are unreliable (warnings yield non-zero), callers
        should not treat a failure here as fatal.
        """
        return self.runner.run(self.incremental_args(path, snapshot_root), log_file=log_file)
