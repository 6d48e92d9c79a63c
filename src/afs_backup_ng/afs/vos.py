"""Volume queries and clones through the AFS ``vos`` command."""

import logging
import re

from ..__util__ import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


def parse_examine_date(output: str, field_name: str) -> int:
    """Extract an epoch date field from ``vos examine -format`` output.

    Returns:
        The epoch seconds, or 0 if the field is absent or not numeric
    """
    pattern = re.compile(rf"^\s*{re.escape(field_name)}\s+(\S+)", re.MULTILINE)
    match = pattern.search(output)
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        return 0


class VosClient:
    """Thin wrapper around vos for the few calls a run needs."""

    def __init__(
        self,
        runner: CommandRunner,
        vos: list[str] | None = None,
        vosbackup: list[str] | None = None,
    ) -> None:
        self.runner = runner
        self.vos = list(vos or ["vos"])
        self.vosbackup = list(vosbackup or self.vos + ["backup"])

    def examine(self, volume: str) -> str:
        return self.runner.capture(self.vos + ["examine", "-format", volume])

    def update_date(self, volume: str) -> int:
        """Last update time of volume (0 if unknown)."""
        return parse_examine_date(self.examine(volume), "updateDate")

    def backup_date(self, volume: str) -> int:
        """Time the .backup clone of volume was last made (0 if never)."""
        return parse_examine_date(self.examine(volume), "backupDate")

    def exists(self, volume: str) -> bool:
        return self.runner.run(self.vos + ["examine", volume], query=True).success

    def backup(self, volume: str) -> CommandResult:
        """Create or refresh the .backup clone of volume."""
        return self.runner.run(self.vosbackup + [volume])
