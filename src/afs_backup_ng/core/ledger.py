"""Parse the TSM filespace report into last incremental dates per volume.

``dsmc query filespace`` prints one line per filespace::

      #     Last Incr Date          Type    File Space Name
    ---     --------------          ----    ---------------
      1     02/15/2011 02:15:34     AFS     /afs/example.org/user/a/alice

Filespaces are mapped back to volumes through the mount inventory. A
volume may own several filespaces over time, the newest date counts.
Filespaces without a mount are reported as abandoned.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from ..inventory.models import MountInventory

logger = logging.getLogger(__name__)

NO_FILESPACES_MARKER = "No file spaces for node"

ENTRY_RE = re.compile(
    r"^\s*\d+\s+(\d+)/(\d+)/(\d+)\s+(\d+):(\d+):(\d+).*?(/\S+)\s*"
)
# Looks like an entry (index column followed by data) without matching it
ENTRY_PREFIX_RE = re.compile(r"^\s*\d+\s+\S")


@dataclass(frozen=True)
class LedgerWarning:
    """A report line that could not be used."""

    line_number: int
    line: str
    reason: str


@dataclass
class LedgerResult:
    """Last incremental dates reconstructed from the filespace report.

    Attributes:
        last_incremental: Newest last incremental date per volume (epoch)
        abandoned: Filespaces that no longer map to a mount point
        count: Number of report lines with the expected shape
        no_filespaces: The node has no filespaces registered at all
        warnings: Lines that looked like entries but could not be parsed
    """

    last_incremental: dict[str, int] = field(default_factory=dict)
    abandoned: dict[str, int] = field(default_factory=dict)
    count: int = 0
    no_filespaces: bool = False
    warnings: list[LedgerWarning] = field(default_factory=list)

    def last_backup(self, volume: str) -> int:
        """Last incremental date of volume, 0 if it was never backed up."""
        return self.last_incremental.get(volume, 0)


def _timestamp(month: int, day: int, year: int, hour: int, minute: int, sec: int) -> int:
    if year < 100:
        year += 2000
    return int(datetime(year, month, day, hour, minute, sec).timestamp())


def parse_filespace_report(text: str, inventory: MountInventory) -> LedgerResult:
    """Parse ``dsmc query filespace`` output.

    Args:
        text: Raw report text
        inventory: Current mount inventory

    Returns:
        LedgerResult; ``no_filespaces`` is set when the node has none, which
        is different from a report that yielded zero usable lines
    """
    result = LedgerResult()

    for lineno, line in enumerate(text.splitlines(), 1):
        if line.startswith(NO_FILESPACES_MARKER):
            result.no_filespaces = True
            return result

        match = ENTRY_RE.match(line)
        if not match:
            if ENTRY_PREFIX_RE.match(line):
                result.warnings.append(
                    LedgerWarning(lineno, line, "unrecognised filespace entry")
                )
            continue

        result.count += 1
        month, day, year, hour, minute, sec = (int(v) for v in match.groups()[:6])
        filespace = match.group(7)

        # never backed up
        if month == 0:
            continue

        try:
            last_incr = _timestamp(month, day, year, hour, minute, sec)
        except (ValueError, OverflowError, OSError) as e:
            result.warnings.append(LedgerWarning(lineno, line, f"bad date: {e}"))
            continue

        mount = inventory.by_path.get(filespace + "/") or inventory.lookup_path(filespace)
        if mount is None:
            previous = result.abandoned.get(filespace, 0)
            result.abandoned[filespace] = max(previous, last_incr)
            continue

        if last_incr > result.last_incremental.get(mount.volume, 0):
            result.last_incremental[mount.volume] = last_incr

    for warning in result.warnings:
        logger.warning(
            "Filespace report line %d: %s: %r",
            warning.line_number,
            warning.reason,
            warning.line,
        )
    return result
