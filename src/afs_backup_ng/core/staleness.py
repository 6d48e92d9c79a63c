"""Skip volumes that did not change since their last backup.

The last backup time comes from one of three places, depending on the run
mode: the TSM filespace report (tsm), the volume's own backupDate in the
VLDB (vosbackup) or a per-volume timestamp file (any other mode).

When a shadow copy (the ``.backup`` clone) is what actually gets backed up,
its update date is compared instead of the live volume's. Writes to the live
volume after the clone was made only show up with the next clone.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from .ledger import LedgerResult

logger = logging.getLogger(__name__)

TimeLookup = Callable[[str], int]


class StaleSourceUnavailable(Exception):
    """Staleness filtering was requested but its time source has no data."""

    pass


class TimestampFileSource:
    """Last backup times kept in ``<state_dir>/var/lastbackup/<volume>.<mode>``.

    The first line that is neither blank nor a '#' comment holds the epoch
    seconds of the last successful backup.
    """

    def __init__(self, state_dir: Path | str, mode: str) -> None:
        self.directory = Path(state_dir) / "var" / "lastbackup"
        self.mode = mode

    def path_for(self, volume: str) -> Path:
        return self.directory / f"{volume}.{self.mode}"

    def last_backup(self, volume: str) -> int:
        path = self.path_for(volume)
        try:
            with open(path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    return int(line)
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as e:
            logger.warning("Cannot read last backup time from %s: %s", path, e)
        return 0

    def record(self, volume: str, when: int | None = None) -> None:
        """Store the time of a successful backup of volume."""
        when = int(time.time()) if when is None else when
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(volume).write_text(f"{when}\n", encoding="utf-8")


def check_ledger_source(ledger: LedgerResult) -> bool:
    """Decide whether the filespace report can drive staleness filtering.

    Returns:
        True to filter, False to skip filtering (fresh node)

    Raises:
        StaleSourceUnavailable: The report held no last incremental dates
    """
    if ledger.no_filespaces:
        logger.warning(
            "lastbackup enabled, but no filespaces were found in TSM. "
            "Perhaps this is a fresh TSM node?"
        )
        return False
    if ledger.count == 0:
        raise StaleSourceUnavailable(
            "lastbackup enabled but no Last Incr Dates were returned from TSM"
        )
    return True


def filter_unchanged(
    volumes: Iterable[str],
    mod_time: TimeLookup,
    last_backup: TimeLookup,
    shadow_suffix: str | None = None,
) -> tuple[list[str], list[str]]:
    """Drop volumes not modified since their last backup.

    Args:
        volumes: Selected volume names
        mod_time: Returns a volume's last update time
        last_backup: Returns a volume's last backup time, 0 if never
        shadow_suffix: Check the update time of volume+suffix instead

    Returns:
        Tuple of (volumes to back up, unchanged volumes)
    """
    kept = []
    unchanged = []
    for volume in sorted(volumes):
        checked = f"{volume}{shadow_suffix}" if shadow_suffix else volume
        last = last_backup(volume) or 0
        current = mod_time(checked) or 0
        if not last or current > last:
            kept.append(volume)
        else:
            logger.debug(
                "Skipping unchanged volume %s (updated %d, backed up %d)",
                volume,
                current,
                last,
            )
            unchanged.append(volume)
    return kept, unchanged
