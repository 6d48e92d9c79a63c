"""Shared state and reporting for the run modes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..__util__ import CommandRunner
from ..afs import FsClient, VosClient
from ..config import Config, ModeConfig
from ..core import PlanResult
from ..inventory import MountInventory

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Everything a mode needs for one run."""

    config: Config
    mode: ModeConfig
    inventory: MountInventory
    runner: CommandRunner
    host: str
    vos: VosClient = field(init=False)
    fs: FsClient = field(init=False)

    def __post_init__(self) -> None:
        commands = self.config.commands
        self.vos = VosClient(self.runner, commands.vos, commands.vosbackup)
        self.fs = FsClient(self.runner, commands.fs)

    @property
    def state_dir(self) -> Path:
        return Path(self.config.global_config.state_dir)

    @property
    def timing(self) -> bool:
        return self.config.global_config.timing

    def var_dir(self, name: str) -> Path:
        """Return (and create) a directory below <state_dir>/var."""
        path = self.state_dir / "var" / name
        path.mkdir(parents=True, exist_ok=True)
        return path


def format_time(epoch: int) -> str:
    return datetime.fromtimestamp(epoch).strftime("%Y-%m-%d %H:%M:%S")


def print_plan(result: PlanResult, inventory: MountInventory, with_class: bool = True) -> None:
    """Print the volumes selected for backup and the totals."""
    print("")
    print("=== Paths/mountpoints to backup ===")
    print("PATH | VOLUME | MGMTCLASS" if with_class else "PATH | VOLUME")
    for entry in result.plan:
        if with_class:
            print(f"{entry.path} | {entry.volume} | {entry.management_class}")
        else:
            print(f"{entry.path} | {entry.volume}")
    print(
        f"TOTAL: {len(result.plan)} volumes selected out of "
        f"{result.candidates} candidate volumes."
    )
    print(f"There are {len(inventory.by_volume)} volumes total mounted within the cell.")
    if result.excluded:
        logger.info("Explicitly excluded: %s", ", ".join(result.excluded))
    if result.unchanged:
        logger.info("%d volume(s) unchanged since their last backup", len(result.unchanged))
    if result.unselectable:
        logger.warning(
            "No normal mount point for: %s", ", ".join(result.unselectable)
        )
    print("")


def print_abandoned(result: PlanResult) -> None:
    """Report TSM filespaces that no longer belong to a mount point."""
    if not result.abandoned_filespaces:
        return
    print("Filespaces in TSM which are no longer listed as AFS mountpoints:")
    print("FILESPACE | LAST_INCR_DATE")
    for filespace in sorted(result.abandoned_filespaces):
        print(f"{filespace} | {format_time(result.abandoned_filespaces[filespace])}")
    print("")
