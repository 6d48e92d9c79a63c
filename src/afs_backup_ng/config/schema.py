"""Configuration schema definitions using dataclasses.

Defines the structure for TOML configuration with sensible defaults.
Rule patterns are held compiled; the loader compiles them once.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..core.matcher import Rule
from ..core.policy import PolicyOrder, PolicyRule

MODE_TSM = "tsm"
MODE_VOSBACKUP = "vosbackup"
MODE_GENERIC = "generic"
MODE_TYPES = (MODE_TSM, MODE_VOSBACKUP, MODE_GENERIC)


@dataclass
class GlobalConfig:
    """Global configuration settings.

    Attributes:
        basepath: Cell root path, e.g. /afs/example.org (no trailing slash)
        state_dir: Root holding etc/ and var/ (AFSBACKUP)
        lockfile: Lock file guarding against concurrent runs
        timing: Report how long slow steps take
        pretend: Print backup commands instead of running them
        quiet: Suppress command output
        verbose: Enable verbose output
    """

    basepath: str = ""
    state_dir: str = ""
    lockfile: Optional[str] = None
    timing: bool = False
    pretend: bool = False
    quiet: bool = False
    verbose: bool = False


@dataclass
class InventoryConfig:
    """Location of the mount inventory files."""

    mounts_by_path: str = ""
    mounts_by_volume: str = ""


@dataclass
class CommandsConfig:
    """Command lines of the external tools."""

    vos: list[str] = field(default_factory=lambda: ["vos"])
    vosbackup: list[str] = field(default_factory=lambda: ["vos", "backup"])
    fs: list[str] = field(default_factory=lambda: ["fs"])
    dsmc: list[str] = field(default_factory=lambda: ["dsmc"])
    dumpvldb: list[str] = field(default_factory=lambda: ["dumpvldb.sh"])
    dumpacls: list[str] = field(default_factory=lambda: ["dumpacls.pl"])


@dataclass
class PolicyConfig:
    """Management class selection for TSM.

    Attributes:
        order: Which table is consulted first, the later one wins
        default: Management class when no rule matches
        path: Rules tested against the backup path
        volume: Rules tested against the volume name
    """

    order: PolicyOrder = PolicyOrder.PATH_VOLUME
    default: str = ""
    path: list[PolicyRule] = field(default_factory=list)
    volume: list[PolicyRule] = field(default_factory=list)


@dataclass
class ModeConfig:
    """One run mode (tsm, vosbackup or a generic command).

    Attributes:
        name: Mode name, also used for timestamp file names
        type: tsm, vosbackup or generic
        lastbackup: Skip volumes unchanged since their last backup
        path_rules: Selection rules matched against mount paths
        volume_rules: Selection rules matched against volume names
        dotbackup: Back up the .backup clone instead of the live volume (tsm)
        dsmc: Actually run dsmc incremental, otherwise just print it (tsm)
        dsmc_ok_codes: dsmc exit codes that count as success (tsm)
        dumpvldb: Dump the VLDB before backing up (tsm)
        dumpacls: Dump ACLs of every volume before backing up (tsm)
        dsmsys: dsm.sys file to generate (tsm)
        dsmopt: dsm.opt file to generate (tsm)
        tmp_mount_path: Where .backup clones get mounted (tsm)
        policy: Management class policy (tsm)
        command: Command template with {volume} and {path} (generic)
    """

    name: str
    type: str = MODE_GENERIC
    lastbackup: bool = False
    path_rules: list[Rule] = field(default_factory=list)
    volume_rules: list[Rule] = field(default_factory=list)
    dotbackup: bool = False
    dsmc: bool = True
    dsmc_ok_codes: list[int] = field(default_factory=lambda: [0])
    dumpvldb: bool = False
    dumpacls: bool = False
    dsmsys: str = "/opt/tivoli/tsm/client/ba/bin/dsm.sys"
    dsmopt: str = "/opt/tivoli/tsm/client/ba/bin/dsm.opt"
    tmp_mount_path: str = ""
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    command: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Root configuration object."""

    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    inventory: InventoryConfig = field(default_factory=InventoryConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)
    modes: dict[str, ModeConfig] = field(default_factory=dict)

    def get_mode(self, name: str) -> ModeConfig | None:
        """Get a configured mode by name."""
        return self.modes.get(name)
