"""TOML configuration loading and validation.

Handles config file discovery, parsing, and validation with helpful error messages.
"""

import os
import shlex
import tomllib
from pathlib import Path
from typing import Any

from .. import short_hostname
from ..core.matcher import RulePatternError, compile_rules
from ..core.policy import compile_policy_table, parse_policy_order
from .schema import (
    MODE_GENERIC,
    MODE_TSM,
    MODE_TYPES,
    MODE_VOSBACKUP,
    CommandsConfig,
    Config,
    GlobalConfig,
    InventoryConfig,
    ModeConfig,
    PolicyConfig,
)


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


DEFAULT_STATE_DIR = "/var/lib/afs-backup-ng"


def state_dir_from_env() -> Path | None:
    """Return $AFSBACKUP, which must be absolute when set."""
    value = os.environ.get("AFSBACKUP", "")
    if not value:
        return None
    path = Path(value)
    if not path.is_absolute():
        raise ConfigError(f"AFSBACKUP should really be an absolute path: {value}")
    return path


def config_search_paths(hostname: str | None = None) -> list[Path]:
    """Config file search paths in priority order."""
    paths = []
    state_dir = state_dir_from_env()
    if state_dir is not None:
        paths.append(
            state_dir / "etc" / "hosts" / short_hostname(hostname) / "config.toml"
        )
    paths.append(Path.home() / ".config" / "afs-backup-ng" / "config.toml")
    paths.append(Path("/etc/afs-backup-ng/config.toml"))
    return paths


def find_config_file(
    explicit_path: str | None = None, hostname: str | None = None
) -> Path | None:
    """Find configuration file.

    Args:
        explicit_path: Explicitly specified config path (highest priority)
        hostname: Host whose per-host config to look for

    Returns:
        Path to config file, or None if not found
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for path in config_search_paths(hostname):
        if path.exists():
            return path

    return None


def find_defaults_file() -> Path | None:
    """Return $AFSBACKUP/etc/default.toml if there is one."""
    state_dir = state_dir_from_env()
    if state_dir is None:
        return None
    path = state_dir / "etc" / "default.toml"
    return path if path.exists() else None


def merge_config_data(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge override into base. Tables merge, everything else replaces."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config_data(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")


def _parse_argv(value: Any, key: str) -> list[str]:
    """Accept a command as a list of arguments or a shell-like string."""
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings")


def _parse_exit_codes(value: Any, key: str) -> list[int]:
    if isinstance(value, list) and all(
        isinstance(v, int) and not isinstance(v, bool) for v in value
    ):
        return list(value)
    raise ConfigError(f"'{key}' must be a list of integers")


def _parse_global(data: dict[str, Any]) -> GlobalConfig:
    """Parse global configuration from dict."""
    state_dir = data.get("state_dir") or str(state_dir_from_env() or DEFAULT_STATE_DIR)
    basepath = str(data.get("basepath", ""))
    if len(basepath) > 1:
        basepath = basepath.rstrip("/")

    return GlobalConfig(
        basepath=basepath,
        state_dir=state_dir,
        lockfile=data.get("lockfile"),
        timing=data.get("timing", False),
        pretend=data.get("pretend", False),
        quiet=data.get("quiet", False),
        verbose=data.get("verbose", False),
    )


def _parse_inventory(data: dict[str, Any], global_config: GlobalConfig) -> InventoryConfig:
    """Parse inventory file locations, defaulting below the state dir."""
    mounts_dir = Path(global_config.state_dir) / "var" / "mounts"
    return InventoryConfig(
        mounts_by_path=data.get("mounts_by_path", str(mounts_dir / "mounts-by-path")),
        mounts_by_volume=data.get(
            "mounts_by_volume", str(mounts_dir / "mounts-by-volume")
        ),
    )


def _parse_commands(data: dict[str, Any]) -> CommandsConfig:
    """Parse external command lines from dict."""
    commands = CommandsConfig()
    for name, value in data.items():
        if not hasattr(commands, name):
            raise ConfigError(f"Unknown command 'commands.{name}'")
        setattr(commands, name, _parse_argv(value, f"commands.{name}"))
    return commands


def _parse_policy(data: dict[str, Any], prefix: str) -> PolicyConfig:
    """Parse a tsm mode's management class policy."""
    if "order" not in data:
        raise ConfigError(f"'{prefix}.order' is required")
    try:
        order = parse_policy_order(data["order"])
    except ValueError as e:
        raise ConfigError(f"Syntax error in '{prefix}.order': {e}")

    tables = {}
    for table in ("path", "volume"):
        value = data.get(table, {})
        if not isinstance(value, dict):
            raise ConfigError(f"'{prefix}.{table}' must be a table of pattern = class")
        tables[table] = compile_policy_table(value, f"{prefix}.{table}")

    return PolicyConfig(
        order=order,
        default=str(data.get("default", "")),
        path=tables["path"],
        volume=tables["volume"],
    )


def _parse_mode(name: str, data: dict[str, Any]) -> ModeConfig:
    """Parse one [modes.<name>] table."""
    prefix = f"modes.{name}"
    mode_type = data.get("type", name if name in MODE_TYPES else MODE_GENERIC)
    if mode_type not in MODE_TYPES:
        raise ConfigError(
            f"Invalid '{prefix}.type': {mode_type!r}. Must be one of: "
            f"{', '.join(MODE_TYPES)}"
        )

    backup = data.get("backup", {})
    for key in ("path", "volume"):
        if not isinstance(backup.get(key, []), list):
            raise ConfigError(f"'{prefix}.backup.{key}' must be a list of patterns")

    mode = ModeConfig(
        name=name,
        type=mode_type,
        # vosbackup only makes new clones of changed volumes unless told otherwise
        lastbackup=data.get("lastbackup", mode_type == MODE_VOSBACKUP),
        path_rules=compile_rules(backup.get("path", []), f"{prefix}.backup.path"),
        volume_rules=compile_rules(backup.get("volume", []), f"{prefix}.backup.volume"),
    )

    if mode_type == MODE_TSM:
        mode.dotbackup = data.get("dotbackup", False)
        mode.dsmc = data.get("dsmc", True)
        if "dsmc_ok_codes" in data:
            mode.dsmc_ok_codes = _parse_exit_codes(
                data["dsmc_ok_codes"], f"{prefix}.dsmc_ok_codes"
            )
        mode.dumpvldb = data.get("dumpvldb", False)
        mode.dumpacls = data.get("dumpacls", False)
        mode.dsmsys = data.get("dsmsys", mode.dsmsys)
        mode.dsmopt = data.get("dsmopt", mode.dsmopt)
        mode.tmp_mount_path = str(data.get("tmp_mount_path", "")).rstrip("/")
        if mode.dotbackup and not mode.tmp_mount_path:
            raise ConfigError(f"'{prefix}.tmp_mount_path' is required with dotbackup")
        mode.policy = _parse_policy(data.get("policy", {}), f"{prefix}.policy")
    elif mode_type == MODE_GENERIC and "command" in data:
        mode.command = _parse_argv(data["command"], f"{prefix}.command")

    return mode


def _validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    if not config.modes:
        warnings.append("No modes configured")

    if not config.global_config.basepath:
        warnings.append("No 'global.basepath' configured")

    for name, mode in config.modes.items():
        if not mode.path_rules and not mode.volume_rules:
            warnings.append(f"Mode '{name}' has no backup rules, nothing will be selected")
        if mode.type == MODE_GENERIC and not mode.command:
            warnings.append(f"Mode '{name}' has no command configured")
        if mode.type == MODE_TSM and not mode.policy.default:
            warnings.append(f"Mode '{name}' has no default management class")

    return warnings


def load_config(
    path: Path | str, defaults_path: Path | str | None = None
) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file
        defaults_path: Optional file whose settings apply unless overridden

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)
    data = _read_toml(path)
    if defaults_path is not None:
        data = merge_config_data(_read_toml(Path(defaults_path)), data)

    global_config = _parse_global(data.get("global", {}))

    try:
        modes = {
            name: _parse_mode(name, mode_data)
            for name, mode_data in data.get("modes", {}).items()
        }
    except RulePatternError as e:
        raise ConfigError(f"{path}: {e}")

    config = Config(
        global_config=global_config,
        inventory=_parse_inventory(data.get("inventory", {}), global_config),
        commands=_parse_commands(data.get("commands", {})),
        modes=modes,
    )

    # Validate and collect warnings
    warnings = _validate_config(config)

    return config, warnings


def generate_example_config() -> str:
    """Generate example configuration file content."""
    return """# afs-backup-ng configuration
# See documentation for full options

[global]
basepath = "/afs/example.org"
# state_dir = "/var/lib/afs-backup-ng"   # defaults to $AFSBACKUP
lockfile = "/var/lock/afs-backup-ng.lock"
timing = false

[inventory]
# mounts_by_path = "/var/lib/afs-backup-ng/var/mounts/mounts-by-path"
# mounts_by_volume = "/var/lib/afs-backup-ng/var/mounts/mounts-by-volume"

[commands]
vosbackup = ["vos", "backup", "-localauth"]

# Incremental file backup into TSM
[modes.tsm]
lastbackup = true
dotbackup = true
tmp_mount_path = "/afs/example.org/.backup-tmp"
dumpacls = false
# dsmc exit codes counted as success (4: files skipped, 8: warnings)
# dsmc_ok_codes = [0, 4, 8]

[modes.tsm.backup]
path = ["^/afs/example.org/user/", "!/scratch"]
volume = ["^proj\\\\.", "!\\\\.readonly$"]

[modes.tsm.policy]
order = "path volume"   # the later table wins
default = "STANDARD"

[modes.tsm.policy.path]
"^/afs/example.org/user/" = "USERS"

[modes.tsm.policy.volume]
"^proj\\\\.archive" = "ARCHIVE"

# Nightly .backup clones
[modes.vosbackup.backup]
volume = ["."]

# Any other mode runs a command per volume and keeps its own timestamps
# [modes.rsync]
# lastbackup = true
# command = ["rsync", "-a", "{path}/", "/backup/{volume}/"]
#
# [modes.rsync.backup]
# path = ["^/afs/example.org/proj/"]
"""
