"""Run command: back up the volumes a mode selects."""

import argparse
import logging
import time

from filelock import FileLock, Timeout

from .. import __util__, short_hostname
from ..__logger__ import create_logger
from ..config import (
    Config,
    ConfigError,
    ModeConfig,
    find_config_file,
    find_defaults_file,
    load_config,
)
from ..core import StaleSourceUnavailable
from ..inventory import InventoryError, MountInventory, read_inventory
from ..modes import RUNNERS, RunContext
from .common import get_log_level

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 20


def load_mode_config(args: argparse.Namespace) -> tuple[Config, ModeConfig] | None:
    """Find and load the configuration and look up the requested mode.

    Errors are logged; None means the command should exit with 1.
    """
    try:
        config_path = find_config_file(
            getattr(args, "config", None), getattr(args, "force_hostname", None)
        )
        if config_path is None:
            print("No configuration file found.")
            print("Create one with: afs-backup-ng config init")
            return None

        defaults_path = getattr(args, "defaults", None) or find_defaults_file()
        logger.info("Loading configuration from: %s", config_path)
        config, warnings = load_config(config_path, defaults_path)

        for warning in warnings:
            logger.warning("Config: %s", warning)

    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return None

    if config.global_config.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    mode = config.get_mode(args.mode)
    if mode is None:
        logger.error("Invalid mode: %s", args.mode)
        return None

    return config, mode


def load_inventory(config: Config) -> MountInventory | None:
    """Read the mount inventory, logging the reason on failure."""
    try:
        with __util__.timed("Fetching mounts", config.global_config.timing):
            inventory = read_inventory(
                config.inventory.mounts_by_path, config.inventory.mounts_by_volume
            )
    except InventoryError as e:
        logger.error("%s. This is bad.", e)
        return None

    logger.info(
        "%d mount points of %d volumes", len(inventory.by_path), len(inventory.by_volume)
    )
    for volume in sorted(inventory.by_volume):
        mounts = inventory.by_volume[volume]
        logger.debug("%s (%s) = %s", volume, mounts.cell, ", ".join(sorted(mounts.paths)))
    return inventory


def _run_mode(config: Config, mode: ModeConfig, args: argparse.Namespace) -> int:
    inventory = load_inventory(config)
    if inventory is None:
        return 1

    runner = __util__.CommandRunner(
        pretend=getattr(args, "pretend", False) or config.global_config.pretend,
        quiet=config.global_config.quiet,
    )
    ctx = RunContext(
        config=config,
        mode=mode,
        inventory=inventory,
        runner=runner,
        host=short_hostname(getattr(args, "force_hostname", None)),
    )

    logger.info(__util__.log_heading(mode.name))
    try:
        return RUNNERS[mode.type](ctx)
    except StaleSourceUnavailable as e:
        logger.error("%s. Exiting", e)
        return 1
    except __util__.AbortError as e:
        logger.error("Aborted: %s", e)
        return 1


def execute_run(args: argparse.Namespace) -> int:
    """Execute the run command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    # Initialize logger
    log_level = get_log_level(args)
    create_logger(log_level)

    loaded = load_mode_config(args)
    if loaded is None:
        return 1
    config, mode = loaded

    lockfile = config.global_config.lockfile
    if not lockfile:
        logger.error("'lockfile' not defined in config.")
        return 1

    started = time.time()
    logger.info("Obtaining lock %s ...", lockfile)
    try:
        with FileLock(lockfile, timeout=LOCK_TIMEOUT):
            status = _run_mode(config, mode, args)
    except Timeout:
        logger.error("Could not lock %s", lockfile)
        return 1

    if config.global_config.timing:
        logger.info("Execution time: %d s", time.time() - started)
    logger.info("%s returned %d", mode.name, status)
    return status
