"""Plan command: show what a mode would back up."""

import argparse
import logging

from .. import __util__, short_hostname
from ..__logger__ import create_logger
from ..config import MODE_TSM
from ..core import StaleSourceUnavailable
from ..modes import PLANNERS, RunContext, print_abandoned, print_plan
from .common import get_log_level
from .run import load_inventory, load_mode_config

logger = logging.getLogger(__name__)


def execute_plan(args: argparse.Namespace) -> int:
    """Execute the plan command.

    Queries (vos examine, dsmc query filespace) still run, nothing is
    backed up and no file is written.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    log_level = get_log_level(args)
    create_logger(log_level)

    loaded = load_mode_config(args)
    if loaded is None:
        return 1
    config, mode = loaded

    inventory = load_inventory(config)
    if inventory is None:
        return 1

    ctx = RunContext(
        config=config,
        mode=mode,
        inventory=inventory,
        runner=__util__.CommandRunner(pretend=True, quiet=True),
        host=short_hostname(getattr(args, "force_hostname", None)),
    )

    try:
        result = PLANNERS[mode.type](ctx)
    except StaleSourceUnavailable as e:
        logger.error("%s", e)
        return 1

    print_plan(result, inventory, with_class=mode.type == MODE_TSM)
    if result.excluded:
        print("Explicitly excluded volumes:")
        for volume in result.excluded:
            print(f"  {volume}")
        print("")
    print_abandoned(result)
    return 0
