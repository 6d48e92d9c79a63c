"""vosbackup mode: refresh the .backup clones of changed volumes."""

import logging

from .. import __util__
from ..core import PlanResult, build_backup_plan
from .common import RunContext

logger = logging.getLogger(__name__)


def plan(ctx: RunContext) -> PlanResult:
    """Select volumes; the clone's own backupDate is the last backup time."""
    staleness = {}
    if ctx.mode.lastbackup:
        staleness = {
            "mod_time": ctx.vos.update_date,
            "last_backup": ctx.vos.backup_date,
        }
    with __util__.timed("Selecting volumes", ctx.timing):
        return build_backup_plan(
            ctx.inventory, ctx.mode.path_rules, ctx.mode.volume_rules, **staleness
        )


def print_volumes(result: PlanResult) -> None:
    print("")
    print("=== volumes to vos backup ===")
    print("VOLUME")
    for volume in sorted(result.volumes):
        print(volume)
    print("")


def run(ctx: RunContext) -> int:
    """Run vos backup for every selected volume.

    Returns:
        1 if any clone failed, 0 otherwise
    """
    result = plan(ctx)
    print_volumes(result)

    status = 0
    logger.info(__util__.log_heading("running vos backup"))
    for volume in sorted(result.volumes):
        logger.info("%s %s", " ".join(ctx.config.commands.vosbackup), volume)
        if not ctx.vos.backup(volume).success:
            logger.error("vos backup of %s failed", volume)
            status = 1
    return status
