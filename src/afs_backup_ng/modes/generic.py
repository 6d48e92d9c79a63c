"""Generic mode: run a configured command for every selected volume.

Last backup times live in timestamp files below <state_dir>/var/lastbackup.
A volume's file is updated with the run's start time after its command
succeeded, so changes made during the run are picked up next time.
"""

import logging
import re
import time

from .. import __util__
from ..core import BackupPlanEntry, PlanResult, TimestampFileSource, build_backup_plan
from .common import RunContext, print_plan

logger = logging.getLogger(__name__)

# Any other brace in the template is passed through unchanged
PLACEHOLDER_RE = re.compile(r"\{(volume|path)\}")


def timestamp_source(ctx: RunContext) -> TimestampFileSource:
    return TimestampFileSource(ctx.state_dir, ctx.mode.name)


def plan(ctx: RunContext) -> PlanResult:
    staleness = {}
    if ctx.mode.lastbackup:
        staleness = {
            "mod_time": ctx.vos.update_date,
            "last_backup": timestamp_source(ctx).last_backup,
        }
    with __util__.timed("Selecting volumes", ctx.timing):
        return build_backup_plan(
            ctx.inventory, ctx.mode.path_rules, ctx.mode.volume_rules, **staleness
        )


def command_for(template: list[str], entry: BackupPlanEntry) -> list[str]:
    """Fill {volume} and {path} into the command template."""
    values = {"volume": entry.volume, "path": entry.path}
    return [PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], arg) for arg in template]


def run(ctx: RunContext) -> int:
    """Run the mode's command per volume.

    Returns:
        1 if any command failed or none is configured, 0 otherwise
    """
    if not ctx.mode.command:
        logger.error("Mode '%s' has no command configured", ctx.mode.name)
        return 1

    started = int(time.time())
    result = plan(ctx)
    print_plan(result, ctx.inventory, with_class=False)

    source = timestamp_source(ctx)
    status = 0
    logger.info(__util__.log_heading(f"Running {ctx.mode.name}"))
    for entry in result.plan:
        cmd_result = ctx.runner.run(command_for(ctx.mode.command, entry))
        if not cmd_result.success:
            logger.error("%s of %s failed", ctx.mode.name, entry.volume)
            status = 1
        elif not ctx.runner.pretend:
            source.record(entry.volume, started)
    return status
