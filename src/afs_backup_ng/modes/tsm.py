"""TSM mode: incremental file backups of AFS volumes with dsmc.

With ``dotbackup`` the .backup clones are backed up: the cell's
root.cell.backup is mounted under tmp_mount_path and dsmc gets a matching
-snapshotroot for every path, so files land in TSM under their live path.
"""

import logging
import time

from .. import __util__
from ..afs import BACKUP_SUFFIX
from ..core import (
    LedgerResult,
    PlanResult,
    build_backup_plan,
    check_ledger_source,
    parse_filespace_report,
)
from ..tsm import (
    SNAPSHOT_CELL_ROOT,
    DsmcClient,
    rotate_log,
    snapshot_root_for,
    write_dsm_opt,
    write_dsm_sys,
)
from .common import RunContext, print_abandoned, print_plan

logger = logging.getLogger(__name__)

SNAPSHOT_CELL_VOLUME = "root.cell.backup"


def _dsmc(ctx: RunContext) -> DsmcClient:
    return DsmcClient(ctx.runner, ctx.config.commands.dsmc)


def fetch_ledger(ctx: RunContext) -> LedgerResult:
    """Query TSM for the filespaces of this node and parse the report."""
    with __util__.timed("Fetching Last Incr Date from TSM", ctx.timing):
        report = _dsmc(ctx).query_filespace()
        ledger = parse_filespace_report(report, ctx.inventory)
    if not ledger.no_filespaces:
        logger.info("Fetched the Last Incr Date from TSM for %d filespaces", ledger.count)
    return ledger


def plan(ctx: RunContext) -> PlanResult:
    """Decide what dsmc backs up and with which management class.

    Raises:
        StaleSourceUnavailable: lastbackup is on but TSM reported no dates
    """
    mode = ctx.mode
    ledger = fetch_ledger(ctx)

    staleness = {}
    if mode.lastbackup and check_ledger_source(ledger):
        staleness = {
            "mod_time": ctx.vos.update_date,
            "last_backup": ledger.last_backup,
            "shadow_suffix": BACKUP_SUFFIX if mode.dotbackup else None,
        }

    with __util__.timed("Determining volumes and MGMTCLASS to use", ctx.timing):
        return build_backup_plan(
            ctx.inventory,
            mode.path_rules,
            mode.volume_rules,
            policy_path_rules=mode.policy.path,
            policy_volume_rules=mode.policy.volume,
            policy_order=mode.policy.order,
            default_class=mode.policy.default,
            ledger=ledger,
            **staleness,
        )


def _write_dsm_files(ctx: RunContext, result: PlanResult | None = None) -> None:
    mode = ctx.mode
    write_dsm_opt(mode.dsmopt, ctx.state_dir, ctx.host)
    write_dsm_sys(
        mode.dsmsys,
        ctx.state_dir,
        ctx.host,
        ctx.inventory,
        result.plan if result else (),
        ctx.config.global_config.basepath,
        default_class=mode.policy.default,
        dotbackup=mode.dotbackup,
        tmp_mount_path=mode.tmp_mount_path,
    )


def _ensure_backup_clones(ctx: RunContext, result: PlanResult) -> int:
    status = 0
    logger.info(__util__.log_heading("Creating .backup volumes if needed"))
    for volume in sorted(result.volumes):
        logger.debug("Checking for BK volume for %s ...", volume)
        if not ctx.vos.exists(volume + BACKUP_SUFFIX):
            logger.info("No backup volume for %s, creating it", volume)
            if not ctx.vos.backup(volume).success:
                logger.error("Creating %s%s failed", volume, BACKUP_SUFFIX)
                status = 1

    snapshot_root = f"{ctx.mode.tmp_mount_path}/{SNAPSHOT_CELL_ROOT}"
    if not ctx.fs.remount(snapshot_root, SNAPSHOT_CELL_VOLUME).success:
        logger.error("Cannot mount %s at %s", SNAPSHOT_CELL_VOLUME, snapshot_root)
        status = 1
    return status


def _dump_vldb(ctx: RunContext) -> None:
    target = ctx.var_dir("vldb") / f"vldb.{time.strftime('%Y%m%d-%H%M%S')}"
    logger.info(__util__.log_heading(f"Dumping VLDB metadata to {target}"))
    ctx.runner.run(ctx.config.commands.dumpvldb + [str(target)])


def _dump_acls(ctx: RunContext, result: PlanResult) -> None:
    logger.info(__util__.log_heading("Dumping ACLs"))
    acl_dir = ctx.var_dir("acl")
    for entry in result.plan:
        logger.info("[acl] %s (%s)", entry.path, entry.volume)
        if ctx.mode.dotbackup:
            path = f"{ctx.mode.tmp_mount_path}/{entry.volume}"
            ctx.fs.remount(path, entry.volume + BACKUP_SUFFIX)
        else:
            path = entry.path
        ctx.runner.run(
            ctx.config.commands.dumpacls + [path],
            output_file=acl_dir / entry.volume,
        )
        if ctx.mode.dotbackup:
            ctx.fs.remove_mount(path)


def _run_incrementals(ctx: RunContext, result: PlanResult) -> int:
    mode = ctx.mode
    status = 0
    dsmc = _dsmc(ctx)
    log_dir = ctx.var_dir("log")
    log_file = log_dir / f"dsmc.log.{ctx.host}"
    rotate_log(log_file)
    rotate_log(log_dir / f"dsmc.error.{ctx.host}")

    logger.info(__util__.log_heading("Running dsmc incremental"))
    for entry in result.plan:
        logger.info("[dsmc] %s (%s)", entry.path, entry.volume)
        snapshot_root = None
        if mode.dotbackup:
            snapshot_root = snapshot_root_for(
                entry.path, ctx.config.global_config.basepath, mode.tmp_mount_path
            )
        if not mode.dsmc:
            print(" ".join(dsmc.incremental_args(entry.path, snapshot_root)))
            continue
        cmd_result = dsmc.incremental(entry.path, snapshot_root, log_file=log_file)
        # dsmc exits 4 for skipped files and 8 for warnings
        if cmd_result.returncode not in mode.dsmc_ok_codes:
            logger.error(
                "dsmc incremental of %s (%s) failed with exit code %d",
                entry.path,
                entry.volume,
                cmd_result.returncode,
            )
            status = 1
    return status


def run(ctx: RunContext) -> int:
    """Execute a TSM run.

    Every volume is processed even when an earlier one failed.

    Returns:
        1 if creating a clone or a dsmc run failed, 0 otherwise
    """
    # dsmc reads the server stanza from dsm.sys, even for the query
    _write_dsm_files(ctx)
    result = plan(ctx)
    _write_dsm_files(ctx, result)

    print_plan(result, ctx.inventory)

    status = 0
    if ctx.mode.dotbackup:
        status |= _ensure_backup_clones(ctx, result)
    if ctx.mode.dumpvldb:
        _dump_vldb(ctx)
    if ctx.mode.dumpacls:
        _dump_acls(ctx, result)

    status |= _run_incrementals(ctx, result)
    print_abandoned(result)
    return status
