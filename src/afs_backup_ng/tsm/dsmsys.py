"""Generate dsm.sys and dsm.opt for a TSM run.

dsm.sys is assembled from the common and per-host head files, a
VirtualMountPoint for every reachable AFS mount point, the management class
INCLUDE statements of the plan and finally the exclude lists. dsmc processes
include/exclude statements bottom-up, so the exclude lists go last.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path

from ..__util__ import AbortError
from ..afs.vos import BACKUP_SUFFIX
from ..core.policy import BackupPlanEntry
from ..inventory.models import MountInventory

logger = logging.getLogger(__name__)

SNAPSHOT_CELL_ROOT = "root.cell"


def snapshot_root_for(path: str, basepath: str, tmp_mount_path: str) -> str:
    """Where the .backup clone of the volume at path is visible."""
    root = f"{tmp_mount_path}/{SNAPSHOT_CELL_ROOT}"
    if path == basepath:
        return root
    if basepath and path.startswith(basepath):
        return root + path[len(basepath) :]
    return root + path


def virtual_mount_points(
    inventory: MountInventory,
    basepath: str,
    dotbackup: bool = False,
    tmp_mount_path: str = "",
    is_accessible: Callable[[str], bool] = os.path.isdir,
) -> list[str]:
    """VirtualMountPoint lines for the cell.

    Mount points we cannot access are skipped. This might allow volumes to
    be backed up under a parent filespace, so keep the inventory current.
    """
    lines = [f"VirtualMountPoint {basepath}", "VirtualMountPoint /afs"]
    for path in sorted(inventory.by_path):
        if not is_accessible(path):
            continue
        abspath = path.rstrip("/") or "/"
        lines.append(f"VirtualMountPoint {abspath}")
        # with afsd -backuptree .backup mounts don't exist in the clone tree
        if dotbackup and not inventory.by_path[path].volume.endswith(BACKUP_SUFFIX):
            lines.append(
                "VirtualMountPoint "
                + snapshot_root_for(abspath, basepath, tmp_mount_path)
            )
    return lines


def include_statements(plan: Iterable[BackupPlanEntry], default_class: str = "") -> list[str]:
    """Management class INCLUDE statements in plan order."""
    lines = []
    if default_class:
        lines += [
            "",
            "* Default management class (policy-default)",
            f"include * {default_class}",
            "",
        ]
    lines += ["", "* per-path management classes"]
    for entry in plan:
        if not entry.management_class:
            continue
        lines.append(f"INCLUDE {entry.path}/* {entry.management_class}")
        lines.append(f"INCLUDE {entry.path}/.../* {entry.management_class}")
    return lines


def _head_files(state_dir: Path, host: str, name: str) -> list[Path]:
    common = state_dir / "etc" / "common" / name
    host_file = state_dir / "etc" / "hosts" / host / name
    if not host_file.exists():
        logger.error("%s does not exist!", host_file)
        raise AbortError(f"{host_file} does not exist")
    return [p for p in (common, host_file) if p.exists()]


def _read_parts(paths: Iterable[Path]) -> str:
    return "".join(p.read_text(encoding="utf-8") for p in paths)


def _exclude_lists(state_dir: Path, host: str) -> str:
    parts = []
    for path in (
        state_dir / "etc" / "common" / "exclude.list",
        state_dir / "etc" / "hosts" / host / "exclude.list",
    ):
        if path.exists():
            parts.append(path.read_text(encoding="utf-8"))
        else:
            logger.warning("%s does not exist", path)
    return "".join(parts)


def write_dsm_opt(target: Path | str, state_dir: Path | str, host: str) -> None:
    """Write dsm.opt from its common and per-host head files."""
    content = _read_parts(_head_files(Path(state_dir), host, "dsm.opt.head"))
    Path(target).write_text(content, encoding="utf-8")


def write_dsm_sys(
    target: Path | str,
    state_dir: Path | str,
    host: str,
    inventory: MountInventory,
    plan: Iterable[BackupPlanEntry],
    basepath: str,
    default_class: str = "",
    dotbackup: bool = False,
    tmp_mount_path: str = "",
    is_accessible: Callable[[str], bool] = os.path.isdir,
) -> None:
    """Write dsm.sys for the run.

    Raises:
        AbortError: If the per-host dsm.sys.head is missing
    """
    state_dir = Path(state_dir)
    head = _read_parts(_head_files(state_dir, host, "dsm.sys.head"))
    if head and not head.endswith("\n"):
        head += "\n"

    body = virtual_mount_points(
        inventory,
        basepath,
        dotbackup=dotbackup,
        tmp_mount_path=tmp_mount_path,
        is_accessible=is_accessible,
    )
    body += include_statements(plan, default_class)

    Path(target).write_text(
        head + "\n".join(body) + "\n" + _exclude_lists(state_dir, host),
        encoding="utf-8",
    )
    logger.debug("Wrote %s", target)
