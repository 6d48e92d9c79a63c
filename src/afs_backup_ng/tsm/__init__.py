"""Tivoli Storage Manager (TSM) client support."""

from .dsmc import DsmcClient, rotate_log
from .dsmsys import (
    SNAPSHOT_CELL_ROOT,
    include_statements,
    snapshot_root_for,
    virtual_mount_points,
    write_dsm_opt,
    write_dsm_sys,
)

__all__ = [
    "SNAPSHOT_CELL_ROOT",
    "DsmcClient",
    "rotate_log",
    "include_statements",
    "snapshot_root_for",
    "virtual_mount_points",
    "write_dsm_opt",
    "write_dsm_sys",
]
