"""Tests for dsmc calls and dsm.sys generation."""

from unittest.mock import MagicMock

import pytest

from afs_backup_ng.__util__ import AbortError, CommandRunner
from afs_backup_ng.core import BackupPlanEntry
from afs_backup_ng.tsm import (
    DsmcClient,
    include_statements,
    rotate_log,
    snapshot_root_for,
    virtual_mount_points,
    write_dsm_opt,
    write_dsm_sys,
)

BASEPATH = "/afs/example.org"
TMP_MOUNT = "/afs/example.org/.backup-tmp"


class TestDsmcClient:
    """Tests for DsmcClient."""

    def test_incremental_args(self):
        dsmc = DsmcClient(MagicMock(spec=CommandRunner), ["dsmc", "-se=afs"])
        assert dsmc.incremental_args("/afs/c/a") == ["dsmc", "-se=afs", "incremental", "/afs/c/a"]
        assert dsmc.incremental_args("/afs/c/a", "/tmp/root.cell/a")[-1] == (
            "-snapshotroot=/tmp/root.cell/a"
        )

    def test_query_filespace(self):
        runner = MagicMock(spec=CommandRunner)
        runner.capture.return_value = "report"
        assert DsmcClient(runner).query_filespace() == "report"
        runner.capture.assert_called_once_with(["dsmc", "query", "filespace"])


class TestRotateLog:
    """Tests for rotate_log."""

    def test_rotates(self, tmp_path):
        log = tmp_path / "dsmc.log.afs1"
        log.write_text("run 2\n")
        (tmp_path / "dsmc.log.afs1.last").write_text("run 1\n")
        rotate_log(log)
        assert not log.exists()
        assert (tmp_path / "dsmc.log.afs1.last").read_text() == "run 2\n"

    def test_missing_log(self, tmp_path):
        rotate_log(tmp_path / "dsmc.log.afs1")
        assert list(tmp_path.iterdir()) == []


class TestSnapshotRoot:
    """Tests for snapshot_root_for."""

    def test_cell_root(self):
        assert snapshot_root_for(BASEPATH, BASEPATH, TMP_MOUNT) == f"{TMP_MOUNT}/root.cell"

    def test_below_cell_root(self):
        assert snapshot_root_for(f"{BASEPATH}/user/a/alice", BASEPATH, TMP_MOUNT) == (
            f"{TMP_MOUNT}/root.cell/user/a/alice"
        )


class TestVirtualMountPoints:
    """Tests for virtual_mount_points."""

    def test_accessible_mounts_only(self, cell_inventory):
        lines = virtual_mount_points(
            cell_inventory, BASEPATH, is_accessible=lambda p: "readonly" not in p
        )
        assert lines[:2] == [f"VirtualMountPoint {BASEPATH}", "VirtualMountPoint /afs"]
        assert "VirtualMountPoint /afs/example.org/user/a/alice" in lines
        assert not any("readonly" in line for line in lines)

    def test_dotbackup_twins(self, make_inventory):
        inventory = make_inventory(
            (f"{BASEPATH}/user/a/alice/", "user.alice"),
            (f"{BASEPATH}/user/a/alice/.backup/", "user.alice.backup"),
        )
        lines = virtual_mount_points(
            inventory,
            BASEPATH,
            dotbackup=True,
            tmp_mount_path=TMP_MOUNT,
            is_accessible=lambda p: True,
        )
        assert lines[2:] == [
            f"VirtualMountPoint {BASEPATH}/user/a/alice",
            f"VirtualMountPoint {TMP_MOUNT}/root.cell/user/a/alice",
            f"VirtualMountPoint {BASEPATH}/user/a/alice/.backup",
        ]


class TestIncludeStatements:
    """Tests for include_statements."""

    def test_default_and_per_path(self):
        plan = (
            BackupPlanEntry("proj.web", "/afs/c/proj/web", ""),
            BackupPlanEntry("user.alice", "/afs/c/user/alice", "USERS"),
        )
        lines = include_statements(plan, "STANDARD")
        assert "include * STANDARD" in lines
        assert lines[-2:] == [
            "INCLUDE /afs/c/user/alice/* USERS",
            "INCLUDE /afs/c/user/alice/.../* USERS",
        ]
        assert not any("proj/web" in line for line in lines)

    def test_no_default(self):
        lines = include_statements((BackupPlanEntry("v", "/afs/c/v", "X"),))
        assert not any(line.startswith("include *") for line in lines)


class TestWriteDsmFiles:
    """Tests for write_dsm_sys and write_dsm_opt."""

    def test_dsm_sys_layout(self, tmp_path, state_dir, cell_inventory):
        target = tmp_path / "dsm.sys"
        plan = (BackupPlanEntry("user.alice", f"{BASEPATH}/user/a/alice", "USERS"),)
        write_dsm_sys(
            target,
            state_dir,
            "afs1",
            cell_inventory,
            plan,
            BASEPATH,
            default_class="STANDARD",
            is_accessible=lambda p: True,
        )
        content = target.read_text()
        assert content.startswith("* common head\nSErvername tsm1\n")
        assert content.index("VirtualMountPoint") < content.index("include * STANDARD")
        assert content.index("include * STANDARD") < content.index("INCLUDE")
        assert content.rstrip().endswith("EXCLUDE /.../core")

    def test_missing_host_head_aborts(self, tmp_path, state_dir, cell_inventory):
        with pytest.raises(AbortError, match="does not exist"):
            write_dsm_sys(tmp_path / "dsm.sys", state_dir, "afs2", cell_inventory, (), BASEPATH)

    def test_dsm_opt(self, tmp_path, state_dir):
        target = tmp_path / "dsm.opt"
        write_dsm_opt(target, state_dir, "afs1")
        assert target.read_text() == "SErvername tsm1\n"
