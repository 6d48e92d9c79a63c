"""End-to-end tests of backup plan construction."""

import pytest

from afs_backup_ng.core import (
    BackupPlanEntry,
    LedgerResult,
    PolicyOrder,
    build_backup_plan,
    compile_policy_table,
    compile_rules,
)
from afs_backup_ng.inventory import InventoryError, MountInventory, MountType


class TestBuildBackupPlan:
    """Tests for build_backup_plan."""

    def test_single_volume_included(self, make_inventory):
        inventory = make_inventory(("/data/proj1", "v1"))
        result = build_backup_plan(
            inventory, compile_rules(["^/data"]), [], default_class="STANDARD"
        )
        assert result.plan == (BackupPlanEntry("v1", "/data/proj1", "STANDARD"),)
        assert result.excluded == []
        assert result.staleness_filtered is False

    def test_volume_rule_vetoes_path_match(self, make_inventory):
        inventory = make_inventory(("/data/proj1", "v1"))
        result = build_backup_plan(
            inventory, compile_rules(["^/data"]), compile_rules(["!v1"])
        )
        assert result.plan == ()
        assert result.excluded == ["v1"]

    def test_cell(self, cell_inventory):
        path_rules = compile_rules(["^/afs/example.org/user/", "!/scratch"])
        volume_rules = compile_rules(["^proj\\.", "!\\.readonly$"])
        result = build_backup_plan(
            cell_inventory,
            path_rules,
            volume_rules,
            policy_path_rules=compile_policy_table({"^/afs/example.org/user/": "USERS"}),
            policy_volume_rules=compile_policy_table({"^proj\\.archive": "ARCHIVE"}),
            policy_order=PolicyOrder.PATH_VOLUME,
            default_class="STANDARD",
        )
        assert result.plan == (
            BackupPlanEntry("proj.web", "/afs/example.org/proj/web", "STANDARD"),
            BackupPlanEntry("user.bob", "/afs/example.org/user/b/bob", "USERS"),
            BackupPlanEntry("proj.archive", "/afs/example.org/proj/archive", "ARCHIVE"),
            BackupPlanEntry("user.alice", "/afs/example.org/user/a/alice", "USERS"),
        )
        assert result.excluded == ["proj.web.readonly", "user.bob.scratch"]
        assert result.candidates == 6
        assert sorted(result.volumes) == [
            "proj.archive",
            "proj.web",
            "user.alice",
            "user.bob",
        ]

    def test_staleness_filter(self, make_inventory):
        inventory = make_inventory(("/data/a", "a"), ("/data/b", "b"), ("/data/c", "c"))
        mod_times = {"a": 100, "b": 200, "c": 300}
        last = {"a": 100, "b": 150}
        result = build_backup_plan(
            inventory,
            compile_rules(["^/data"]),
            [],
            mod_time=mod_times.get,
            last_backup=lambda v: last.get(v, 0),
        )
        assert result.volumes == ["b", "c"]
        assert result.unchanged == ["a"]
        assert result.staleness_filtered is True

    def test_staleness_needs_both_lookups(self, make_inventory):
        inventory = make_inventory(("/data/a", "a"))
        result = build_backup_plan(
            inventory, compile_rules(["^/data"]), [], mod_time=lambda v: 0
        )
        assert result.volumes == ["a"]
        assert result.staleness_filtered is False

    def test_excluded_volume_never_queried(self, make_inventory):
        inventory = make_inventory(("/data/a", "a"), ("/data/b", "b"))
        queried = []

        def mod_time(volume):
            queried.append(volume)
            return 1

        build_backup_plan(
            inventory,
            compile_rules(["^/data", "!b"]),
            [],
            mod_time=mod_time,
            last_backup=lambda v: 0,
        )
        assert queried == ["a"]

    def test_ledger_diagnostics_carried(self, make_inventory):
        inventory = make_inventory(("/data/a", "a"))
        ledger = LedgerResult(abandoned={"/data/gone": 5}, count=1)
        result = build_backup_plan(inventory, compile_rules(["a"]), [], ledger=ledger)
        assert result.abandoned_filespaces == {"/data/gone": 5}

    def test_volume_only_on_readonly_mount(self, make_inventory):
        inventory = make_inventory(
            ("/data/a", "a"), ("/data/ro", "ro.only", MountType.READ_ONLY)
        )
        result = build_backup_plan(inventory, [], compile_rules(["."]))
        assert result.volumes == ["a"]
        assert result.unselectable == ["ro.only"]

    def test_empty_inventory(self):
        with pytest.raises(InventoryError):
            build_backup_plan(MountInventory(), compile_rules(["."]), [])

    def test_no_rules_selects_nothing(self, cell_inventory):
        result = build_backup_plan(cell_inventory, [], [])
        assert result.plan == ()
        assert result.candidates == 0
