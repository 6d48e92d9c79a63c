"""Backup selection core for afs-backup-ng.

Decides which volumes get backed up, under which path and with which
management class. No command is executed from here.
"""

from .aggregate import add_match_scores, exclude_matched
from .ledger import LedgerResult, LedgerWarning, parse_filespace_report
from .matcher import (
    Rule,
    RulePatternError,
    compile_rules,
    match_by_path,
    match_by_volume,
    parse_rule,
)
from .paths import BackupCandidate, select_paths
from .planner import PlanResult, build_backup_plan
from .policy import (
    BackupPlan,
    BackupPlanEntry,
    PolicyOrder,
    PolicyRule,
    build_plan_entries,
    compile_policy_table,
    parse_policy_order,
    resolve_management_classes,
)
from .staleness import (
    StaleSourceUnavailable,
    TimestampFileSource,
    check_ledger_source,
    filter_unchanged,
)

__all__ = [
    "add_match_scores",
    "exclude_matched",
    "LedgerResult",
    "LedgerWarning",
    "parse_filespace_report",
    "Rule",
    "RulePatternError",
    "compile_rules",
    "match_by_path",
    "match_by_volume",
    "parse_rule",
    "BackupCandidate",
    "select_paths",
    "PlanResult",
    "build_backup_plan",
    "BackupPlan",
    "BackupPlanEntry",
    "PolicyOrder",
    "PolicyRule",
    "build_plan_entries",
    "compile_policy_table",
    "parse_policy_order",
    "resolve_management_classes",
    "StaleSourceUnavailable",
    "TimestampFileSource",
    "check_ledger_source",
    "filter_unchanged",
]
