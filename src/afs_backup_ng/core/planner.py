"""Build the backup plan for a run.

Matching, exclusion, staleness filtering, path selection and management
class resolution in one pass. Everything here is pure computation on the
inputs; the time lookups are the only callbacks and they are supplied by the
caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..inventory.models import MountInventory
from .aggregate import add_match_scores, exclude_matched
from .ledger import LedgerResult, LedgerWarning
from .matcher import Rule, match_by_path, match_by_volume
from .paths import select_paths
from .policy import (
    BackupPlan,
    PolicyOrder,
    PolicyRule,
    build_plan_entries,
    resolve_management_classes,
)
from .staleness import TimeLookup, filter_unchanged

logger = logging.getLogger(__name__)


@dataclass
class PlanResult:
    """The backup plan plus what was left out of it and why."""

    plan: BackupPlan = ()
    candidates: int = 0
    excluded: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    unselectable: list[str] = field(default_factory=list)
    abandoned_filespaces: dict[str, int] = field(default_factory=dict)
    ledger_warnings: list[LedgerWarning] = field(default_factory=list)
    staleness_filtered: bool = False

    @property
    def volumes(self) -> list[str]:
        return [entry.volume for entry in self.plan]


def build_backup_plan(
    inventory: MountInventory,
    path_rules: Iterable[Rule],
    volume_rules: Iterable[Rule],
    *,
    mod_time: TimeLookup | None = None,
    last_backup: TimeLookup | None = None,
    shadow_suffix: str | None = None,
    policy_path_rules: Iterable[PolicyRule] = (),
    policy_volume_rules: Iterable[PolicyRule] = (),
    policy_order: PolicyOrder = PolicyOrder.PATH_VOLUME,
    default_class: str = "",
    ledger: LedgerResult | None = None,
) -> PlanResult:
    """Decide what to back up.

    Staleness filtering runs only when both ``mod_time`` and ``last_backup``
    are given.

    Raises:
        InventoryError: If the inventory is empty
    """
    inventory.require()

    by_path = match_by_path(inventory.by_path, path_rules)
    by_volume = match_by_volume(inventory.by_volume, volume_rules)
    scores = add_match_scores(by_path, by_volume)

    result = PlanResult(candidates=len(scores))
    if ledger is not None:
        result.abandoned_filespaces = dict(ledger.abandoned)
        result.ledger_warnings = list(ledger.warnings)

    selected, result.excluded = exclude_matched(scores)
    logger.debug(
        "%d volume(s) matched, %d excluded", len(selected), len(result.excluded)
    )

    if mod_time is not None and last_backup is not None:
        selected, result.unchanged = filter_unchanged(
            selected, mod_time, last_backup, shadow_suffix=shadow_suffix
        )
        result.staleness_filtered = True
        logger.debug("%d volume(s) unchanged since last backup", len(result.unchanged))

    candidates, result.unselectable = select_paths(selected, inventory)

    classes = resolve_management_classes(
        candidates,
        policy_path_rules,
        policy_volume_rules,
        policy_order,
        default_class,
    )
    result.plan = build_plan_entries(candidates, classes)
    return result
