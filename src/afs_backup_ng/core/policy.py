"""Management class resolution.

Two pattern keyed tables assign a TSM management class, one tested against
the backup path, one against the volume name. The policy order names the
table consulted first. Within a table rules run from the shortest pattern to
the longest and every match overwrites the previous one, so the longest
matching pattern wins. Across tables the later one wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from .matcher import compile_pattern
from .paths import BackupCandidate


class PolicyOrder(Enum):
    """Order in which the two policy tables are consulted."""

    PATH_VOLUME = ("path", "volume")
    VOLUME_PATH = ("volume", "path")

    @property
    def tables(self) -> tuple[str, str]:
        return self.value


def parse_policy_order(value: str | Iterable[str]) -> PolicyOrder:
    """Parse "path volume" or "volume path" (string or two element list).

    Raises:
        ValueError: For anything else
    """
    words = value.split() if isinstance(value, str) else [str(v) for v in value]
    for order in PolicyOrder:
        if tuple(words) == order.tables:
            return order
    raise ValueError(
        f'Expecting one of "path volume" or "volume path", got {value!r}'
    )


@dataclass(frozen=True)
class PolicyRule:
    """Pattern to management class mapping."""

    pattern: re.Pattern
    management_class: str
    source: str = ""

    @property
    def text(self) -> str:
        return self.pattern.pattern


def compile_policy_table(table: Mapping[str, str], source: str = "") -> list[PolicyRule]:
    """Compile a pattern keyed table into rules in resolution order."""
    rules = [
        PolicyRule(compile_pattern(pattern, f"{source}[{pattern!r}]"), str(mgmtclass), source)
        for pattern, mgmtclass in table.items()
    ]
    return sort_policy_rules(rules)


def sort_policy_rules(rules: Iterable[PolicyRule]) -> list[PolicyRule]:
    """Shortest pattern first, lexicographic on equal length."""
    return sorted(rules, key=lambda r: (len(r.text), r.text))


@dataclass(frozen=True)
class BackupPlanEntry:
    """One line of the backup plan."""

    volume: str
    path: str
    management_class: str = ""


BackupPlan = tuple[BackupPlanEntry, ...]


def resolve_management_classes(
    candidates: Iterable[BackupCandidate],
    path_rules: Iterable[PolicyRule],
    volume_rules: Iterable[PolicyRule],
    order: PolicyOrder,
    default: str = "",
) -> dict[str, str]:
    """Assign a management class to every candidate volume.

    Args:
        candidates: Selected volumes with their backup paths
        path_rules: Rules tested against the backup path
        volume_rules: Rules tested against the volume name
        order: Which table goes first; the later one wins on conflict
        default: Class for volumes no rule matched ("" for none)

    Returns:
        Management class keyed by volume
    """
    tables = {
        "path": sort_policy_rules(path_rules),
        "volume": sort_policy_rules(volume_rules),
    }
    classes: dict[str, str] = {}
    for candidate in candidates:
        mgmtclass = ""
        for table in order.tables:
            subject = candidate.path if table == "path" else candidate.volume
            for rule in tables[table]:
                if rule.pattern.search(subject):
                    mgmtclass = rule.management_class
        classes[candidate.volume] = mgmtclass or default or ""
    return classes


def build_plan_entries(
    candidates: Iterable[BackupCandidate], classes: Mapping[str, str]
) -> BackupPlan:
    """Order the plan by path length, then path.

    TSM applies include statements bottom-up, so the order of the generated
    INCLUDE lines decides which one wins for nested paths.
    """
    entries = [
        BackupPlanEntry(c.volume, c.path, classes.get(c.volume, ""))
        for c in candidates
    ]
    entries.sort(key=lambda e: (len(e.path), e.path))
    return tuple(entries)
