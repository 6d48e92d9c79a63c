"""Rule matching of mount paths and volume names.

A rule is a regular expression, searched (not anchored) in the candidate.
A leading '!' turns it into an exclusion rule. Matching yields a score per
volume: 1 for selected, -1 for explicitly excluded. Exclusion is sticky, a
later positive rule never lifts it. Volumes no rule matched are absent.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ..inventory.models import MountPoint, MountType, VolumeMounts

MatchScore = dict[str, int]

NEGATE_PREFIX = "!"


class RulePatternError(ValueError):
    """A rule pattern is not a valid regular expression."""

    def __init__(self, pattern: str, source: str, error: re.error) -> None:
        self.pattern = pattern
        self.source = source
        super().__init__(f"{source}: invalid pattern {pattern!r}: {error}")


@dataclass(frozen=True)
class Rule:
    """A compiled selection rule.

    Attributes:
        pattern: Compiled regular expression
        negate: True for exclusion rules ('!' prefix in the config)
        source: Where the rule came from, for diagnostics
    """

    pattern: re.Pattern
    negate: bool = False
    source: str = ""

    @property
    def text(self) -> str:
        return self.pattern.pattern

    def matches(self, candidate: str) -> bool:
        return self.pattern.search(candidate) is not None


def compile_pattern(pattern: str, source: str = "") -> re.Pattern:
    """Compile a config supplied regex, naming the offender on failure."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise RulePatternError(pattern, source, e) from e


def parse_rule(text: str, source: str = "") -> Rule:
    """Parse the config syntax '[!]regex' into a Rule."""
    negate = text.startswith(NEGATE_PREFIX)
    if negate:
        text = text[len(NEGATE_PREFIX) :]
    return Rule(pattern=compile_pattern(text, source), negate=negate, source=source)


def compile_rules(texts: Iterable[str], source: str = "") -> list[Rule]:
    """Compile a rule list, keeping the config order."""
    return [parse_rule(text, f"{source}[{i}]") for i, text in enumerate(texts)]


def normalize_path(path: str) -> str:
    """Collapse duplicate slashes and strip a trailing one."""
    path = re.sub(r"/+", "/", path)
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _apply_rules(scores: MatchScore, key: str, candidate: str, rules: Iterable[Rule]) -> None:
    for rule in rules:
        if not rule.matches(candidate):
            continue
        if rule.negate:
            scores[key] = -1
        elif key not in scores:
            scores[key] = 1


def match_by_path(by_path: Mapping[str, MountPoint], rules: Iterable[Rule]) -> MatchScore:
    """Match normal mount points against path rules.

    Args:
        by_path: Path keyed mount inventory
        rules: Path rules

    Returns:
        Scores keyed by the volume behind each matched path
    """
    rules = list(rules)
    scores: MatchScore = {}
    for path, mount in by_path.items():
        # we only want normal mountpoints
        if mount.mount_type != MountType.NORMAL:
            continue
        _apply_rules(scores, mount.volume, normalize_path(path), rules)
    return scores


def match_by_volume(by_volume: Mapping[str, VolumeMounts], rules: Iterable[Rule]) -> MatchScore:
    """Match volume names against volume rules."""
    rules = list(rules)
    scores: MatchScore = {}
    for volume in by_volume:
        _apply_rules(scores, volume, volume, rules)
    return scores
