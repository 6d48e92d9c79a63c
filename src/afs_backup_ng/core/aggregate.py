"""Combine the by-path and by-volume match scores."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .matcher import MatchScore

logger = logging.getLogger(__name__)


def add_match_scores(one: Mapping[str, int], two: Mapping[str, int]) -> MatchScore:
    """Sum two score maps per volume, a missing volume counting as 0."""
    combined = dict(one)
    for volume, score in two.items():
        combined[volume] = combined.get(volume, 0) + score
    return combined


def exclude_matched(scores: Mapping[str, int]) -> tuple[list[str], list[str]]:
    """Split summed scores into selected and explicitly excluded volumes.

    Only a strictly positive sum selects a volume, so an exclusion from
    either rule set vetoes a positive match from the other.

    Returns:
        Tuple of (selected volumes, excluded volumes), both sorted
    """
    selected = []
    excluded = []
    for volume in sorted(scores):
        if scores[volume] > 0:
            selected.append(volume)
        else:
            logger.debug("Explicitly excluding volume %s", volume)
            excluded.append(volume)
    return selected, excluded
