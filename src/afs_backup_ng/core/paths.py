"""Pick the path each selected volume is backed up under."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..inventory.models import MountInventory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupCandidate:
    """A selected volume and its representative mount path."""

    volume: str
    path: str


def strip_trailing_slash(path: str) -> str:
    return path.rstrip("/") or "/"


def select_paths(
    volumes: Iterable[str], inventory: MountInventory
) -> tuple[list[BackupCandidate], list[str]]:
    """Choose the shortest normal mount path of every volume.

    Ties on length are broken lexicographically.

    Returns:
        Tuple of (candidates, volumes without any normal mount)
    """
    candidates = []
    unselectable = []
    for volume in sorted(volumes):
        mounts = inventory.by_volume.get(volume)
        paths = mounts.normal_paths() if mounts else []
        if not paths:
            logger.warning(
                "Volume %s has no normal mount point, cannot back it up", volume
            )
            unselectable.append(volume)
            continue
        shortest = min(paths, key=lambda p: (len(p), p))
        candidates.append(BackupCandidate(volume, strip_trailing_slash(shortest)))
    return candidates, unselectable
