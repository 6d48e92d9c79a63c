"""Read the flat mount inventory files.

mounts-by-path holds one mount per line::

    /afs/example.org/user/a/alice/|#|user.alice|example.org

mounts-by-volume holds one block per volume, terminated by a blank line::

    user.alice|example.org
        # /afs/example.org/user/a/alice/
        % /afs/.example.org/user/a/alice/
"""

from __future__ import annotations

import logging
from pathlib import Path

from .models import InventoryError, MountInventory, MountPoint, MountType, VolumeMounts

logger = logging.getLogger(__name__)


def parse_mounts_by_path(text: str) -> dict[str, MountPoint]:
    """Parse mounts-by-path content into a path keyed dict."""
    mounts: dict[str, MountPoint] = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        fields = line.split("|")
        if len(fields) < 3:
            logger.warning("mounts-by-path line %d is malformed: %r", lineno, line)
            continue
        path, marker, volume = fields[0], fields[1], fields[2]
        cell = fields[3] if len(fields) > 3 else ""
        mounts[path] = MountPoint(
            path=path,
            volume=volume,
            cell=cell,
            mount_type=MountType.from_marker(marker),
        )
    return mounts


def parse_mounts_by_volume(text: str) -> dict[str, VolumeMounts]:
    """Parse mounts-by-volume content into a volume keyed dict."""
    volumes: dict[str, VolumeMounts] = {}
    current: VolumeMounts | None = None
    for line in text.splitlines():
        if not line.strip():
            current = None
            continue
        if current is None:
            # path lines outside of a block should not happen
            if line.lstrip().startswith(("#", "%")):
                continue
            volume, _, cell = line.strip().partition("|")
            current = volumes.setdefault(volume, VolumeMounts(volume=volume, cell=cell))
            continue
        marker, _, path = line.strip().partition(" ")
        current.paths[path.strip()] = MountType.from_marker(marker)
    return volumes


def read_inventory(
    mounts_by_path: Path | str, mounts_by_volume: Path | str | None = None
) -> MountInventory:
    """Load the inventory from its flat files.

    The volume view is derived from the path view when no mounts-by-volume
    file exists.

    Raises:
        InventoryError: If the files are missing or hold no mounts
    """
    path_file = Path(mounts_by_path)
    try:
        by_path = parse_mounts_by_path(path_file.read_text(encoding="utf-8"))
    except OSError as e:
        raise InventoryError(f"Cannot read mount inventory {path_file}: {e}")

    inventory = MountInventory.from_mounts(list(by_path.values()))

    if mounts_by_volume is not None and Path(mounts_by_volume).exists():
        try:
            text = Path(mounts_by_volume).read_text(encoding="utf-8")
        except OSError as e:
            raise InventoryError(f"Cannot read mount inventory {mounts_by_volume}: {e}")
        inventory.by_volume = parse_mounts_by_volume(text)

    return inventory.require()
