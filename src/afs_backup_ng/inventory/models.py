"""Mount inventory data structures.

The inventory is produced outside the core (a volmounts database or the
flat files written by a mount crawler) and stays immutable for a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class InventoryError(Exception):
    """Mount inventory is missing or empty."""

    pass


class MountType(Enum):
    """Kind of AFS mount point."""

    NORMAL = "normal"
    READ_ONLY = "read-only"
    OTHER = "other"

    @classmethod
    def from_marker(cls, marker: str) -> MountType:
        """Map an inventory type marker to a MountType.

        '#' is the regular AFS mount point marker. Read/write ('%') mounts
        and anything unrecognised are OTHER.
        """
        value = marker.strip().lower()
        if value in ("#", "normal"):
            return cls.NORMAL
        if value in ("ro", "readonly", "read-only"):
            return cls.READ_ONLY
        return cls.OTHER


@dataclass(frozen=True)
class MountPoint:
    """A path under which a volume is visible."""

    path: str
    volume: str
    cell: str = ""
    mount_type: MountType = MountType.NORMAL


@dataclass
class VolumeMounts:
    """All known mount paths of one volume."""

    volume: str
    cell: str = ""
    paths: dict[str, MountType] = field(default_factory=dict)

    def normal_paths(self) -> list[str]:
        return [p for p, t in self.paths.items() if t == MountType.NORMAL]


@dataclass
class MountInventory:
    """Path keyed and volume keyed views of the cell's mount points."""

    by_path: dict[str, MountPoint] = field(default_factory=dict)
    by_volume: dict[str, VolumeMounts] = field(default_factory=dict)

    @classmethod
    def from_mounts(cls, mounts: list[MountPoint]) -> MountInventory:
        """Build both views from a list of mount points."""
        inventory = cls()
        for mount in mounts:
            inventory.by_path[mount.path] = mount
            entry = inventory.by_volume.setdefault(
                mount.volume, VolumeMounts(volume=mount.volume, cell=mount.cell)
            )
            entry.paths[mount.path] = mount.mount_type
        return inventory

    def lookup_path(self, path: str) -> MountPoint | None:
        """Find the mount point for path, with or without a trailing '/'."""
        if path in self.by_path:
            return self.by_path[path]
        if path.endswith("/"):
            return self.by_path.get(path.rstrip("/") or "/")
        return self.by_path.get(path + "/")

    def is_empty(self) -> bool:
        return not self.by_path or not self.by_volume

    def require(self) -> MountInventory:
        """Return self, raising InventoryError if either view is empty."""
        if self.is_empty():
            raise InventoryError("No mounts found in the inventory")
        return self
