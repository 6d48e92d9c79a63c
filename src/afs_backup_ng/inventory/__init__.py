"""Mount inventory of the cell: which volume is mounted where."""

from .models import InventoryError, MountInventory, MountPoint, MountType, VolumeMounts
from .reader import parse_mounts_by_path, parse_mounts_by_volume, read_inventory

__all__ = [
    "InventoryError",
    "MountInventory",
    "MountPoint",
    "MountType",
    "VolumeMounts",
    "parse_mounts_by_path",
    "parse_mounts_by_volume",
    "read_inventory",
]
