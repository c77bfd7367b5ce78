"""Service-layer utilities."""

from .archive import Archive
from .index import ArchivedFile, ArchiveIndex
from .inventory import Inventory, build_inventory, missing_ranges

__all__ = [
    "Archive",
    "ArchiveIndex",
    "ArchivedFile",
    "Inventory",
    "build_inventory",
    "missing_ranges",
]
