"""Archive of model and observed sounding files indexed in SQLite."""

from .core.errors import (
    ArchiveError,
    DuplicateKey,
    NotFound,
    ReferentialViolation,
    StoreUnavailable,
)
from .models import FileRecord, Location, Site, SoundingType, StateProv
from .services import Archive, ArchivedFile, ArchiveIndex, Inventory

__version__ = "0.3.0"

__all__ = [
    "Archive",
    "ArchiveError",
    "ArchiveIndex",
    "ArchivedFile",
    "DuplicateKey",
    "FileRecord",
    "Inventory",
    "Location",
    "NotFound",
    "ReferentialViolation",
    "Site",
    "SoundingType",
    "StateProv",
    "StoreUnavailable",
]
