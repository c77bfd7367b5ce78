"""Database models."""

from .file_record import FileRecord
from .location import Location
from .site import Site, StateProv
from .sounding_type import SoundingType

__all__ = [
    "FileRecord",
    "Location",
    "Site",
    "SoundingType",
    "StateProv",
]
