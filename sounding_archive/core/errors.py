"""Error conditions raised by the archive index."""

from __future__ import annotations


class ArchiveError(Exception):
    """Base class for every condition surfaced by the archive."""


class DuplicateKey(ArchiveError):
    """A uniqueness constraint rejected the write."""


class NotFound(ArchiveError):
    """No row matched the requested file name, metadata or short code."""


class ReferentialViolation(ArchiveError):
    """A type, site or location identifier does not reference an existing row."""


class StoreUnavailable(ArchiveError):
    """The backing store could not be opened or the transaction could not commit."""


__all__ = [
    "ArchiveError",
    "DuplicateKey",
    "NotFound",
    "ReferentialViolation",
    "StoreUnavailable",
]
