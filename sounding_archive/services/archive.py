"""On-disk archive: the index file plus the directory of stored payloads."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from sounding_archive.core.config import settings
from sounding_archive.core.errors import ArchiveError, StoreUnavailable
from sounding_archive.db.session import create_index_engine
from sounding_archive.models import Site
from sounding_archive.services.index import ArchiveIndex
from sounding_archive.services.inventory import Inventory, build_inventory

logger = logging.getLogger(__name__)


class Archive:
    """An archive rooted at a directory.

    Payloads live under ``<root>/files`` and are read and written by external
    collaborators through :meth:`file_path`. Only the index is managed here.
    """

    def __init__(self, root: str | Path, index: ArchiveIndex) -> None:
        self.root = Path(root)
        self.file_dir = self.root / settings.file_dir_name
        self.index = index

    @classmethod
    def create(cls, root: str | Path) -> "Archive":
        """Initialize a new archive."""

        root = Path(root)
        file_dir = root / settings.file_dir_name
        try:
            root.mkdir(parents=True, exist_ok=True)
            file_dir.mkdir()
        except OSError as exc:
            raise StoreUnavailable(f"Cannot create archive at {root}: {exc}") from exc

        index = ArchiveIndex(create_index_engine(root / settings.index_file_name))
        index.create_schema()
        logger.info("Created archive at %s", root)
        return cls(root, index)

    @classmethod
    def connect(cls, root: str | Path) -> "Archive":
        """Open an existing archive."""

        root = Path(root)
        db_file = root / settings.index_file_name
        if not db_file.is_file():
            raise StoreUnavailable(f"No archive index at {db_file}")
        if not (root / settings.file_dir_name).is_dir():
            raise StoreUnavailable(f"No file directory in archive at {root}")
        logger.debug("Connected to archive at %s", root)
        return cls(root, ArchiveIndex(create_index_engine(db_file)))

    def close(self) -> None:
        self.index.close()

    def __enter__(self) -> "Archive":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def file_path(self, file_name: str) -> Path:
        """Where the payload stored under ``file_name`` lives."""

        path = self.file_dir / file_name
        if path.parent != self.file_dir:
            raise ValueError(f"File names must not contain directories: {file_name!r}")
        return path

    def inventory(self, site: Site | str) -> Inventory:
        return build_inventory(self.index, site)

    def check(self) -> tuple[list[str], list[str]]:
        """Compare the index with the file directory.

        Returns the names in the index but missing on disk, and the names on
        disk that are not in the index.
        """

        index_names = set(self.index.file_names())
        try:
            disk_names = {p.name for p in self.file_dir.iterdir() if p.is_file()}
        except OSError as exc:
            raise StoreUnavailable(f"Cannot read file directory {self.file_dir}: {exc}") from exc
        missing_on_disk = sorted(index_names - disk_names)
        not_indexed = sorted(disk_names - index_names)
        if missing_on_disk or not_indexed:
            logger.warning(
                "Archive check found %d missing payload(s) and %d unindexed file(s)",
                len(missing_on_disk),
                len(not_indexed),
            )
        return missing_on_disk, not_indexed

    def remove_from_index(self, file_names: Iterable[str]) -> None:
        """Remove files from the index but NOT the file system."""
        self.index.delete_files(file_names)

    def remove_from_data_store(self, file_names: Iterable[str]) -> None:
        """Remove payloads that are no longer (or never were) in the index."""

        names = list(file_names)
        indexed = set(self.index.file_names()).intersection(names)
        if indexed:
            raise ArchiveError(
                "Refusing to delete payloads still in the index: " + ", ".join(sorted(indexed))
            )
        paths = [self.file_path(name) for name in names]
        for path in paths:
            path.unlink(missing_ok=True)
        logger.info("Removed %d payload(s) from %s", len(names), self.file_dir)

    def remove_files(self, file_names: Iterable[str]) -> None:
        """Remove files from the index, then their payloads."""

        names = list(file_names)
        # Reject bad names before touching the index.
        for name in names:
            self.file_path(name)
        self.remove_from_index(names)
        self.remove_from_data_store(names)


__all__ = ["Archive"]
