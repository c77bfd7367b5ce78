"""Archived file record model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from sounding_archive.core.timeutil import parse_timestamp


class FileRecord(SQLModel, table=True):
    """One archived payload, keyed by its on-disk file name."""

    __tablename__ = "files"
    __table_args__ = (
        # For fast searches by file name.
        Index("fname", "file_name", unique=True),
        # For fast searches by metadata.
        Index("no_dups_files", "type_id", "site_id", "init_time", unique=True),
    )

    type_id: int = Field(foreign_key="types.id", nullable=False)
    site_id: int = Field(foreign_key="sites.id", nullable=False)
    location_id: int = Field(foreign_key="locations.id", nullable=False)
    init_time: str = Field(nullable=False, description="UTC, YYYY-MM-DDTHH:MM:SSZ")
    end_time: str = Field(nullable=False, description="UTC, YYYY-MM-DDTHH:MM:SSZ")
    file_name: str = Field(primary_key=True)

    @property
    def init_datetime(self) -> datetime:
        return parse_timestamp(self.init_time)

    @property
    def end_datetime(self) -> datetime:
        return parse_timestamp(self.end_time)


__all__ = ["FileRecord"]
