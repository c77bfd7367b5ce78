"""Relational index mapping sounding identity to archived file names."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlmodel import Session, delete, select, update

from sounding_archive.core.errors import NotFound
from sounding_archive.core.timeutil import format_timestamp, parse_timestamp
from sounding_archive.db.session import get_session, init_db
from sounding_archive.models import FileRecord, Location, Site, SoundingType
from sounding_archive.models.location import MICRODEGREES

logger = logging.getLogger(__name__)


@dataclass
class ArchivedFile:
    """A file record joined with its type, site and location rows."""

    record: FileRecord
    sounding_type: SoundingType
    site: Site
    location: Location

    @property
    def file_name(self) -> str:
        return self.record.file_name

    @property
    def init_time(self) -> datetime:
        return self.record.init_datetime

    @property
    def end_time(self) -> datetime:
        return self.record.end_datetime


def normalize_code(code: str) -> str:
    """Type codes and site short names are stored upper case."""
    return code.strip().upper()


def _code_of(sounding_type: SoundingType | str) -> str:
    if isinstance(sounding_type, SoundingType):
        return normalize_code(sounding_type.type)
    return normalize_code(sounding_type)


def _name_of(site: Site | str) -> str:
    if isinstance(site, Site):
        return normalize_code(site.short_name)
    return normalize_code(site)


def _joined_files():
    return (
        select(FileRecord, SoundingType, Site, Location)
        .join(SoundingType, SoundingType.id == FileRecord.type_id)
        .join(Site, Site.id == FileRecord.site_id)
        .join(Location, Location.id == FileRecord.location_id)
    )


def _site_values(site: Site, short_name: str) -> dict:
    return {
        "short_name": short_name,
        "long_name": site.long_name,
        "state": site.state.upper() if site.state else None,
        "notes": site.notes,
        "mobile_sounding_site": bool(site.mobile_sounding_site),
    }


def _upsert_type(session: Session, sounding_type: SoundingType) -> int:
    if not sounding_type.file_type:
        raise ValueError("Sounding types require a file_type")
    code = _code_of(sounding_type)
    session.exec(
        sqlite_insert(SoundingType)
        .values(
            type=code,
            file_type=sounding_type.file_type.strip().upper(),
            interval=sounding_type.interval,
            observed=bool(sounding_type.observed),
        )
        .on_conflict_do_nothing(index_elements=["type"])
    )
    type_id = session.exec(select(SoundingType.id).where(SoundingType.type == code)).one()
    logger.debug("Registered sounding type %s as id %s", code, type_id)
    return type_id


def _upsert_site(session: Session, site: Site) -> int:
    short_name = _name_of(site)
    session.exec(
        sqlite_insert(Site)
        .values(**_site_values(site, short_name))
        .on_conflict_do_nothing(index_elements=["short_name"])
    )
    site_id = session.exec(select(Site.id).where(Site.short_name == short_name)).one()
    logger.debug("Registered site %s as id %s", short_name, site_id)
    return site_id


def _upsert_location(session: Session, location: Location) -> int:
    if location.latitude is None or location.longitude is None:
        raise ValueError("Locations require a latitude and longitude")
    latitude, longitude = int(location.latitude), int(location.longitude)
    if abs(latitude) > 90 * MICRODEGREES:
        raise ValueError(f"Latitude out of range: {latitude / MICRODEGREES}")
    if abs(longitude) > 180 * MICRODEGREES:
        raise ValueError(f"Longitude out of range: {longitude / MICRODEGREES}")
    values = {
        "latitude": latitude,
        "longitude": longitude,
        "elevation_meters": location.elevation_meters,
        "tz_offset_seconds": location.tz_offset_seconds,
    }
    match = select(Location.id).where(
        Location.latitude == latitude,
        Location.longitude == longitude,
    )
    if values["elevation_meters"] is None:
        # NULLs never collide in the unique index; the write lock serializes this path.
        location_id = session.exec(match.where(Location.elevation_meters.is_(None))).first()
        if location_id is None:
            row = Location(**values)
            session.add(row)
            session.flush()
            location_id = row.id
        return location_id
    session.exec(
        sqlite_insert(Location)
        .values(**values)
        .on_conflict_do_nothing(index_elements=["latitude", "longitude", "elevation_meters"])
    )
    return session.exec(match.where(Location.elevation_meters == values["elevation_meters"])).one()


def _insert_file(
    session: Session,
    type_id: int,
    site_id: int,
    location_id: int,
    init_time: datetime | str,
    end_time: datetime | str,
    file_name: str,
) -> FileRecord:
    record = FileRecord(
        type_id=type_id,
        site_id=site_id,
        location_id=location_id,
        init_time=format_timestamp(init_time),
        end_time=format_timestamp(end_time),
        file_name=file_name,
    )
    session.add(record)
    session.flush()
    return record


class ArchiveIndex:
    """Persist and query the archive index.

    Each public method runs in its own session and transaction. Uniqueness and
    foreign keys are enforced by the store; conflicts surface as
    ``DuplicateKey`` or ``ReferentialViolation``.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_schema(self) -> None:
        init_db(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Dimension rows: insert-or-reuse by natural key
    # ------------------------------------------------------------------

    def register_type(self, sounding_type: SoundingType) -> int:
        """Return the id of the type with this code, inserting it if new."""

        with get_session(self.engine, write=True) as session:
            return _upsert_type(session, sounding_type)

    def register_site(self, site: Site) -> int:
        """Return the id of the site with this short name, inserting it if new."""

        with get_session(self.engine, write=True) as session:
            return _upsert_site(session, site)

    def register_location(self, location: Location) -> int:
        """Return the id of the location at these coordinates, inserting it if new.

        The time zone offset is only stored when the location is first seen.
        """

        with get_session(self.engine, write=True) as session:
            return _upsert_location(session, location)

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    def add_site(self, site: Site) -> Site:
        """Insert a new site; ``DuplicateKey`` if the short name is taken."""

        row = Site(**_site_values(site, _name_of(site)))
        with get_session(self.engine, write=True) as session:
            session.add(row)
            session.flush()
        return row

    def update_site(self, site: Site) -> Site:
        """Correct the descriptive fields of an existing site."""

        short_name = _name_of(site)
        values = _site_values(site, short_name)
        values.pop("short_name")
        with get_session(self.engine, write=True) as session:
            result = session.exec(update(Site).where(Site.short_name == short_name).values(**values))
            if result.rowcount == 0:
                raise NotFound(f"No such site in the index: {short_name}")
            updated = session.exec(select(Site).where(Site.short_name == short_name)).one()
        return updated

    def site_info(self, short_name: str) -> Site:
        name = normalize_code(short_name)
        with get_session(self.engine) as session:
            site = session.exec(select(Site).where(Site.short_name == name)).first()
        if site is None:
            raise NotFound(f"No such site in the index: {name}")
        return site

    def site_exists(self, short_name: str) -> bool:
        try:
            self.site_info(short_name)
        except NotFound:
            return False
        return True

    def sites(self) -> list[Site]:
        with get_session(self.engine) as session:
            return list(session.exec(select(Site).order_by(Site.short_name)).all())

    # ------------------------------------------------------------------
    # Sounding types and locations
    # ------------------------------------------------------------------

    def sounding_type(self, code: str) -> SoundingType:
        code = normalize_code(code)
        with get_session(self.engine) as session:
            row = session.exec(select(SoundingType).where(SoundingType.type == code)).first()
        if row is None:
            raise NotFound(f"No such sounding type in the index: {code}")
        return row

    def sounding_types(self) -> list[SoundingType]:
        with get_session(self.engine) as session:
            return list(session.exec(select(SoundingType).order_by(SoundingType.type)).all())

    def sounding_types_for_site(self, site: Site | str) -> list[SoundingType]:
        """Types with at least one file archived for the site."""

        stmt = (
            select(SoundingType)
            .where(
                SoundingType.id.in_(
                    select(FileRecord.type_id)
                    .join(Site, Site.id == FileRecord.site_id)
                    .where(Site.short_name == _name_of(site))
                )
            )
            .order_by(SoundingType.type)
        )
        with get_session(self.engine) as session:
            return list(session.exec(stmt).all())

    def locations_for_site_and_type(
        self, site: Site | str, sounding_type: SoundingType | str
    ) -> list[Location]:
        stmt = (
            select(Location)
            .where(
                Location.id.in_(
                    select(FileRecord.location_id)
                    .join(Site, Site.id == FileRecord.site_id)
                    .join(SoundingType, SoundingType.id == FileRecord.type_id)
                    .where(
                        Site.short_name == _name_of(site),
                        SoundingType.type == _code_of(sounding_type),
                    )
                )
            )
            .order_by(Location.id)
        )
        with get_session(self.engine) as session:
            return list(session.exec(stmt).all())

    # ------------------------------------------------------------------
    # File records
    # ------------------------------------------------------------------

    def register_file(
        self,
        type_id: int,
        site_id: int,
        location_id: int,
        init_time: datetime | str,
        end_time: datetime | str,
        file_name: str,
    ) -> FileRecord:
        """Insert a file record; never overwrites an existing one.

        Raises ``DuplicateKey`` if the file name or the (type, site, init_time)
        triple is already archived, ``ReferentialViolation`` for unknown ids.
        """

        with get_session(self.engine, write=True) as session:
            record = _insert_file(
                session, type_id, site_id, location_id, init_time, end_time, file_name
            )
        logger.debug("Indexed %s", file_name)
        return record

    def register_sounding(
        self,
        sounding_type: SoundingType,
        site: Site,
        location: Location,
        init_time: datetime | str,
        end_time: datetime | str,
        file_name: str,
    ) -> FileRecord:
        """Register the type, site and location of a file and index it.

        Everything happens in one write transaction: if the file insert fails
        (for example with ``DuplicateKey``) no new type, site or location row is
        left behind.
        """

        with get_session(self.engine, write=True) as session:
            type_id = _upsert_type(session, sounding_type)
            site_id = _upsert_site(session, site)
            location_id = _upsert_location(session, location)
            record = _insert_file(
                session, type_id, site_id, location_id, init_time, end_time, file_name
            )
        logger.debug("Indexed %s", file_name)
        return record

    def lookup_by_file_name(self, file_name: str) -> ArchivedFile:
        stmt = _joined_files().where(FileRecord.file_name == file_name)
        with get_session(self.engine) as session:
            row = session.exec(stmt).first()
        if row is None:
            raise NotFound(f"No such file in the index: {file_name}")
        return ArchivedFile(*row)

    def lookup_by_metadata(
        self,
        sounding_type: SoundingType | str,
        site: Site | str,
        init_time: datetime | str,
    ) -> ArchivedFile:
        code = _code_of(sounding_type)
        short_name = _name_of(site)
        init_text = format_timestamp(init_time)
        stmt = _joined_files().where(
            SoundingType.type == code,
            Site.short_name == short_name,
            FileRecord.init_time == init_text,
        )
        with get_session(self.engine) as session:
            row = session.exec(stmt).first()
        if row is None:
            raise NotFound(f"No {code} file for {short_name} at {init_text}")
        return ArchivedFile(*row)

    def file_exists(
        self,
        sounding_type: SoundingType | str,
        site: Site | str,
        init_time: datetime | str,
    ) -> bool:
        try:
            self.lookup_by_metadata(sounding_type, site, init_time)
        except NotFound:
            return False
        return True

    def files_in_range(
        self,
        sounding_type: SoundingType | str | None = None,
        site: Site | str | None = None,
        start: datetime | str | None = None,
        end: datetime | str | None = None,
    ) -> list[ArchivedFile]:
        """Files whose init time is within [start, end], oldest first.

        Either bound may be omitted for an open interval.
        """

        stmt = _joined_files()
        if sounding_type is not None:
            stmt = stmt.where(SoundingType.type == _code_of(sounding_type))
        if site is not None:
            stmt = stmt.where(Site.short_name == _name_of(site))
        if start is not None:
            stmt = stmt.where(FileRecord.init_time >= format_timestamp(start))
        if end is not None:
            stmt = stmt.where(FileRecord.init_time <= format_timestamp(end))
        stmt = stmt.order_by(FileRecord.init_time, FileRecord.file_name)
        with get_session(self.engine) as session:
            return [ArchivedFile(*row) for row in session.exec(stmt).all()]

    def init_times(
        self, site: Site | str, sounding_type: SoundingType | str
    ) -> list[datetime]:
        stmt = (
            select(FileRecord.init_time)
            .join(SoundingType, SoundingType.id == FileRecord.type_id)
            .join(Site, Site.id == FileRecord.site_id)
            .where(Site.short_name == _name_of(site), SoundingType.type == _code_of(sounding_type))
            .order_by(FileRecord.init_time)
        )
        with get_session(self.engine) as session:
            return [parse_timestamp(value) for value in session.exec(stmt).all()]

    def most_recent_init_time(
        self, site: Site | str, sounding_type: SoundingType | str
    ) -> datetime:
        stmt = (
            select(func.max(FileRecord.init_time))
            .join(SoundingType, SoundingType.id == FileRecord.type_id)
            .join(Site, Site.id == FileRecord.site_id)
            .where(Site.short_name == _name_of(site), SoundingType.type == _code_of(sounding_type))
        )
        with get_session(self.engine) as session:
            latest = session.exec(stmt).one()
        if latest is None:
            raise NotFound(
                f"No {_code_of(sounding_type)} files archived for {_name_of(site)}"
            )
        return parse_timestamp(latest)

    def count(self) -> int:
        with get_session(self.engine) as session:
            return session.exec(select(func.count()).select_from(FileRecord)).one()

    def file_names(self) -> list[str]:
        with get_session(self.engine) as session:
            return list(session.exec(select(FileRecord.file_name).order_by(FileRecord.file_name)).all())

    def delete_file(self, file_name: str) -> None:
        """Remove a record; ``NotFound`` if no such file name is indexed."""
        self.delete_files([file_name])

    def delete_files(self, file_names: Iterable[str]) -> None:
        """Remove several records in one transaction, all or nothing."""

        names: Sequence[str] = list(file_names)
        with get_session(self.engine, write=True) as session:
            for name in names:
                self._delete_one(session, name)
        logger.info("Removed %d file(s) from the index", len(names))

    @staticmethod
    def _delete_one(session: Session, file_name: str) -> None:
        result = session.exec(delete(FileRecord).where(FileRecord.file_name == file_name))
        if result.rowcount == 0:
            raise NotFound(f"No such file in the index: {file_name}")


__all__ = ["ArchiveIndex", "ArchivedFile", "normalize_code"]
