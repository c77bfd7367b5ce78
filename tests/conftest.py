"""Shared fixtures: every test gets a fresh archive on disk."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from sounding_archive import Archive, ArchiveIndex, Location, Site, SoundingType


@dataclass
class Scenario:
    gfs_id: int
    koun_id: int
    location_id: int


@pytest.fixture()
def archive(tmp_path):
    arch = Archive.create(tmp_path / "archive")
    try:
        yield arch
    finally:
        arch.close()


@pytest.fixture()
def index(archive) -> ArchiveIndex:
    return archive.index


@pytest.fixture()
def scenario(index) -> Scenario:
    """GFS at KOUN with one registered location, no files yet."""

    gfs_id = index.register_type(
        SoundingType(type="GFS", file_type="BUFKIT", interval=6, observed=False)
    )
    koun_id = index.register_site(Site(short_name="KOUN"))
    location_id = index.register_location(
        Location(latitude=35123456, longitude=-97456789, elevation_meters=362, tz_offset_seconds=-18000)
    )
    return Scenario(gfs_id=gfs_id, koun_id=koun_id, location_id=location_id)


@pytest.fixture()
def gfs_file(index, scenario):
    return index.register_file(
        scenario.gfs_id,
        scenario.koun_id,
        scenario.location_id,
        "2020-01-01T00:00:00Z",
        "2020-01-01T06:00:00Z",
        "gfs_koun_2020010100.buf",
    )
