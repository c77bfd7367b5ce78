from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from sounding_archive import Location, NotFound, Site, SoundingType
from sounding_archive.services.inventory import missing_ranges


def _t(hours: int) -> datetime:
    return datetime(2020, 1, 1) + timedelta(hours=hours)


def test_missing_ranges_single_gap():
    assert missing_ranges([_t(0), _t(6), _t(18), _t(24)], 6) == [(_t(12), _t(12))]


def test_missing_ranges_multiple_runs():
    times = [_t(0), _t(24), _t(30), _t(48)]
    assert missing_ranges(times, 6) == [(_t(6), _t(18)), (_t(36), _t(42))]


def test_missing_ranges_complete_or_empty():
    assert missing_ranges([_t(0), _t(6), _t(12)], 6) == []
    assert missing_ranges([], 6) == []


def test_inventory_for_site(archive, index, scenario):
    raob = index.register_type(
        SoundingType(type="RAWINSONDE", file_type="BUFR", interval=12, observed=True)
    )
    mobil = index.register_type(SoundingType(type="MOBIL", file_type="BUFR", observed=True))
    other_loc = index.register_location(Location.from_degrees(35.2, -97.5, 370))

    for hour in (0, 6, 18, 24):
        index.register_file(
            scenario.gfs_id, scenario.koun_id, scenario.location_id, _t(hour), _t(hour + 6),
            f"gfs_{hour}.buf",
        )
    for hour in (0, 36):
        index.register_file(
            raob, scenario.koun_id, scenario.location_id, _t(hour), _t(hour), f"raob_{hour}.bufr"
        )
    index.register_file(mobil, scenario.koun_id, other_loc, _t(3), _t(4), "mobil_3.bufr")

    inv = archive.inventory("koun")

    assert inv.site.short_name == "KOUN"
    assert [t.type for t in inv.sounding_types] == ["GFS", "MOBIL", "RAWINSONDE"]
    assert inv.range_for("GFS") == (_t(0), _t(24))
    assert inv.missing_for("GFS") == [(_t(12), _t(12))]
    assert inv.missing_for("RAWINSONDE") == [(_t(12), _t(24))]
    assert inv.missing_for("MOBIL") == []
    assert "MOBIL" not in inv.missing
    assert [loc.id for loc in inv.locations_for("GFS")] == [scenario.location_id]
    assert [loc.id for loc in inv.locations_for("MOBIL")] == [other_loc]


def test_inventory_unknown_site(archive):
    with pytest.raises(NotFound):
        archive.inventory("KXLY")


def test_inventory_site_without_files(archive, index):
    index.register_site(Site(short_name="KOTX"))
    inv = archive.inventory("KOTX")
    assert inv.sounding_types == []
    assert inv.range_for("GFS") is None
