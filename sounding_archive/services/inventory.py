"""Coverage summary of the archive for one site."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Sequence

from sounding_archive.models import Location, Site, SoundingType
from sounding_archive.services.index import ArchiveIndex, normalize_code


@dataclass
class Inventory:
    """First and last init times per sounding type at a site, with the gaps between them."""

    site: Site
    sounding_types: list[SoundingType] = field(default_factory=list)
    ranges: dict[str, tuple[datetime, datetime]] = field(default_factory=dict)
    missing: dict[str, list[tuple[datetime, datetime]]] = field(default_factory=dict)
    locations: dict[str, list[Location]] = field(default_factory=dict)

    def range_for(self, sounding_type: SoundingType | str) -> tuple[datetime, datetime] | None:
        return self.ranges.get(_key(sounding_type))

    def missing_for(self, sounding_type: SoundingType | str) -> list[tuple[datetime, datetime]]:
        return self.missing.get(_key(sounding_type), [])

    def locations_for(self, sounding_type: SoundingType | str) -> list[Location]:
        return self.locations.get(_key(sounding_type), [])


def _key(sounding_type: SoundingType | str) -> str:
    if isinstance(sounding_type, SoundingType):
        return normalize_code(sounding_type.type)
    return normalize_code(sounding_type)


def missing_ranges(
    init_times: Sequence[datetime], interval_hours: int
) -> list[tuple[datetime, datetime]]:
    """Runs of expected init times absent between the first and last present one.

    Each run is reported as ``(first_missing, last_missing)``, both inclusive.
    """

    if not init_times or interval_hours <= 0:
        return []
    delta = timedelta(hours=interval_hours)
    gaps: list[tuple[datetime, datetime]] = []
    next_time = init_times[0]
    for init_time in init_times:
        if next_time < init_time:
            start = end = next_time
            while next_time < init_time:
                end = next_time
                next_time += delta
            gaps.append((start, end))
        next_time += delta
    return gaps


def build_inventory(index: ArchiveIndex, site: Site | str) -> Inventory:
    """Get an inventory of sounding types and init times for a site."""

    site_row = index.site_info(site.short_name if isinstance(site, Site) else site)
    inventory = Inventory(site=site_row)
    for sounding_type in index.sounding_types_for_site(site_row):
        code = sounding_type.type
        inventory.sounding_types.append(sounding_type)
        inventory.locations[code] = index.locations_for_site_and_type(site_row, sounding_type)

        init_times = index.init_times(site_row, sounding_type)
        if not init_times:
            continue
        inventory.ranges[code] = (init_times[0], init_times[-1])
        if sounding_type.interval:
            inventory.missing[code] = missing_ranges(init_times, sounding_type.interval)
    return inventory


__all__ = ["Inventory", "build_inventory", "missing_ranges"]
