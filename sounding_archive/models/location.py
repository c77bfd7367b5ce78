"""Geographic location model."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

MICRODEGREES = 1_000_000


def to_microdegrees(degrees: float) -> int:
    """Scale decimal degrees by 1,000,000, truncating toward zero."""
    # Decimal keeps 35.123456 from becoming 35123455.99999...
    return int(Decimal(repr(float(degrees))) * MICRODEGREES)


class Location(SQLModel, table=True):
    """A geographic fix. Identity is the (latitude, longitude, elevation) triple."""

    __tablename__ = "locations"
    __table_args__ = (
        Index("no_dups_locations", "latitude", "longitude", "elevation_meters", unique=True),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    latitude: Optional[int] = Field(default=None, description="Degrees * 1,000,000, truncated")
    longitude: Optional[int] = Field(default=None, description="Degrees * 1,000,000, truncated")
    elevation_meters: Optional[int] = None
    tz_offset_seconds: Optional[int] = Field(default=None, description="Offset from UTC")

    @classmethod
    def from_degrees(
        cls,
        latitude: float,
        longitude: float,
        elevation_meters: Optional[float] = None,
        tz_offset_seconds: Optional[int] = None,
    ) -> "Location":
        """Build an unsaved location from decimal degrees.

        Raises ValueError if latitude is outside [-90, 90] or longitude outside [-180, 180].
        """

        if not -90.0 <= latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {latitude}")
        if not -180.0 <= longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {longitude}")
        return cls(
            latitude=to_microdegrees(latitude),
            longitude=to_microdegrees(longitude),
            elevation_meters=int(elevation_meters) if elevation_meters is not None else None,
            tz_offset_seconds=tz_offset_seconds,
        )

    @property
    def latitude_degrees(self) -> float | None:
        return None if self.latitude is None else self.latitude / MICRODEGREES

    @property
    def longitude_degrees(self) -> float | None:
        return None if self.longitude is None else self.longitude / MICRODEGREES

    @property
    def coordinates(self) -> tuple[Optional[int], Optional[int], Optional[int]]:
        return (self.latitude, self.longitude, self.elevation_meters)


__all__ = ["Location", "MICRODEGREES", "to_microdegrees"]
