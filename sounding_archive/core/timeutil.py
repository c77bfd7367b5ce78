"""Conversion between datetimes and the stored timestamp text."""

from __future__ import annotations

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def to_utc(value: datetime | str) -> datetime:
    """Return a naive UTC datetime for a datetime or ISO-8601 string.

    Naive inputs are taken to already be UTC. Sub-second precision is dropped.
    """

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Unrecognized timestamp: {value!r}") from exc
    if not isinstance(value, datetime):
        raise TypeError(f"Expected datetime or str, got {type(value).__name__}")
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


def format_timestamp(value: datetime | str) -> str:
    """Canonical text form stored in ``files.init_time`` and ``files.end_time``."""
    return to_utc(value).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    return datetime.strptime(text, TIMESTAMP_FORMAT)


__all__ = ["TIMESTAMP_FORMAT", "format_timestamp", "parse_timestamp", "to_utc"]
