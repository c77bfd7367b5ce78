"""Reference data (sounding types and sites) loader and bootstrap helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field

from sounding_archive.core.config import settings
from sounding_archive.models import Site, SoundingType

if TYPE_CHECKING:
    from sounding_archive.services.index import ArchiveIndex

logger = logging.getLogger(__name__)


class SoundingTypeConfig(BaseModel):
    """A model or instrument declared in the reference file."""

    type: str
    file_type: str
    interval: int | None = Field(default=None, ge=1, description="Hours between runs/launches")
    observed: bool = False

    def to_model(self) -> SoundingType:
        return SoundingType(
            type=self.type.upper(),
            file_type=self.file_type.upper(),
            interval=self.interval,
            observed=self.observed,
        )


class SiteConfig(BaseModel):
    """A station declared in the reference file."""

    short_name: str
    long_name: str | None = None
    state: str | None = None
    notes: str | None = None
    mobile: bool = False

    def to_model(self) -> Site:
        return Site(
            short_name=self.short_name.upper(),
            long_name=self.long_name,
            state=self.state,
            notes=self.notes,
            mobile_sounding_site=self.mobile,
        )


class ReferenceFileConfig(BaseModel):
    """Reference data representation loaded from config/reference.yml."""

    types: list[SoundingTypeConfig] = Field(default_factory=list)
    sites: list[SiteConfig] = Field(default_factory=list)


def load_reference_config(path: str | Path | None = None) -> ReferenceFileConfig:
    """Load reference data from YAML; a missing file yields an empty configuration."""

    config_path = Path(path or settings.reference_config_path)
    data: dict[str, Any] = {}
    if config_path.exists():
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    else:
        logger.debug("No reference data file at %s", config_path)
    return ReferenceFileConfig.model_validate(data)


def bootstrap_reference_data(
    index: "ArchiveIndex", path: str | Path | None = None
) -> dict[str, dict[str, int]]:
    """Ensure every configured type and site exists in the index.

    Returns the ids keyed by type code and site short name.
    """

    config = load_reference_config(path)
    type_ids = {entry.type.upper(): index.register_type(entry.to_model()) for entry in config.types}
    site_ids = {
        entry.short_name.upper(): index.register_site(entry.to_model()) for entry in config.sites
    }
    logger.info(
        "Bootstrapped reference data: %d type(s), %d site(s)", len(type_ids), len(site_ids)
    )
    return {"types": type_ids, "sites": site_ids}


__all__ = [
    "ReferenceFileConfig",
    "SiteConfig",
    "SoundingTypeConfig",
    "bootstrap_reference_data",
    "load_reference_config",
]
