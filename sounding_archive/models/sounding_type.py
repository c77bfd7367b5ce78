"""Sounding type (data source) model."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel


class SoundingType(SQLModel, table=True):
    """A model or instrument producing sounding files, e.g. GFS, NAM4KM, RAWINSONDE."""

    __tablename__ = "types"

    id: Optional[int] = Field(default=None, primary_key=True)
    type: str = Field(unique=True, nullable=False, description="Source code such as GFS or MOBIL")
    file_type: str = Field(nullable=False, description="File format tag (BUFKIT, BUFR, ...)")
    interval: Optional[int] = Field(
        default=None, description="Hours between model runs or launches"
    )
    observed: bool = Field(default=False, nullable=False)

    @property
    def is_observed(self) -> bool:
        return bool(self.observed)

    @property
    def is_modeled(self) -> bool:
        return not self.observed


__all__ = ["SoundingType"]
