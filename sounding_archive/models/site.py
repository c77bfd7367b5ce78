"""Sounding site model."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy import text
from sqlmodel import Field, SQLModel


class StateProv(str, Enum):
    """State/territory abbreviations usable as a site's ``state``."""

    AL = "AL"
    AK = "AK"
    AZ = "AZ"
    AR = "AR"
    CA = "CA"
    CO = "CO"
    CT = "CT"
    DE = "DE"
    FL = "FL"
    GA = "GA"
    HI = "HI"
    ID = "ID"
    IL = "IL"
    IN = "IN"
    IA = "IA"
    KS = "KS"
    KY = "KY"
    LA = "LA"
    ME = "ME"
    MD = "MD"
    MA = "MA"
    MI = "MI"
    MN = "MN"
    MS = "MS"
    MO = "MO"
    MT = "MT"
    NE = "NE"
    NV = "NV"
    NH = "NH"
    NJ = "NJ"
    NM = "NM"
    NY = "NY"
    NC = "NC"
    ND = "ND"
    OH = "OH"
    OK = "OK"
    OR = "OR"
    PA = "PA"
    RI = "RI"
    SC = "SC"
    SD = "SD"
    TN = "TN"
    TX = "TX"
    UT = "UT"
    VT = "VT"
    VA = "VA"
    WA = "WA"
    WV = "WV"
    WI = "WI"
    WY = "WY"
    # Commonwealth and territories
    AS = "AS"
    DC = "DC"
    FM = "FM"
    MH = "MH"
    MP = "MP"
    PW = "PW"
    PR = "PR"
    VI = "VI"


class Site(SQLModel, table=True):
    """A station or platform that produces soundings."""

    __tablename__ = "sites"

    id: Optional[int] = Field(default=None, primary_key=True)
    short_name: str = Field(
        unique=True, nullable=False, description="External identifier (WMO number, ICAO id)"
    )
    long_name: Optional[str] = Field(default=None, description="Common name")
    state: Optional[str] = Field(default=None, description="State/province code")
    notes: Optional[str] = None
    mobile_sounding_site: bool = Field(
        default=False, sa_column_kwargs={"server_default": text("0")}
    )

    @property
    def is_mobile(self) -> bool:
        return bool(self.mobile_sounding_site)

    @property
    def state_prov(self) -> StateProv | None:
        if not self.state:
            return None
        try:
            return StateProv(self.state.upper())
        except ValueError:
            return None

    @property
    def incomplete(self) -> bool:
        """True if long name or state is missing. Notes are rarely set and not counted."""
        return self.long_name is None or self.state is None


__all__ = ["Site", "StateProv"]
