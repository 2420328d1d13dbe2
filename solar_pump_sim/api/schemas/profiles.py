"""
Solar resource schemas for API validation.

Covers parsing of raw PVGIS hourly exports into monthly average profiles
and the description of the resource used by a simulation.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SiteResponse(BaseModel):
    """Site metadata found in the export preamble (display only)."""

    lat: Optional[float] = None
    lon: Optional[float] = None
    elevation_m: Optional[float] = None
    kwp: Optional[float] = None
    slope_deg: Optional[float] = None
    azimuth_deg: Optional[float] = None
    radiation_db: Optional[str] = None
    name: Optional[str] = None


class SolarSourceResponse(BaseModel):
    """
    Description of a parsed solar resource.

    Attributes:
        column_used: "P (PV power)" or "G(i) (irradiance)".
        uses_irradiance: True when values are irradiance (W/m²), which
            approximate the output of a ~1 kWp array.
        row_count: Hourly rows that contributed (0 for built-in profiles).
        description: Human readable load status.
        site: Site metadata.
    """

    column_used: str
    uses_irradiance: bool
    row_count: int = Field(..., ge=0)
    description: str
    site: SiteResponse


class SolarParseRequest(BaseModel):
    """
    Request schema for parsing a raw PVGIS export.

    Example:
        ```python
        # POST /api/solar/parse
        {"text": "Latitude (decimal degrees):\\t1.406\\n...time,P,G(i),...\\n20230101:0006,0.0,0.0,..."}
        ```
    """

    text: str = Field(..., min_length=1, description="Raw PVGIS hourly export")
    min_rows: Optional[int] = Field(default=None, ge=0)


class SolarParseResponse(SolarSourceResponse):
    """Parsed resource plus its month → 24 hourly averages table."""

    profile: Dict[int, List[float]]
