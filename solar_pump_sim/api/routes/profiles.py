"""
Solar resource API endpoints.

Endpoints:
- POST /solar/parse: Average a raw PVGIS hourly export into a monthly profile
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ...application import SolarPumpApplication
from ...errors import MalformedInput
from .. import dependencies
from ..schemas import profiles as profile_schemas

router = APIRouter(prefix="/api", tags=["profiles"])


@router.post("/solar/parse", response_model=profile_schemas.SolarParseResponse)
def parse_solar_export(
    payload: profile_schemas.SolarParseRequest,
    app_service: SolarPumpApplication = Depends(dependencies.get_application_service),
) -> profile_schemas.SolarParseResponse:
    """
    Parse a PVGIS export and return the month × hour average profile.

    Raises:
        HTTPException 422: No header, no P/G(i) column, or too few rows.
    """
    try:
        parsed = app_service.parse_solar(payload.text, min_rows=payload.min_rows)
    except MalformedInput as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return profile_schemas.SolarParseResponse(**parsed)
