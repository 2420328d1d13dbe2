"""
Pump datasheet API endpoints.

Endpoints:
- GET /pumps: Datasheet presets with sampled curves
- GET /pumps/curve: Head-corrected curve of one preset
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ...application import SolarPumpApplication
from ...errors import ConfigurationError
from ...simulation.pump import DEFAULT_PUMP_PRESET, get_pump_preset, sample_curve
from .. import dependencies
from ..schemas import pumps as pump_schemas

router = APIRouter(prefix="/api", tags=["pumps"])


@router.get("/pumps", response_model=list[pump_schemas.PumpPresetResponse])
def list_pumps(
    head_m: float | None = Query(default=None, gt=0.0),
    n_steps: int = Query(default=50, ge=1, le=1000),
    app_service: SolarPumpApplication = Depends(dependencies.get_application_service),
) -> list[pump_schemas.PumpPresetResponse]:
    """
    List datasheet presets, curves sampled at ``head_m`` (reference head if omitted).
    """
    return [
        pump_schemas.PumpPresetResponse(**entry)
        for entry in app_service.list_pumps(head_m=head_m, n_steps=n_steps)
    ]


@router.get("/pumps/curve", response_model=list[pump_schemas.CurveSample])
def pump_curve(
    preset: str = Query(default=DEFAULT_PUMP_PRESET),
    head_m: float = Query(default=150.0, gt=0.0),
    n_steps: int = Query(default=200, ge=1, le=1000),
) -> list[pump_schemas.CurveSample]:
    """
    Sample the power → flow curve of ``preset`` corrected to ``head_m``.

    Raises:
        HTTPException 404: Unknown preset.
    """
    try:
        pump = get_pump_preset(preset)
    except ConfigurationError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    curve = pump.head_corrected(head_m)
    return [
        pump_schemas.CurveSample(power_w=p, flow_m3h=f)
        for p, f in sample_curve(curve, n_steps=n_steps)
    ]
