"""
Simulation execution API endpoints.

Endpoints:
- POST /simulate: Year-long tank balance for an inline scenario

The request carries the complete scenario (system, pump, solar sections) and
optionally the raw text of a PVGIS export; the simulation runs immediately
and the full result is returned.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ...application import SolarPumpApplication
from ...errors import ConfigurationError, MalformedInput
from .. import dependencies
from ..schemas import simulation as sim_schemas

router = APIRouter(prefix="/api", tags=["simulation"])


@router.post("/simulate", response_model=sim_schemas.SimulationResponse)
def trigger_simulation(
    payload: sim_schemas.SimulationRequest | None = None,
    app_service: SolarPumpApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.SimulationResponse:
    """
    Execute a single-scenario simulation.

    Args:
        payload: Simulation request with optional scenario configuration and
            raw solar export. If None, the default scenario is simulated.
        app_service: Application service (dependency injected).

    Returns:
        SimulationResponse with yearly totals, reliability, monthly and
        daily balances, hourly profiles and the head-corrected pump curve.

    Raises:
        HTTPException 422: The solar export is malformed.
        HTTPException 400: Invalid pump or system configuration, or a
            scenario naming a server-side solar file.

    Example:
        ```python
        # POST /api/simulate
        {"scenario": {"system": {"daily_demand_liters": 4000}}}

        # Response (abridged)
        {
            "scenario": "custom_scenario",
            "reliability_pct": 97.4,
            "days_not_served": 21,
            ...
        }
        ```
    """
    payload = payload or sim_schemas.SimulationRequest()
    try:
        summary = app_service.run_simulation(
            scenario_data=payload.scenario,
            solar_text=payload.solar_text,
            min_rows=payload.min_rows,
            allow_files=False,
        )
    except MalformedInput as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not payload.include_daily:
        summary["daily"] = []
    return sim_schemas.SimulationResponse(**summary)
