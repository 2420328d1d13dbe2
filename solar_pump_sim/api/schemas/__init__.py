"""
Pydantic schemas for API request/response validation.

This package contains all Pydantic models used for API validation,
organized by domain:
- simulation: simulation request/response schemas
- profiles: solar resource parsing schemas
- pumps: pump datasheet and curve schemas

All schemas are re-exported from this module.

Example:
    ```python
    # Both import styles work:
    from solar_pump_sim.api.schemas import SimulationResponse
    from solar_pump_sim.api.schemas.simulation import SimulationResponse
    ```
"""

from __future__ import annotations

from .profiles import SiteResponse, SolarParseRequest, SolarParseResponse, SolarSourceResponse
from .pumps import CurveSample, PumpCurveSchema, PumpPointSchema, PumpPresetResponse
from .simulation import (
    DailyServedResponse,
    HourlyPointResponse,
    HourlyProfileResponse,
    MonthlySummaryResponse,
    SimulationRequest,
    SimulationResponse,
    SystemResponse,
)

__all__ = [
    # Solar resource schemas
    "SiteResponse",
    "SolarParseRequest",
    "SolarParseResponse",
    "SolarSourceResponse",
    # Pump schemas
    "CurveSample",
    "PumpCurveSchema",
    "PumpPointSchema",
    "PumpPresetResponse",
    # Simulation schemas
    "DailyServedResponse",
    "HourlyPointResponse",
    "HourlyProfileResponse",
    "MonthlySummaryResponse",
    "SimulationRequest",
    "SimulationResponse",
    "SystemResponse",
]
