"""
Simulation execution schemas for API validation.

This module contains Pydantic models for the simulation endpoint:
- SimulationRequest: inline scenario plus optional raw solar export
- SimulationResponse: yearly, monthly, daily and hourly water balance

Volumes follow the engine's conventions: monthly and yearly values in m³,
daily records in litres, flows in m³/h.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .profiles import SolarSourceResponse
from .pumps import CurveSample, PumpCurveSchema


class SimulationRequest(BaseModel):
    """
    Request schema for a single-scenario simulation.

    Attributes:
        scenario: Scenario configuration as a JSON dict (optional). Sections:
            - system: head_m, tank_capacity_liters, daily_demand_liters
            - pump: {"preset": name} or {"points": [...], "reference_head_m": h}
            - solar: {"text": raw export} or {"profile": {"1": [24 values], ...}};
              server-side "file" sources are rejected
            Missing sections fall back to the built-in defaults.
        solar_text: Raw PVGIS hourly export overriding the scenario's solar section.
        min_rows: Minimum number of hourly rows accepted in the export.
        include_daily: Whether to return the 365 daily records.

    Example:
        ```python
        # POST /api/simulate
        {
            "scenario": {
                "system": {"head_m": 120, "tank_capacity_liters": 8000, "daily_demand_liters": 3000},
                "pump": {"preset": "SQF-10 (2kW)"}
            }
        }
        ```
    """

    scenario: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Scenario configuration (JSON), or None for the default",
    )
    solar_text: Optional[str] = Field(
        default=None,
        description="Raw PVGIS hourly export",
    )
    min_rows: Optional[int] = Field(
        default=None,
        ge=0,
        description="Minimum number of hourly rows required in the export",
    )
    include_daily: bool = Field(
        default=True,
        description="Include the per-day served/demand records",
    )


class SystemResponse(BaseModel):
    head_m: float
    tank_capacity_liters: float
    daily_demand_liters: float
    people_served: int


class MonthlySummaryResponse(BaseModel):
    month_index: int = Field(..., ge=0, le=11)
    month: str
    days: int
    pumped_m3: float = Field(..., ge=0.0)
    demand_m3: float = Field(..., ge=0.0)
    deficit_m3: float = Field(..., ge=0.0)
    overflow_m3: float = Field(..., ge=0.0)
    avg_daily_pumped_m3: float = Field(..., ge=0.0)
    reliability_pct: float = Field(..., ge=0.0, le=100.0)


class DailyServedResponse(BaseModel):
    day: int
    month_index: int
    served_liters: float
    demand_liters: float
    pumped_liters: float
    deficit_liters: float


class HourlyPointResponse(BaseModel):
    hour: int
    label: str
    power_w: float
    flow_m3h: float
    demand_m3h: float


class HourlyProfileResponse(BaseModel):
    month_index: int
    points: List[HourlyPointResponse]


class SimulationResponse(BaseModel):
    """
    Response schema for a completed simulation.

    Attributes:
        scenario: Scenario name.
        system: Head, tank, demand and the number of people it covers.
        pump: Datasheet curve used.
        solar: Column used, row count and site metadata of the resource.
        yearly_*: Annual totals in m³.
        days_not_served: Days with a deficit above the tolerance.
        reliability_pct: Share of the annual demand delivered (0-100).
        monthly: Twelve monthly balances.
        daily: Per-day records (empty when not requested).
        hourly_profiles: Average day of each month (power, flow, demand).
        pump_curve: Head-corrected curve samples.
        output_dir: Export directory, when outputs are saved.
    """

    scenario: str
    system: SystemResponse
    pump: PumpCurveSchema
    solar: SolarSourceResponse
    yearly_pumped_m3: float = Field(..., ge=0.0)
    yearly_demand_m3: float = Field(..., ge=0.0)
    yearly_deficit_m3: float = Field(..., ge=0.0)
    yearly_overflow_m3: float = Field(..., ge=0.0)
    days_not_served: int = Field(..., ge=0)
    days_not_served_pct: float
    reliability_pct: float = Field(..., ge=0.0, le=100.0)
    avg_daily_pumped_liters: float
    monthly: List[MonthlySummaryResponse]
    daily: List[DailyServedResponse] = Field(default_factory=list)
    hourly_profiles: List[HourlyProfileResponse]
    pump_curve: List[CurveSample]
    output_dir: Optional[str] = Field(None, description="Output directory path (if saved)")
