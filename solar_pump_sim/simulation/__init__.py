"""
Core solar water pumping models.

This package collects the components of the pumping simulation:

* Solar resource ingestion (`solar`) turning hourly PVGIS exports into a
  month × hour average profile.
* The pump performance model (`pump`) building a head-corrected
  piecewise-linear power → flow function from datasheet points.
* The reservoir engine (`reservoir`) stepping the storage tank hour by hour
  through one year and aggregating reliability statistics.

Modules are kept together so that higher layers (`application`, FastAPI
routes, CLI) import the whole simulation domain from a single namespace.
"""

from __future__ import annotations

from .pump import (
    DEFAULT_PUMP_PRESET,
    PUMP_PRESETS,
    PiecewiseCurve,
    PiecewiseSegment,
    PumpCurve,
    PumpCurvePoint,
    build_curve,
    flow_at,
    get_pump_preset,
    sample_curve,
    scale_for_head,
)
from .reservoir import (
    DailyServed,
    HourlyPoint,
    MonthlySummary,
    SimulationConfig,
    SimulationResult,
    hourly_profile,
    simulate,
)
from .solar import (
    DEFAULT_SITE,
    MonthlyProfile,
    SiteMetadata,
    SolarResourceData,
    make_default_profile_for_kapchorwa,
    parse_pvgis_csv,
    parse_pvgis_file,
)

__all__ = [
    # Solar resource
    "DEFAULT_SITE",
    "MonthlyProfile",
    "SiteMetadata",
    "SolarResourceData",
    "make_default_profile_for_kapchorwa",
    "parse_pvgis_csv",
    "parse_pvgis_file",
    # Pump model
    "DEFAULT_PUMP_PRESET",
    "PUMP_PRESETS",
    "PiecewiseCurve",
    "PiecewiseSegment",
    "PumpCurve",
    "PumpCurvePoint",
    "build_curve",
    "flow_at",
    "get_pump_preset",
    "sample_curve",
    "scale_for_head",
    # Reservoir engine
    "DailyServed",
    "HourlyPoint",
    "MonthlySummary",
    "SimulationConfig",
    "SimulationResult",
    "hourly_profile",
    "simulate",
]
