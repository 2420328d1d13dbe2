from .calendar_utils import MONTH_LENGTHS, MONTH_NAMES, build_calendar
from .errors import ConfigurationError, MalformedInput, SolarPumpError
from .simulation.pump import (
    PUMP_PRESETS,
    PiecewiseCurve,
    PumpCurve,
    PumpCurvePoint,
    build_curve,
    flow_at,
    sample_curve,
    scale_for_head,
)
from .simulation.reservoir import SimulationConfig, SimulationResult, hourly_profile, simulate
from .simulation.solar import (
    MonthlyProfile,
    SiteMetadata,
    SolarResourceData,
    make_default_profile_for_kapchorwa,
    parse_pvgis_csv,
    parse_pvgis_file,
)
from .result_builder import ResultBuilder
from .application import SolarPumpApplication

__all__ = [
    "MONTH_LENGTHS",
    "MONTH_NAMES",
    "build_calendar",
    "ConfigurationError",
    "MalformedInput",
    "SolarPumpError",
    "PUMP_PRESETS",
    "PiecewiseCurve",
    "PumpCurve",
    "PumpCurvePoint",
    "build_curve",
    "flow_at",
    "sample_curve",
    "scale_for_head",
    "SimulationConfig",
    "SimulationResult",
    "hourly_profile",
    "simulate",
    "MonthlyProfile",
    "SiteMetadata",
    "SolarResourceData",
    "make_default_profile_for_kapchorwa",
    "parse_pvgis_csv",
    "parse_pvgis_file",
    "ResultBuilder",
    "SolarPumpApplication",
]
