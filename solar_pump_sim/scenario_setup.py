from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping

from .errors import ConfigurationError, MalformedInput
from .simulation.pump import DEFAULT_PUMP_PRESET, PumpCurve, PumpCurvePoint, get_pump_preset
from .simulation.reservoir import SimulationConfig
from .simulation.solar import (
    DEFAULT_SITE,
    IRRADIANCE_COLUMN_DESCRIPTION,
    POWER_COLUMN_DESCRIPTION,
    MonthlyProfile,
    SiteMetadata,
    SolarResourceData,
    make_default_profile_for_kapchorwa,
    parse_pvgis_csv,
    parse_pvgis_file,
)

ScenarioSource = Mapping[str, Any] | str | Path | None

DEFAULT_SCENARIO: Dict[str, Any] = {
    "scenario_name": "kapchorwa_default",
    "description": "Kapchorwa, Uganda: SQF-2 pump at 150 m head, 5 m³ tank, 2000 L/day",
    "system": {
        "head_m": 150.0,
        "tank_capacity_liters": 5000.0,
        "daily_demand_liters": 2000.0,
    },
    "pump": {"preset": DEFAULT_PUMP_PRESET},
    "solar": {},
}

_SITE_NUMERIC_FIELDS = ("lat", "lon", "elevation_m", "kwp", "slope_deg", "azimuth_deg")
_SITE_TEXT_FIELDS = ("radiation_db", "name")


def load_scenario_data(source: ScenarioSource = None) -> dict[str, Any]:
    """
    Load scenario data from JSON or return the provided mapping.

    Args:
        source: Path to a JSON file, mapping, or None for the built-in default.

    Returns:
        Dictionary containing scenario configuration.
    """
    if source is None:
        return json.loads(json.dumps(DEFAULT_SCENARIO))
    if isinstance(source, (str, Path)):
        path = Path(source)
        return json.loads(path.read_text(encoding="utf-8"))
    return dict(source)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(
            f"Scenario section '{key}' must be an object, got {type(section).__name__}"
        )
    return section


def build_pump_curve(scenario_data: ScenarioSource = None) -> PumpCurve:
    data = load_scenario_data(scenario_data)
    pump_cfg = _section(data, "pump") or {"preset": DEFAULT_PUMP_PRESET}
    if "points" not in pump_cfg:
        return get_pump_preset(pump_cfg.get("preset", DEFAULT_PUMP_PRESET))

    raw_points = pump_cfg["points"]
    if isinstance(raw_points, (str, bytes, Mapping)) or not hasattr(raw_points, "__iter__"):
        raise ConfigurationError("Pump 'points' must be a list of {flow_m3h, power_w} objects")

    points = []
    for entry in raw_points:
        try:
            points.append(PumpCurvePoint(flow_m3h=float(entry["flow_m3h"]), power_w=float(entry["power_w"])))
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid pump point {entry!r}: expected 'flow_m3h' and 'power_w'"
            ) from exc
    try:
        reference_head_m = float(pump_cfg.get("reference_head_m", 150.0))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"Invalid pump reference head {pump_cfg.get('reference_head_m')!r}"
        ) from exc
    return PumpCurve(
        points=tuple(points),
        reference_head_m=reference_head_m,
        name=str(pump_cfg.get("name", "Custom")),
    )


def _build_site(site_cfg: Any) -> SiteMetadata:
    if not isinstance(site_cfg, Mapping):
        raise MalformedInput("Solar 'site' must be an object")
    fields: Dict[str, Any] = {}
    for key in _SITE_NUMERIC_FIELDS:
        if site_cfg.get(key) is None:
            continue
        try:
            fields[key] = float(site_cfg[key])
        except (TypeError, ValueError) as exc:
            raise MalformedInput(f"Site field '{key}' must be numeric, got {site_cfg[key]!r}") from exc
    for key in _SITE_TEXT_FIELDS:
        if site_cfg.get(key) is not None:
            fields[key] = str(site_cfg[key])
    return SiteMetadata(**fields)


def build_solar_data(
    scenario_data: ScenarioSource = None,
    *,
    min_rows: int | None = None,
    allow_files: bool = True,
) -> SolarResourceData:
    """
    Resolve the solar resource of a scenario.

    The ``solar`` section may carry a PVGIS export path (``file``), its raw
    contents (``text``) or an already averaged ``profile`` mapping. Without
    any of them the built-in Kapchorwa profile is used.

    Args:
        scenario_data: Scenario mapping, JSON path or None.
        min_rows: Minimum row count accepted when parsing an export.
        allow_files: When False a ``file`` source is rejected instead of read
            from local disk (remote callers).

    Raises:
        ConfigurationError: Malformed section, or a ``file`` source while
            ``allow_files`` is False.
        MalformedInput: The export or inline profile cannot be used.
    """
    data = load_scenario_data(scenario_data)
    solar_cfg = _section(data, "solar")

    if solar_cfg.get("file"):
        if not allow_files:
            raise ConfigurationError(
                "Solar 'file' sources are not accepted here; send the export as 'text' instead"
            )
        path = Path(solar_cfg["file"])
        if not path.is_file():
            raise ConfigurationError(f"Solar export not found: {path}")
        return parse_pvgis_file(path, min_rows=min_rows)
    if solar_cfg.get("text"):
        if not isinstance(solar_cfg["text"], str):
            raise MalformedInput("Solar 'text' must be a string")
        return parse_pvgis_csv(solar_cfg["text"], min_rows=min_rows)
    if solar_cfg.get("profile") is not None:
        profile_cfg = solar_cfg["profile"]
        if not isinstance(profile_cfg, Mapping):
            raise MalformedInput("Solar 'profile' must map months to 24 hourly values")
        column = (
            IRRADIANCE_COLUMN_DESCRIPTION
            if solar_cfg.get("irradiance", False)
            else POWER_COLUMN_DESCRIPTION
        )
        return SolarResourceData(
            profile=MonthlyProfile.from_mapping(profile_cfg),
            metadata=_build_site(solar_cfg.get("site") or {}),
            row_count=0,
            column_used=column,
        )
    return SolarResourceData(
        profile=make_default_profile_for_kapchorwa(),
        metadata=DEFAULT_SITE,
        row_count=0,
        column_used=IRRADIANCE_COLUMN_DESCRIPTION,
    )


def build_simulation_config(
    scenario_data: ScenarioSource = None,
    *,
    profile: MonthlyProfile | None = None,
    pump_curve: PumpCurve | None = None,
) -> SimulationConfig:
    data = load_scenario_data(scenario_data)
    system_cfg = {**DEFAULT_SCENARIO["system"], **_section(data, "system")}
    try:
        head_m = float(system_cfg["head_m"])
        tank_capacity_liters = float(system_cfg["tank_capacity_liters"])
        daily_demand_liters = float(system_cfg["daily_demand_liters"])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid system section: {exc}") from exc
    return SimulationConfig(
        head_m=head_m,
        tank_capacity_liters=tank_capacity_liters,
        daily_demand_liters=daily_demand_liters,
        profile=profile if profile is not None else build_solar_data(data).profile,
        pump_curve=pump_curve if pump_curve is not None else build_pump_curve(data),
    )
