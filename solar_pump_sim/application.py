from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .result_builder import ResultBuilder
from .scenario_setup import (
    build_pump_curve,
    build_simulation_config,
    build_solar_data,
    load_scenario_data,
)
from .simulation.pump import PUMP_PRESETS, PumpCurve, sample_curve
from .simulation.reservoir import SimulationResult, simulate
from .simulation.solar import SolarResourceData, parse_pvgis_csv, parse_pvgis_file

logger = logging.getLogger(__name__)

ScenarioData = Mapping[str, Any] | str | Path | None


def _solar_summary(solar: SolarResourceData) -> Dict[str, Any]:
    return {
        "column_used": solar.column_used,
        "uses_irradiance": solar.uses_irradiance,
        "row_count": solar.row_count,
        "description": solar.describe() if solar.row_count else "Built-in monthly profile",
        "site": solar.metadata.to_dict(),
    }


def _curve_points(pump: PumpCurve, head_m: float, n_steps: int) -> List[Dict[str, float]]:
    curve = pump.head_corrected(head_m)
    return [{"power_w": p, "flow_m3h": f} for p, f in sample_curve(curve, n_steps=n_steps)]


class SolarPumpApplication:
    """
    High-level orchestrator used by the CLI and the FastAPI surface.
    """

    def __init__(
        self,
        *,
        save_outputs: bool = False,
        result_builder: ResultBuilder | None = None,
    ) -> None:
        """
        Args:
            save_outputs: When True, ResultBuilder writes CSV/JSON exports.
            result_builder: Optional ResultBuilder for on-disk outputs.
        """
        self.save_outputs = save_outputs
        self.result_builder = result_builder

    def run_simulation(
        self,
        *,
        scenario_data: ScenarioData = None,
        solar_text: str | None = None,
        solar_file: str | Path | None = None,
        min_rows: int | None = None,
        allow_files: bool = True,
    ) -> Dict[str, Any]:
        """
        Execute one year-long pumping simulation.

        Args:
            scenario_data: Optional mapping/path overriding the default scenario.
            solar_text: Raw PVGIS export overriding the scenario's solar section.
            solar_file: Path to a PVGIS export overriding the scenario's solar section.
            min_rows: Minimum row count accepted when parsing an export.
            allow_files: Whether the scenario may name a local export file
                (disabled for remote callers).

        Returns:
            Summary dictionary with yearly/monthly/daily statistics, hourly
            profiles, the sampled pump curve and the optional output path.

        Raises:
            MalformedInput: The solar export cannot be parsed.
            ConfigurationError: Invalid pump or system definition.
        """
        scenario_payload = load_scenario_data(scenario_data)
        scenario_name = str(scenario_payload.get("scenario_name") or "custom_scenario")

        if solar_file is not None:
            solar = parse_pvgis_file(solar_file, min_rows=min_rows)
        elif solar_text is not None:
            solar = parse_pvgis_csv(solar_text, min_rows=min_rows)
        else:
            solar = build_solar_data(scenario_payload, min_rows=min_rows, allow_files=allow_files)

        pump = build_pump_curve(scenario_payload)
        config = build_simulation_config(scenario_payload, profile=solar.profile, pump_curve=pump)

        logger.info(
            "Running scenario '%s' (pump=%s, head=%.1f m)",
            scenario_name,
            pump.name,
            config.head_m,
        )
        result = simulate(config)

        summary = self._build_summary(scenario_name, result, solar)

        output_dir = None
        if self.save_outputs and self.result_builder:
            output_dir = self.result_builder.build_simulation(
                scenario_name,
                result,
                summary={k: v for k, v in summary.items() if k != "daily"},
            )
            logger.info("Results written to %s", output_dir)

        summary["output_dir"] = str(output_dir) if output_dir else None
        return summary

    def _build_summary(
        self,
        scenario_name: str,
        result: SimulationResult,
        solar: SolarResourceData,
    ) -> Dict[str, Any]:
        config = result.config
        summary: Dict[str, Any] = {
            "scenario": scenario_name,
            "system": {
                "head_m": config.head_m,
                "tank_capacity_liters": config.tank_capacity_liters,
                "daily_demand_liters": config.daily_demand_liters,
                "people_served": result.people_served(),
            },
            "pump": config.pump_curve.to_dict(),
            "solar": _solar_summary(solar),
        }
        summary.update(result.to_dict())
        summary["hourly_profiles"] = [
            {
                "month_index": m,
                "points": [asdict(p) for p in result.hourly_profile(m)],
            }
            for m in range(12)
        ]
        summary["pump_curve"] = _curve_points(config.pump_curve, config.head_m, n_steps=200)
        return summary

    def parse_solar(self, text: str, *, min_rows: int | None = None) -> Dict[str, Any]:
        """
        Parse a PVGIS export and return its profile with load metadata.
        """
        solar = parse_pvgis_csv(text, min_rows=min_rows)
        payload = _solar_summary(solar)
        payload["profile"] = solar.profile.to_dict()
        return payload

    def list_pumps(self, *, head_m: float | None = None, n_steps: int = 50) -> List[Dict[str, Any]]:
        """
        Describe the datasheet presets, with curves sampled at ``head_m``
        (each preset's reference head when omitted).
        """
        pumps = []
        for pump in PUMP_PRESETS.values():
            entry = pump.to_dict()
            entry["max_power_w"] = pump.max_power_w
            sample_head = head_m if head_m is not None else pump.reference_head_m
            entry["curve"] = _curve_points(pump, sample_head, n_steps)
            pumps.append(entry)
        return pumps
