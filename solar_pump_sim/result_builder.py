from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from .config import get_results_dir
from .simulation.reservoir import SimulationResult


def _slugify(value: str) -> str:
    """
    Convert a free-form string into a filesystem-safe slug.

    Args:
        value: Input string.

    Returns:
        Slug containing only alphanumeric characters, dash, or underscore.
    """
    return "".join(c if c.isalnum() or c in ("-", "_") else "_" for c in value.strip()).strip("_")


def _create_run_directory(scenario_name: str, output_root: Path) -> Path:
    """
    Create the timestamped directory for one simulation run.
    """
    timestamp = datetime.now().strftime("%y%m%d_%H%M%S")
    slug = _slugify(scenario_name) or "scenario"
    run_dir = output_root / f"{timestamp}_{slug}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


class ResultBuilder:
    """
    Writes simulation results to disk as CSV tables plus a JSON summary.

    Layout of a run directory::

        <output_root>/<yymmdd_HHMMSS>_<scenario>/
            monthly_summary.csv
            daily_served.csv
            hourly_profiles.csv
            summary.json
    """

    def __init__(self, output_root: Path | str | None = None) -> None:
        """
        Args:
            output_root: Base directory; defaults to ``get_results_dir()``.
        """
        self.output_root = Path(output_root) if output_root is not None else get_results_dir()

    def build_simulation(
        self,
        scenario_name: str,
        result: SimulationResult,
        summary: Mapping[str, Any] | None = None,
    ) -> Path:
        """
        Export one simulation run.

        Args:
            scenario_name: Used to name the run directory.
            result: Simulation output to export.
            summary: Optional extra payload stored in ``summary.json``;
                defaults to ``result.to_dict()`` without the daily records.

        Returns:
            Path of the created run directory.
        """
        run_dir = _create_run_directory(scenario_name, self.output_root)

        result.monthly_frame().to_csv(run_dir / "monthly_summary.csv", index=False)
        result.daily_frame().to_csv(run_dir / "daily_served.csv", index=False)
        result.hourly_frame().to_csv(run_dir / "hourly_profiles.csv", index=False)

        if summary is None:
            summary = {k: v for k, v in result.to_dict().items() if k != "daily"}
        (run_dir / "summary.json").write_text(
            json.dumps(summary, indent=2, default=str, ensure_ascii=False),
            encoding="utf-8",
        )
        return run_dir
