from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from .application import SolarPumpApplication
from .config import get_log_level
from .errors import SolarPumpError
from .result_builder import ResultBuilder
from .scenario_setup import load_scenario_data
from .simulation.pump import PUMP_PRESETS


def build_argument_parser() -> argparse.ArgumentParser:
    """
    Build the CLI argument parser used by entry points.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(description="Solar water pump reliability simulator")
    sub = parser.add_subparsers(dest="command")

    simulate = sub.add_parser("simulate", help="Run the year-long tank balance for one scenario")
    simulate.add_argument(
        "--scenario-file",
        type=str,
        default=None,
        help="Path to a JSON scenario definition",
    )
    simulate.add_argument(
        "--solar-file",
        type=str,
        default=None,
        help="PVGIS hourly CSV export (overrides the scenario's solar section)",
    )
    simulate.add_argument("--head-m", type=float, dest="head_m", help="Operating head [m]")
    simulate.add_argument(
        "--tank-liters",
        type=float,
        dest="tank_capacity_liters",
        help="Storage tank capacity [L]",
    )
    simulate.add_argument(
        "--demand-liters",
        type=float,
        dest="daily_demand_liters",
        help="Daily water demand [L/day]",
    )
    simulate.add_argument(
        "--pump",
        choices=sorted(PUMP_PRESETS),
        default=None,
        help="Pump datasheet preset",
    )
    simulate.add_argument(
        "--min-rows",
        type=int,
        default=None,
        help="Minimum number of hourly rows required in the solar export",
    )
    simulate.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write CSV/JSON outputs to the results directory",
    )
    simulate.add_argument(
        "--full",
        action="store_true",
        help="Print daily records, hourly profiles and the pump curve too",
    )

    parse = sub.add_parser("parse-solar", help="Average a PVGIS export into a monthly profile")
    parse.add_argument("file", help="PVGIS hourly CSV export")
    parse.add_argument("--min-rows", type=int, default=None)

    pumps = sub.add_parser("pumps", help="List pump presets and their sampled curves")
    pumps.add_argument("--head-m", type=float, dest="head_m", default=None)
    pumps.add_argument("--n-steps", type=int, default=20)

    return parser


def _load_json_file(path: str | Path) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise SystemExit(f"File not found: {file_path}")
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON file ({file_path}): {exc}") from exc


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _scenario_from_args(args: argparse.Namespace) -> dict[str, Any]:
    scenario = _load_json_file(args.scenario_file) if args.scenario_file else load_scenario_data()
    system = dict(scenario.get("system") or {})
    for key in ("head_m", "tank_capacity_liters", "daily_demand_liters"):
        value = getattr(args, key, None)
        if value is not None:
            system[key] = value
    scenario["system"] = system
    if args.pump:
        scenario["pump"] = {"preset": args.pump}
    return scenario


_VERBOSE_KEYS = ("daily", "hourly_profiles", "pump_curve")


def main(argv: Sequence[str] | None = None) -> None:
    """
    CLI entry point for simulations, solar parsing and pump listings.

    Args:
        argv: Optional sequence of CLI args (defaults to sys.argv).
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    save_outputs = not getattr(args, "no_save", False)
    app = SolarPumpApplication(save_outputs=save_outputs, result_builder=None)

    try:
        if args.command == "simulate":
            if args.solar_file and not Path(args.solar_file).is_file():
                raise SystemExit(f"File not found: {args.solar_file}")
            if app.save_outputs and app.result_builder is None:
                app.result_builder = ResultBuilder()
            summary = app.run_simulation(
                scenario_data=_scenario_from_args(args),
                solar_file=args.solar_file,
                min_rows=args.min_rows,
            )
            if not args.full:
                summary = {k: v for k, v in summary.items() if k not in _VERBOSE_KEYS}
            _print_json(summary)
            return

        if args.command == "parse-solar":
            file_path = Path(args.file)
            if not file_path.is_file():
                raise SystemExit(f"File not found: {file_path}")
            payload = app.parse_solar(file_path.read_text(encoding="utf-8"), min_rows=args.min_rows)
            _print_json(payload)
            return

        if args.command == "pumps":
            _print_json(app.list_pumps(head_m=args.head_m, n_steps=args.n_steps))
            return
    except SolarPumpError as exc:
        raise SystemExit(f"Error: {exc}") from exc

    parser.error(f"Unknown command: {args.command}")


if __name__ == "__main__":
    main()
