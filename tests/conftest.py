from __future__ import annotations

import pytest
from pathlib import Path
import sys
from typing import Callable, Iterable

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from solar_pump_sim.calendar_utils import MONTH_LENGTHS  # noqa: E402
from solar_pump_sim.simulation.pump import PumpCurve, PumpCurvePoint  # noqa: E402
from solar_pump_sim.simulation.solar import MonthlyProfile  # noqa: E402

PVGIS_PREAMBLE = [
    "Latitude (decimal degrees):\t1.406",
    "Longitude (decimal degrees):\t34.480",
    "Elevation (m):\t1886",
    "",
    "Radiation database:\tPVGIS-SARAH3",
    "",
    "Slope: 3 deg. ",
    "Azimuth: 0 deg. ",
    "Nominal power of the PV system (c-Si) (kWp):\t1.0",
    "",
]

PVGIS_FOOTER = [
    "",
    "P: PV system power (W)",
    "G(i): Global irradiance on the inclined plane (plane of the array) (W/m2)",
    "PVGIS (c) European Union, 2001-2024",
]


def _daylight_value(month: int, hour: int) -> float:
    """Synthetic resource: 100 W per month number between 06:00 and 17:00."""
    return 100.0 * month if 6 <= hour < 18 else 0.0


def make_pvgis_text(
    value: Callable[[int, int], float] = _daylight_value,
    *,
    columns: Iterable[str] = ("P", "G(i)", "H_sun", "T2m", "WS10m", "Int"),
    months: Iterable[int] = range(1, 13),
    year: int = 2023,
    preamble: bool = True,
) -> str:
    """
    Build a PVGIS-like hourly export.

    Every column listed in ``columns`` except ``time`` carries ``value(month, hour)``.
    """
    columns = list(columns)
    lines = list(PVGIS_PREAMBLE) if preamble else []
    lines.append(",".join(["time", *columns]))
    for month in months:
        for day in range(1, MONTH_LENGTHS[month - 1] + 1):
            for hour in range(24):
                v = value(month, hour)
                fields = [f"{year}{month:02d}{day:02d}:{hour:02d}10"]
                fields.extend(f"{v:.2f}" for _ in columns)
                lines.append(",".join(fields))
    lines.extend(PVGIS_FOOTER)
    return "\n".join(lines) + "\n"


@pytest.fixture()
def pvgis_text() -> str:
    """Full-year export with the synthetic daylight resource."""
    return make_pvgis_text()


@pytest.fixture()
def pvgis_factory():
    """Expose the export builder to tests needing a custom layout."""
    return make_pvgis_text


@pytest.fixture()
def single_point_pump() -> PumpCurve:
    """2 m³/h at 500 W, measured at 150 m."""
    return PumpCurve(
        points=(PumpCurvePoint(flow_m3h=2.0, power_w=500.0),),
        reference_head_m=150.0,
        name="single",
    )


@pytest.fixture()
def daylight_profile() -> MonthlyProfile:
    """500 W from 06:00 to 18:00 inclusive (13 hours), every month."""
    return MonthlyProfile.flat([500.0 if 6 <= h <= 18 else 0.0 for h in range(24)])


@pytest.fixture()
def simple_scenario_data() -> dict:
    """Small scenario using an inline profile and an inline pump curve."""
    return {
        "scenario_name": "test scenario",
        "system": {
            "head_m": 150.0,
            "tank_capacity_liters": 5000.0,
            "daily_demand_liters": 2000.0,
        },
        "pump": {
            "name": "single",
            "reference_head_m": 150.0,
            "points": [{"flow_m3h": 2.0, "power_w": 500.0}],
        },
        "solar": {
            "profile": {
                str(m): [500.0 if 6 <= h <= 18 else 0.0 for h in range(24)]
                for m in range(1, 13)
            },
            "site": {"name": "Test site", "lat": 1.0},
        },
    }


@pytest.fixture()
def results_dir(tmp_path, monkeypatch) -> Path:
    """Redirect exported results to a temporary directory."""
    target = tmp_path / "results"
    monkeypatch.setenv("SOLAR_PUMP_RESULTS_DIR", str(target))
    return target
