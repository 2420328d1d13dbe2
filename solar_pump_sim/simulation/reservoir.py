"""
Hourly reservoir water-balance simulation.

:func:`simulate` steps a storage tank through one non-leap year
(12 months × days-in-month × 24 hours). Every hour the pump delivers the
flow its head-corrected curve gives for that month's average solar power,
the hourly share of the daily demand is drawn, water above the tank
capacity overflows and demand the empty tank cannot cover is recorded as
deficit.

Modelling assumptions:
    - The tank starts empty on January 1st.
    - No backlog: an hour's unmet demand is lost, it is not carried over to
      the following hours.
    - Every day of a month sees the same average hourly profile.

Volumes: pump flow is m³/h, tank capacity and demand are given in litres.
Monthly/yearly aggregates are reported in m³, daily records in litres.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from ..calendar_utils import HOURS_PER_DAY, MONTH_LENGTHS, MONTH_NAMES, build_calendar
from ..errors import ConfigurationError
from .pump import PiecewiseCurve, PumpCurve, flow_at
from .solar import MonthlyProfile

logger = logging.getLogger(__name__)

LITERS_PER_M3 = 1000.0
LITERS_PER_PERSON = 15.0
DEFICIT_TOLERANCE_M3 = 1e-4
"""A day counts as not served when its deficit exceeds this volume."""


@dataclass(frozen=True)
class SimulationConfig:
    """
    Complete, immutable description of one simulation run.

    Attributes:
        head_m: Operating (total dynamic) head in m, > 0.
        tank_capacity_liters: Storage tank capacity in L, >= 0.
        daily_demand_liters: Water demand per day in L, >= 0.
        profile: Month × hour solar resource driving the pump (W).
        pump_curve: Datasheet curve with its reference head.

    Raises:
        ConfigurationError: Non-positive head, negative or non-finite
            capacity/demand.
    """
    head_m: float
    tank_capacity_liters: float
    daily_demand_liters: float
    profile: MonthlyProfile
    pump_curve: PumpCurve

    def __post_init__(self) -> None:
        if not math.isfinite(self.head_m) or self.head_m <= 0:
            raise ConfigurationError(f"Operating head must be > 0 m, got {self.head_m}")
        if not math.isfinite(self.tank_capacity_liters) or self.tank_capacity_liters < 0:
            raise ConfigurationError(
                f"Tank capacity must be >= 0 L, got {self.tank_capacity_liters}"
            )
        if not math.isfinite(self.daily_demand_liters) or self.daily_demand_liters < 0:
            raise ConfigurationError(
                f"Daily demand must be >= 0 L, got {self.daily_demand_liters}"
            )
        if not isinstance(self.profile, MonthlyProfile):
            raise ConfigurationError("profile must be a MonthlyProfile")
        if not isinstance(self.pump_curve, PumpCurve):
            raise ConfigurationError("pump_curve must be a PumpCurve")


def _reliability_pct(deficit: float, demand: float) -> float:
    if demand <= 0:
        return 100.0
    return max(0.0, (1.0 - deficit / demand) * 100.0)


@dataclass(frozen=True)
class MonthlySummary:
    """Water balance of one month (volumes in m³)."""
    month_index: int
    month: str
    days: int
    pumped_m3: float
    demand_m3: float
    deficit_m3: float
    overflow_m3: float
    avg_daily_pumped_m3: float

    @property
    def reliability_pct(self) -> float:
        return _reliability_pct(self.deficit_m3, self.demand_m3)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["reliability_pct"] = self.reliability_pct
        return data


@dataclass(frozen=True)
class DailyServed:
    """Water delivered vs demanded on one day of the year (litres)."""
    day: int
    month_index: int
    served_liters: float
    demand_liters: float
    pumped_liters: float
    deficit_liters: float


@dataclass(frozen=True)
class HourlyPoint:
    """Average hour of a month: clamped input power and resulting flow."""
    hour: int
    label: str
    power_w: float
    flow_m3h: float
    demand_m3h: float


def _hourly_flows(profile: MonthlyProfile, curve: PiecewiseCurve) -> Tuple[np.ndarray, np.ndarray]:
    """
    Clamped power and flow for every (month, hour) cell.

    Returns:
        ``(power_w, flow_m3h)`` arrays of shape (12, 24).
    """
    power_w = np.minimum(profile.values, curve.max_power_w)
    flow_m3h = np.array(
        [[flow_at(float(p), curve) for p in row] for row in power_w],
        dtype=float,
    )
    return power_w, flow_m3h


def hourly_profile(config: SimulationConfig, month_index: int) -> List[HourlyPoint]:
    """
    Per-hour power and flow of one month, without running the simulation.

    Uses the same clamping and curve lookup as :func:`simulate`.

    Args:
        config: Simulation configuration.
        month_index: Month 0 (January) to 11 (December).

    Raises:
        ValueError: month_index outside 0..11.
    """
    if not 0 <= month_index <= 11:
        raise ValueError("month_index must be between 0 and 11")
    curve = config.pump_curve.head_corrected(config.head_m)
    power_w, flow_m3h = _hourly_flows(config.profile, curve)
    demand_m3h = config.daily_demand_liters / LITERS_PER_M3 / HOURS_PER_DAY
    return [
        HourlyPoint(
            hour=h,
            label=f"{h}:00",
            power_w=float(power_w[month_index, h]),
            flow_m3h=float(flow_m3h[month_index, h]),
            demand_m3h=demand_m3h,
        )
        for h in range(HOURS_PER_DAY)
    ]


@dataclass(frozen=True)
class SimulationResult:
    """
    Year-long water balance produced by :func:`simulate`.

    Attributes:
        monthly: Twelve MonthlySummary entries, January first.
        daily: 365 DailyServed entries.
        yearly_pumped_m3: Total pumped volume.
        yearly_demand_m3: Total demanded volume.
        yearly_deficit_m3: Total unmet demand.
        yearly_overflow_m3: Total water lost to a full tank.
        days_not_served: Days whose deficit exceeded DEFICIT_TOLERANCE_M3.
        reliability_pct: ``max(0, (1 - deficit / demand) * 100)``, 100 when
            there is no demand.
        config: Configuration the result was computed from.
    """
    monthly: Tuple[MonthlySummary, ...]
    daily: Tuple[DailyServed, ...]
    yearly_pumped_m3: float
    yearly_demand_m3: float
    yearly_deficit_m3: float
    yearly_overflow_m3: float
    days_not_served: int
    reliability_pct: float
    config: SimulationConfig = field(repr=False, compare=False)

    @property
    def avg_daily_pumped_liters(self) -> float:
        return self.yearly_pumped_m3 / len(self.daily) * LITERS_PER_M3

    @property
    def days_not_served_pct(self) -> float:
        return self.days_not_served / len(self.daily) * 100.0

    def people_served(self, liters_per_person: float = LITERS_PER_PERSON) -> int:
        """Number of people the daily demand covers at ``liters_per_person`` L/day."""
        if liters_per_person <= 0:
            raise ValueError("liters_per_person must be > 0")
        return int(round(self.config.daily_demand_liters / liters_per_person))

    def hourly_profile(self, month_index: int) -> List[HourlyPoint]:
        return hourly_profile(self.config, month_index)

    def monthly_frame(self) -> pd.DataFrame:
        return pd.DataFrame([m.to_dict() for m in self.monthly])

    def daily_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(d) for d in self.daily])

    def hourly_frame(self) -> pd.DataFrame:
        """Hourly projections of all twelve months in long format."""
        rows = []
        for m in range(12):
            for point in self.hourly_profile(m):
                row = asdict(point)
                row["month_index"] = m
                row["month"] = MONTH_NAMES[m]
                rows.append(row)
        return pd.DataFrame(rows)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable view (the configuration is not included)."""
        return {
            "yearly_pumped_m3": self.yearly_pumped_m3,
            "yearly_demand_m3": self.yearly_demand_m3,
            "yearly_deficit_m3": self.yearly_deficit_m3,
            "yearly_overflow_m3": self.yearly_overflow_m3,
            "days_not_served": self.days_not_served,
            "days_not_served_pct": self.days_not_served_pct,
            "reliability_pct": self.reliability_pct,
            "avg_daily_pumped_liters": self.avg_daily_pumped_liters,
            "monthly": [m.to_dict() for m in self.monthly],
            "daily": [asdict(d) for d in self.daily],
        }


def simulate(config: SimulationConfig) -> SimulationResult:
    """
    Run the hourly tank balance over one non-leap year.

    Each hour:
      1. power = profile value for the month/hour, capped at the pump's
         maximum datasheet power;
      2. the head-corrected flow for that power is added to the tank;
      3. ``daily_demand / 24`` is drawn from the tank;
      4. volume above capacity is recorded as overflow and discarded;
      5. a negative level is recorded as deficit and reset to zero.

    The function holds no state between calls: every invocation starts from
    an empty tank and allocates its own accumulators.

    Args:
        config: Validated simulation configuration.

    Returns:
        SimulationResult with monthly, daily and yearly statistics.

    Example:
        ```python
        config = SimulationConfig(
            head_m=150.0,
            tank_capacity_liters=5000.0,
            daily_demand_liters=2000.0,
            profile=make_default_profile_for_kapchorwa(),
            pump_curve=PUMP_PRESETS["SQF-2 (1kW)"],
        )
        result = simulate(config)
        result.reliability_pct
        ```
    """
    capacity_m3 = config.tank_capacity_liters / LITERS_PER_M3
    daily_demand_m3 = config.daily_demand_liters / LITERS_PER_M3
    hourly_demand_m3 = daily_demand_m3 / HOURS_PER_DAY

    curve = config.pump_curve.head_corrected(config.head_m)
    _, flow_m3h = _hourly_flows(config.profile, curve)

    day_of_year, month_in_year_for_day, _ = build_calendar()
    n_days = len(day_of_year)

    logger.debug(
        "Simulating %d days: head=%.1f m, tank=%.0f L, demand=%.0f L/day",
        n_days,
        config.head_m,
        config.tank_capacity_liters,
        config.daily_demand_liters,
    )

    monthly_pumped_m3 = np.zeros(12)
    monthly_deficit_m3 = np.zeros(12)
    monthly_overflow_m3 = np.zeros(12)
    daily: List[DailyServed] = []
    days_not_served = 0

    storage_m3 = 0.0

    for d in range(n_days):
        m = int(month_in_year_for_day[d])
        day_pumped_m3 = 0.0
        day_deficit_m3 = 0.0

        for h in range(HOURS_PER_DAY):
            pumped = float(flow_m3h[m, h])
            storage_m3 += pumped
            day_pumped_m3 += pumped
            storage_m3 -= hourly_demand_m3

            if storage_m3 > capacity_m3:
                monthly_overflow_m3[m] += storage_m3 - capacity_m3
                storage_m3 = capacity_m3
            if storage_m3 < 0:
                day_deficit_m3 += -storage_m3
                storage_m3 = 0.0

        monthly_pumped_m3[m] += day_pumped_m3
        monthly_deficit_m3[m] += day_deficit_m3
        if day_deficit_m3 > DEFICIT_TOLERANCE_M3:
            days_not_served += 1

        daily.append(
            DailyServed(
                day=int(day_of_year[d]),
                month_index=m,
                served_liters=(daily_demand_m3 - day_deficit_m3) * LITERS_PER_M3,
                demand_liters=config.daily_demand_liters,
                pumped_liters=day_pumped_m3 * LITERS_PER_M3,
                deficit_liters=day_deficit_m3 * LITERS_PER_M3,
            )
        )

    monthly = tuple(
        MonthlySummary(
            month_index=m,
            month=MONTH_NAMES[m],
            days=days,
            pumped_m3=float(monthly_pumped_m3[m]),
            demand_m3=daily_demand_m3 * days,
            deficit_m3=float(monthly_deficit_m3[m]),
            overflow_m3=float(monthly_overflow_m3[m]),
            avg_daily_pumped_m3=float(monthly_pumped_m3[m]) / days,
        )
        for m, days in enumerate(MONTH_LENGTHS)
    )

    yearly_pumped_m3 = sum(s.pumped_m3 for s in monthly)
    yearly_demand_m3 = sum(s.demand_m3 for s in monthly)
    yearly_deficit_m3 = sum(s.deficit_m3 for s in monthly)
    yearly_overflow_m3 = sum(s.overflow_m3 for s in monthly)
    reliability = _reliability_pct(yearly_deficit_m3, yearly_demand_m3)

    logger.debug(
        "Simulation done: pumped=%.1f m3, deficit=%.1f m3, reliability=%.1f%%",
        yearly_pumped_m3,
        yearly_deficit_m3,
        reliability,
    )

    return SimulationResult(
        monthly=monthly,
        daily=tuple(daily),
        yearly_pumped_m3=yearly_pumped_m3,
        yearly_demand_m3=yearly_demand_m3,
        yearly_deficit_m3=yearly_deficit_m3,
        yearly_overflow_m3=yearly_overflow_m3,
        days_not_served=days_not_served,
        reliability_pct=reliability,
        config=config,
    )
