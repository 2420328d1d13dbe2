"""
Pump performance model.

A pump datasheet lists (flow, power) points measured at a reference head.
:func:`build_curve` turns them into a piecewise-linear power → flow function,
:func:`scale_for_head` rescales it for another operating head assuming that,
at fixed input power, flow is inversely proportional to head.

Flows are in m³/h, powers in W, heads in m.

Notes:
    - Datasheet points are assumed monotonic (more power, more flow). A
      non-monotonic datasheet is not repaired: the descending-power sort
      alone decides the segments, which then carry no physical meaning.
    - The curve never extrapolates above its highest tabulated power.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from ..errors import ConfigurationError


@dataclass(frozen=True)
class PumpCurvePoint:
    """
    One datasheet point.

    Attributes:
        flow_m3h: Delivered flow (m³/h) at the reference head.
        power_w: Electrical input power (W).
    """
    flow_m3h: float
    power_w: float


@dataclass(frozen=True)
class PiecewiseSegment:
    """
    Linear piece ``flow = a * power + b`` used for ``power >= next_power_w``.

    ``power_w`` / ``flow_m3h`` are the datasheet point the segment starts
    from (upper end).
    """
    power_w: float
    flow_m3h: float
    a: float
    b: float
    next_power_w: float

    def flow(self, power_w: float) -> float:
        return max(0.0, self.a * power_w + self.b)


@dataclass(frozen=True)
class PiecewiseCurve:
    """
    Ordered segments (descending power) covering ``[0, max_power_w]``.
    """
    segments: Tuple[PiecewiseSegment, ...]
    max_power_w: float

    def flow_at(self, power_w: float) -> float:
        return flow_at(power_w, self)


@dataclass(frozen=True)
class PumpCurve:
    """
    Datasheet description of a pump.

    Attributes:
        points: At least one (flow, power) point.
        reference_head_m: Head at which the points were measured (> 0).
        name: Display name (model, preset label).

    Raises:
        ConfigurationError: Empty point list, non-positive reference head,
            negative or non-finite flow/power, or no point with positive power.
    """
    points: Tuple[PumpCurvePoint, ...]
    reference_head_m: float
    name: str = "Custom"

    def __post_init__(self) -> None:
        points = tuple(
            p if isinstance(p, PumpCurvePoint) else PumpCurvePoint(**p)
            for p in self.points
        )
        object.__setattr__(self, "points", points)
        if not points:
            raise ConfigurationError("Pump curve needs at least one (flow, power) point")
        if not math.isfinite(self.reference_head_m) or self.reference_head_m <= 0:
            raise ConfigurationError(
                f"Reference head must be > 0 m, got {self.reference_head_m}"
            )
        for p in points:
            if not (math.isfinite(p.flow_m3h) and math.isfinite(p.power_w)):
                raise ConfigurationError(
                    f"Pump curve points must be finite, got flow={p.flow_m3h}, power={p.power_w}"
                )
            if p.flow_m3h < 0 or p.power_w < 0:
                raise ConfigurationError(
                    f"Pump curve points must be non-negative, got flow={p.flow_m3h}, power={p.power_w}"
                )
        if max(p.power_w for p in points) <= 0:
            raise ConfigurationError("Pump curve needs at least one point with positive power")

    @property
    def max_power_w(self) -> float:
        return max(p.power_w for p in self.points)

    def build(self) -> PiecewiseCurve:
        return build_curve(self.points)

    def head_corrected(self, actual_head_m: float) -> PiecewiseCurve:
        """Piecewise curve rescaled from the reference head to ``actual_head_m``."""
        return scale_for_head(self.build(), self.reference_head_m, actual_head_m)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "reference_head_m": self.reference_head_m,
            "points": [{"flow_m3h": p.flow_m3h, "power_w": p.power_w} for p in self.points],
        }


def _dedupe_by_power(points: Iterable[PumpCurvePoint]) -> List[PumpCurvePoint]:
    # stable sort: the first point listed for a given power wins
    ordered = sorted(points, key=lambda p: p.power_w, reverse=True)
    unique: List[PumpCurvePoint] = []
    for point in ordered:
        if unique and unique[-1].power_w == point.power_w:
            continue
        unique.append(point)
    return unique


def build_curve(points: Sequence[PumpCurvePoint]) -> PiecewiseCurve:
    """
    Build the piecewise-linear power → flow function of a datasheet.

    Points are sorted by descending power. Each consecutive pair defines a
    segment valid down to the lower point's power. The lowest point extends
    the slope of the last pair down to zero power. A single point yields a
    straight line through the origin.

    Args:
        points: Datasheet points at the reference head.

    Returns:
        PiecewiseCurve with ``len(unique powers)`` segments.

    Raises:
        ConfigurationError: No points, or a single point with zero power.

    Example:
        ```python
        curve = build_curve([PumpCurvePoint(2.0, 500.0), PumpCurvePoint(1.0, 250.0)])
        curve.flow_at(375.0)  # 1.5
        ```
    """
    if not points:
        raise ConfigurationError("Pump curve needs at least one (flow, power) point")

    ordered = _dedupe_by_power(points)
    segments: List[PiecewiseSegment] = []

    for upper, lower in zip(ordered, ordered[1:]):
        a = (upper.flow_m3h - lower.flow_m3h) / (upper.power_w - lower.power_w)
        b = upper.flow_m3h - a * upper.power_w
        segments.append(PiecewiseSegment(upper.power_w, upper.flow_m3h, a, b, lower.power_w))

    last = ordered[-1]
    if len(ordered) >= 2:
        prev = ordered[-2]
        a = (prev.flow_m3h - last.flow_m3h) / (prev.power_w - last.power_w)
        b = last.flow_m3h - a * last.power_w
    else:
        if last.power_w <= 0:
            raise ConfigurationError("Single-point pump curve needs a positive power")
        a = last.flow_m3h / last.power_w
        b = 0.0
    segments.append(PiecewiseSegment(last.power_w, last.flow_m3h, a, b, 0.0))

    return PiecewiseCurve(segments=tuple(segments), max_power_w=ordered[0].power_w)


def flow_at(power_w: float, curve: PiecewiseCurve) -> float:
    """
    Flow (m³/h) delivered at ``power_w``.

    Zero for non-positive power; power above the highest datasheet point is
    clamped to it; negative linear extrapolations are floored at 0.
    """
    if power_w <= 0:
        return 0.0
    power_w = min(power_w, curve.max_power_w)
    for seg in curve.segments:
        if power_w >= seg.next_power_w:
            return seg.flow(power_w)
    return 0.0


def scale_for_head(
    curve: PiecewiseCurve,
    reference_head_m: float,
    actual_head_m: float,
) -> PiecewiseCurve:
    """
    Rescale a curve measured at ``reference_head_m`` to ``actual_head_m``.

    Every segment's slope and intercept are multiplied by
    ``reference_head_m / actual_head_m``.

    Raises:
        ConfigurationError: Either head is not strictly positive.
    """
    if reference_head_m <= 0:
        raise ConfigurationError(f"Reference head must be > 0 m, got {reference_head_m}")
    if actual_head_m <= 0:
        raise ConfigurationError(f"Operating head must be > 0 m, got {actual_head_m}")
    ratio = reference_head_m / actual_head_m
    segments = tuple(
        PiecewiseSegment(seg.power_w, seg.flow_m3h * ratio, seg.a * ratio, seg.b * ratio, seg.next_power_w)
        for seg in curve.segments
    )
    return PiecewiseCurve(segments=segments, max_power_w=curve.max_power_w)


def sample_curve(curve: PiecewiseCurve, n_steps: int = 200) -> List[Tuple[float, float]]:
    """
    Sample ``(power_w, flow_m3h)`` pairs from 0 to the curve's maximum power.

    The step is ``max(5 W, max_power / n_steps)``, the maximum power itself is
    always included.
    """
    step = max(5.0, curve.max_power_w / max(n_steps, 1))
    samples: List[Tuple[float, float]] = []
    power = 0.0
    while power < curve.max_power_w:
        samples.append((power, flow_at(power, curve)))
        power += step
    samples.append((curve.max_power_w, flow_at(curve.max_power_w, curve)))
    return samples


def _preset(name: str, reference_head_m: float, points: Sequence[Tuple[float, float]]) -> PumpCurve:
    return PumpCurve(
        points=tuple(PumpCurvePoint(flow_m3h=f, power_w=p) for f, p in points),
        reference_head_m=reference_head_m,
        name=name,
    )


PUMP_PRESETS: Dict[str, PumpCurve] = {
    "SQF-2 (1kW)": _preset(
        "SQF-2 (1kW)",
        150.0,
        [
            (2.79, 660.0),
            (2.52, 590.0),
            (2.15, 500.0),
            (1.84, 430.0),
            (1.49, 350.0),
            (0.94, 240.0),
            (0.53, 160.0),
            (0.30, 100.0),
        ],
    ),
    "SQF-10 (2kW)": _preset(
        "SQF-10 (2kW)",
        150.0,
        [
            (5.50, 1800.0),
            (5.00, 1500.0),
            (4.20, 1200.0),
            (3.40, 900.0),
            (2.50, 700.0),
            (1.60, 500.0),
            (0.80, 300.0),
            (0.30, 150.0),
        ],
    ),
    "Custom": _preset(
        "Custom",
        150.0,
        [
            (2.0, 500.0),
            (1.0, 250.0),
            (0.3, 100.0),
        ],
    ),
}

DEFAULT_PUMP_PRESET = "SQF-2 (1kW)"


def get_pump_preset(name: str) -> PumpCurve:
    """
    Look up a datasheet preset by name.

    Raises:
        ConfigurationError: Unknown preset name.
    """
    try:
        return PUMP_PRESETS[name]
    except (KeyError, TypeError) as exc:
        known = ", ".join(PUMP_PRESETS)
        raise ConfigurationError(f"Unknown pump preset '{name}'. Available: {known}") from exc
