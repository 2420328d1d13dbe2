"""
Hourly solar resource ingestion.

Turns a PVGIS-style hourly time series export into the canonical
:class:`MonthlyProfile` consumed by the reservoir simulation: for each of the
12 months, 24 average hourly values (W for the ``P`` column, W/m² for the
``G(i)`` column).

The ingestion is lenient on content (unparsable rows are skipped, empty
month/hour buckets resolve to 0) but strict on structure: a missing header,
a missing value column or an implausibly short file raise
:class:`~solar_pump_sim.errors.MalformedInput`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..calendar_utils import HOURS_PER_DAY, HOURS_PER_YEAR, MONTH_NAMES
from ..config import get_min_data_rows
from ..errors import MalformedInput

logger = logging.getLogger(__name__)

METADATA_SCAN_LINES = 25
POWER_COLUMN_LABELS = ("P", "p")
IRRADIANCE_COLUMN_LABELS = ("G(i)", "g(i)", "Gi")
POWER_COLUMN_DESCRIPTION = "P (PV power)"
IRRADIANCE_COLUMN_DESCRIPTION = "G(i) (irradiance)"

_HEADER_RE = re.compile(r"^time[,\t]", re.IGNORECASE)
_FIELD_SPLIT_RE = re.compile(r"[,\t]+")
_DATE_PREFIX_RE = re.compile(r"^[0-9]{8}")
_HOUR_PREFIX_RE = re.compile(r"^[0-9]{2}")
_TRAILING_NUMBER_RE = re.compile(r"([\d.-]+)\s*$")
_FIRST_NUMBER_RE = re.compile(r"([\d.]+)")
_FIRST_SIGNED_NUMBER_RE = re.compile(r"([\d.-]+)")
_AFTER_COLON_RE = re.compile(r":\s*(.+)$")


class MonthlyProfile:
    """
    Month × hour-of-day table of average solar resource values.

    Stored as a read-only ``(12, 24)`` float array. Row ``m - 1`` holds the
    24 hourly averages of month ``m``. Values are non-negative; hours with
    no data are 0.

    Example:
        ```python
        profile = MonthlyProfile.flat([0.0] * 6 + [500.0] * 13 + [0.0] * 5)
        profile.month(1)[6]  # 500.0
        ```
    """

    __slots__ = ("_values",)

    def __init__(self, values: Any) -> None:
        """
        Args:
            values: Anything convertible to a ``(12, 24)`` float array.

        Raises:
            MalformedInput: Wrong shape, non-finite or negative values.
        """
        arr = np.array(values, dtype=float)
        if arr.shape != (12, HOURS_PER_DAY):
            raise MalformedInput(f"Monthly profile must have shape (12, 24), got {arr.shape}")
        if not np.isfinite(arr).all():
            raise MalformedInput("Monthly profile contains non-finite values")
        if (arr < 0).any():
            raise MalformedInput("Monthly profile values must be non-negative")
        arr.setflags(write=False)
        self._values = arr

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Sequence[float]]) -> "MonthlyProfile":
        """
        Build a profile from a ``{month: [24 values]}`` mapping.

        Month keys may be ints or numeric strings (JSON objects). Missing
        months and missing trailing hours default to 0.

        Raises:
            MalformedInput: Month outside 1..12, non-numeric or more than 24
                hourly values.
        """
        values = np.zeros((12, HOURS_PER_DAY), dtype=float)
        for key, hours in mapping.items():
            try:
                month = int(key)
            except (TypeError, ValueError) as exc:
                raise MalformedInput(f"Invalid month key: {key!r}") from exc
            if not 1 <= month <= 12:
                raise MalformedInput(f"Month must be between 1 and 12, got {month}")
            try:
                hourly = [float(v) for v in hours]
            except (TypeError, ValueError) as exc:
                raise MalformedInput(f"Month {month} hourly values must be numbers") from exc
            if len(hourly) > HOURS_PER_DAY:
                raise MalformedInput(f"Month {month} has {len(hourly)} hourly values, expected 24")
            values[month - 1, : len(hourly)] = hourly
        return cls(values)

    @classmethod
    def flat(cls, hourly_values: Sequence[float]) -> "MonthlyProfile":
        """Same 24-hour shape repeated for every month."""
        hourly = [float(v) for v in hourly_values]
        if len(hourly) != HOURS_PER_DAY:
            raise MalformedInput(f"Expected 24 hourly values, got {len(hourly)}")
        return cls(np.tile(np.array(hourly), (12, 1)))

    @classmethod
    def zeros(cls) -> "MonthlyProfile":
        return cls(np.zeros((12, HOURS_PER_DAY)))

    @property
    def values(self) -> np.ndarray:
        return self._values

    def month(self, month: int) -> Tuple[float, ...]:
        """Return the 24 hourly values of ``month`` (1-based)."""
        if not 1 <= month <= 12:
            raise ValueError("month must be between 1 and 12")
        return tuple(float(v) for v in self._values[month - 1])

    def to_dict(self) -> Dict[int, List[float]]:
        return {m + 1: [float(v) for v in self._values[m]] for m in range(12)}

    def to_frame(self) -> pd.DataFrame:
        """Profile as a DataFrame indexed by month name with hour columns 0..23."""
        return pd.DataFrame(self._values, index=MONTH_NAMES, columns=list(range(HOURS_PER_DAY)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MonthlyProfile):
            return NotImplemented
        return bool(np.array_equal(self._values, other._values))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"MonthlyProfile(peak={float(self._values.max()):.1f})"


@dataclass(frozen=True)
class SiteMetadata:
    """
    Descriptive site information found in a resource export preamble.

    Display only: none of these values influence the simulation.
    """
    lat: Optional[float] = None
    lon: Optional[float] = None
    elevation_m: Optional[float] = None
    kwp: Optional[float] = None
    slope_deg: Optional[float] = None
    azimuth_deg: Optional[float] = None
    radiation_db: Optional[str] = None
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SolarResourceData:
    """
    Outcome of parsing a resource export.

    Attributes:
        profile: Averaged month × hour table.
        metadata: Site information from the preamble.
        row_count: Number of hourly rows that contributed to the profile.
        column_used: Human readable name of the value column. Irradiance
            values approximate the output of a ~1 kWp system at standard
            test conditions, so downstream magnitudes depend on it.
    """
    profile: MonthlyProfile
    metadata: SiteMetadata
    row_count: int
    column_used: str

    @property
    def uses_irradiance(self) -> bool:
        return self.column_used == IRRADIANCE_COLUMN_DESCRIPTION

    def describe(self) -> str:
        """One-line load status, e.g. for a CLI or UI banner."""
        parts = [
            f"Loaded {self.row_count:,} hourly records using {self.column_used}",
            self.metadata.radiation_db or "PVGIS",
        ]
        if self.metadata.kwp:
            parts.append(f"{self.metadata.kwp} kWp")
        slope = self.metadata.slope_deg if self.metadata.slope_deg is not None else "?"
        parts.append(f"{slope}° slope")
        return " · ".join(parts)


def _search_float(pattern: re.Pattern[str], line: str) -> Optional[float]:
    match = pattern.search(line)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def _scan_preamble(lines: Sequence[str]) -> Tuple[Optional[int], SiteMetadata]:
    """
    Scan the leading lines for site metadata and the column header.

    Returns:
        ``(header_index, metadata)``; ``header_index`` is None when no
        ``time`` header appears within the first METADATA_SCAN_LINES lines.
    """
    found: Dict[str, Any] = {}
    for idx, raw in enumerate(lines[:METADATA_SCAN_LINES]):
        line = raw.strip()
        lower = line.lower()
        if _HEADER_RE.match(line):
            return idx, SiteMetadata(**found)
        if "latitude" in lower:
            found["lat"] = _search_float(_TRAILING_NUMBER_RE, line)
        if "longitude" in lower:
            found["lon"] = _search_float(_TRAILING_NUMBER_RE, line)
        if "elevation" in lower:
            found["elevation_m"] = _search_float(_TRAILING_NUMBER_RE, line)
        if "nominal power" in lower:
            found["kwp"] = _search_float(_FIRST_NUMBER_RE, line)
        if "slope" in lower:
            found["slope_deg"] = _search_float(_FIRST_NUMBER_RE, line)
        if "azimuth" in lower:
            found["azimuth_deg"] = _search_float(_FIRST_SIGNED_NUMBER_RE, line)
        if "radiation database" in lower:
            match = _AFTER_COLON_RE.search(line)
            if match:
                found["radiation_db"] = match.group(1).strip()
    return None, SiteMetadata(**found)


def _select_value_column(headers: Sequence[str]) -> Tuple[int, str]:
    for label in POWER_COLUMN_LABELS:
        if label in headers:
            return headers.index(label), POWER_COLUMN_DESCRIPTION
    for idx, header in enumerate(headers):
        if header in IRRADIANCE_COLUMN_LABELS:
            return idx, IRRADIANCE_COLUMN_DESCRIPTION
    raise MalformedInput(
        "CSV must contain a 'P' (PV power) or 'G(i)' (irradiance) column. "
        "Download hourly data from PVGIS."
    )


def _parse_month_hour(time_field: str) -> Optional[Tuple[int, int]]:
    """Extract (month, hour) from ``YYYYMMDD[:HHMM]``; None when malformed."""
    if not _DATE_PREFIX_RE.match(time_field):
        return None
    month = int(time_field[4:6])
    _, sep, clock = time_field.partition(":")
    if not sep:
        hour = 0
    elif _HOUR_PREFIX_RE.match(clock):
        hour = int(clock[:2])
    else:
        return None
    if not (1 <= month <= 12 and 0 <= hour < HOURS_PER_DAY):
        return None
    return month, hour


def _parse_value(parts: Sequence[str], idx: int) -> float:
    # missing, unparsable and negative readings count as no resource
    if idx >= len(parts):
        return 0.0
    try:
        value = float(parts[idx])
    except ValueError:
        return 0.0
    if not np.isfinite(value) or value < 0:
        return 0.0
    return value


def parse_pvgis_csv(text: str, *, min_rows: int | None = None) -> SolarResourceData:
    """
    Parse an hourly PVGIS export into a monthly average profile.

    The text is scanned once: the preamble (first 25 lines) for metadata and
    the ``time,...`` header, then every data row. Each row contributes its
    value to the bucket of its (month, hour-of-day); the profile is the mean
    of each bucket.

    Args:
        text: Full export contents.
        min_rows: Minimum number of recovered data rows; defaults to
            :func:`~solar_pump_sim.config.get_min_data_rows` (100).

    Returns:
        SolarResourceData with profile, metadata, row count and column used.

    Raises:
        MalformedInput: No header, neither ``P`` nor ``G(i)`` column, or
            fewer than ``min_rows`` rows recovered.

    Example:
        ```python
        data = parse_pvgis_csv(Path("Timeseries_1.406_34.480.csv").read_text())
        data.column_used        # "P (PV power)"
        data.profile.month(1)   # 24 hourly averages for January
        ```
    """
    if min_rows is None:
        min_rows = get_min_data_rows()

    lines = text.splitlines()
    header_idx, metadata = _scan_preamble(lines)
    if header_idx is None:
        raise MalformedInput(
            "Could not locate data rows. Expected PVGIS hourly format with a 'time' "
            "header and timestamps like 20230101:0006."
        )

    headers = [h.strip() for h in _FIELD_SPLIT_RE.split(lines[header_idx].strip())]
    time_idx = next((i for i, h in enumerate(headers) if h.lower() == "time"), 0)
    value_idx, column_used = _select_value_column(headers)

    sums = np.zeros((12, HOURS_PER_DAY), dtype=float)
    counts = np.zeros((12, HOURS_PER_DAY), dtype=int)
    row_count = 0
    skipped = 0

    for raw in lines[header_idx + 1:]:
        line = raw.strip()
        if not line or not _DATE_PREFIX_RE.match(line):
            continue
        parts = _FIELD_SPLIT_RE.split(line)
        time_field = parts[time_idx].strip() if time_idx < len(parts) else ""
        key = _parse_month_hour(time_field)
        if key is None:
            skipped += 1
            continue
        month, hour = key
        sums[month - 1, hour] += _parse_value(parts, value_idx)
        counts[month - 1, hour] += 1
        row_count += 1

    if skipped:
        logger.debug("Skipped %d rows with malformed timestamps", skipped)

    if row_count < min_rows:
        raise MalformedInput(
            f"Only found {row_count} data rows. Expected ~{HOURS_PER_YEAR} for a full year."
        )

    averages = np.zeros_like(sums)
    mask = counts > 0
    averages[mask] = sums[mask] / counts[mask]

    logger.info("Parsed %d hourly records using %s", row_count, column_used)
    return SolarResourceData(
        profile=MonthlyProfile(averages),
        metadata=metadata,
        row_count=row_count,
        column_used=column_used,
    )


def site_name_from_filename(path: str | Path) -> str:
    """``Timeseries_1.406_34.480_SA3.csv`` -> ``1.406 34.480 SA3``."""
    name = Path(path).name
    name = re.sub(r"\.(csv|txt)$", "", name, flags=re.IGNORECASE)
    name = re.sub(r"Timeseries_", "", name, flags=re.IGNORECASE)
    return name.replace("_", " ")


def parse_pvgis_file(path: str | Path, *, min_rows: int | None = None) -> SolarResourceData:
    """
    Read a PVGIS export from disk and parse it.

    The site name is derived from the file name when the export carries none.
    """
    file_path = Path(path)
    data = parse_pvgis_csv(file_path.read_text(encoding="utf-8"), min_rows=min_rows)
    if data.metadata.name:
        return data
    return replace(data, metadata=replace(data.metadata, name=site_name_from_filename(file_path)))


DEFAULT_SITE = SiteMetadata(
    lat=1.406,
    lon=34.480,
    elevation_m=1886.0,
    slope_deg=3.0,
    azimuth_deg=0.0,
    radiation_db="PVGIS-SARAH3",
    name="Kapchorwa, Uganda",
)


def make_default_profile_for_kapchorwa() -> MonthlyProfile:
    """
    Average hourly G(i) irradiance (W/m²) per month for Kapchorwa, Uganda.

    PVGIS-SARAH3, 2023, 3° slope, 0° azimuth. Interpreted as the output of a
    ~1 kWp array.
    """
    profiles_w = {
        1: [0, 0, 0, 0, 16.1, 260.6, 519.9, 747.5, 916.1, 1021.1, 988.0, 870.6,
            705.9, 545.0, 332.6, 117.5, 0, 0, 0, 0, 0, 0, 0, 0],
        2: [0, 0, 0, 0, 7.4, 233.9, 507.2, 725.4, 933.0, 1037.9, 1050.3, 894.6,
            712.4, 516.2, 343.6, 121.1, 0, 0, 0, 0, 0, 0, 0, 0],
        3: [0, 0, 0, 0, 15.9, 203.5, 442.3, 610.8, 788.2, 862.7, 890.8, 774.6,
            653.0, 452.7, 234.8, 88.7, 0, 0, 0, 0, 0, 0, 0, 0],
        4: [0, 0, 0, 0, 41.8, 236.9, 444.0, 638.9, 791.5, 856.2, 860.2, 801.1,
            595.5, 389.6, 237.5, 66.5, 0, 0, 0, 0, 0, 0, 0, 0],
        5: [0, 0, 0, 0, 60.4, 273.0, 495.2, 666.5, 821.0, 909.4, 903.9, 789.4,
            596.9, 394.7, 185.7, 49.2, 0, 0, 0, 0, 0, 0, 0, 0],
        6: [0, 0, 0, 0, 33.0, 209.8, 429.6, 588.7, 747.2, 760.1, 775.3, 708.8,
            615.5, 407.8, 183.2, 55.8, 0, 0, 0, 0, 0, 0, 0, 0],
        7: [0, 0, 0, 0, 22.2, 207.5, 426.2, 612.7, 769.2, 785.5, 773.2, 684.0,
            616.0, 449.3, 253.6, 72.5, 0, 0, 0, 0, 0, 0, 0, 0],
        8: [0, 0, 0, 0, 34.0, 247.3, 467.4, 699.7, 861.0, 918.3, 820.3, 751.0,
            623.0, 403.8, 248.6, 77.7, 0, 0, 0, 0, 0, 0, 0, 0],
        9: [0, 0, 0, 0, 50.4, 257.6, 513.2, 727.6, 863.8, 935.9, 908.0, 847.8,
            639.3, 405.3, 191.3, 48.8, 0, 0, 0, 0, 0, 0, 0, 0],
        10: [0, 0, 0, 0, 72.1, 275.5, 490.1, 699.7, 816.5, 857.7, 879.4, 702.7,
             466.3, 317.5, 174.5, 24.0, 0, 0, 0, 0, 0, 0, 0, 0],
        11: [0, 0, 0, 0, 62.8, 290.4, 515.3, 697.9, 824.8, 872.9, 784.2, 748.1,
             574.3, 376.6, 193.9, 24.6, 0, 0, 0, 0, 0, 0, 0, 0],
        12: [0, 0, 0, 0, 34.2, 279.2, 502.4, 708.4, 843.5, 915.3, 895.2, 821.1,
             627.1, 449.7, 231.7, 50.3, 0, 0, 0, 0, 0, 0, 0, 0],
    }
    return MonthlyProfile.from_mapping(profiles_w)
