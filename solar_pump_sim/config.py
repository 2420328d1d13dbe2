from __future__ import annotations

import os
from pathlib import Path
from typing import Dict

DEFAULT_MIN_DATA_ROWS = 100
DEFAULT_RESULTS_DIR = "results"
DEFAULT_LOG_LEVEL = "INFO"


def _load_dotenv(path: str = ".env") -> Dict[str, str]:
    """
    Basic .env loader to populate os.environ when python-dotenv is unavailable.
    Returns a mapping of parsed key/value pairs.
    """
    env_path = Path(path)
    if not env_path.exists():
        return {}

    parsed: Dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        os.environ.setdefault(key, value)
        parsed[key] = value
    return parsed


_load_dotenv()


def get_min_data_rows() -> int:
    """
    Minimum number of hourly rows a solar export must yield to be accepted.

    Returns:
        Value of ``SOLAR_PUMP_MIN_ROWS`` or 100 when unset/invalid.
    """
    raw = os.getenv("SOLAR_PUMP_MIN_ROWS")
    if not raw:
        return DEFAULT_MIN_DATA_ROWS
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_MIN_DATA_ROWS
    return max(value, 0)


def get_results_dir() -> Path:
    """
    Determine the directory where exported simulation results are written.

    Returns:
        Absolute path, created if missing.
    """
    results_dir = Path(os.getenv("SOLAR_PUMP_RESULTS_DIR", DEFAULT_RESULTS_DIR)).expanduser()
    if not results_dir.is_absolute():
        results_dir = Path.cwd() / results_dir
    results_dir.mkdir(parents=True, exist_ok=True)
    return results_dir


def get_log_level() -> str:
    return os.getenv("SOLAR_PUMP_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
