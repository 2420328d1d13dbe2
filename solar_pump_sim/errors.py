"""
Error taxonomy shared by ingestion, the pump model and the outer layers.

Two families of failures are reported to callers:

* :class:`MalformedInput` - a solar resource export cannot be turned into a
  monthly profile (no header/data section, no usable column, implausibly
  few rows, negative profile values).
* :class:`ConfigurationError` - a system definition that the pump model or
  the simulation engine cannot accept (non-positive head, empty pump curve,
  negative tank capacity or demand).

Both subclass :class:`ValueError` so callers that only guard against bad
values keep working.
"""

from __future__ import annotations


class SolarPumpError(Exception):
    """Base class for every error raised by the package."""


class MalformedInput(SolarPumpError, ValueError):
    """Raised when solar resource input cannot be parsed into a profile."""


class ConfigurationError(SolarPumpError, ValueError):
    """Raised when a pump curve or simulation configuration is invalid."""
