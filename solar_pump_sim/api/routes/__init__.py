"""
API route modules for the solar pump simulator.

This package organizes FastAPI route handlers by domain:
- simulation: Year-long simulation of an inline scenario
- profiles: Parsing of solar resource exports
- pumps: Pump datasheet presets and curves

All routers are prefixed with /api when included in the main application.
"""

from __future__ import annotations

from .profiles import router as profiles_router
from .pumps import router as pumps_router
from .simulation import router as simulation_router

__all__ = [
    "simulation_router",
    "profiles_router",
    "pumps_router",
]
