"""
Pump datasheet schemas for API validation.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class PumpPointSchema(BaseModel):
    flow_m3h: float = Field(..., ge=0.0, description="Flow at the reference head [m³/h]")
    power_w: float = Field(..., ge=0.0, description="Input power [W]")


class PumpCurveSchema(BaseModel):
    name: str
    reference_head_m: float = Field(..., gt=0.0)
    points: List[PumpPointSchema]


class CurveSample(BaseModel):
    power_w: float
    flow_m3h: float


class PumpPresetResponse(PumpCurveSchema):
    """
    Datasheet preset with its curve sampled at the requested head.
    """

    max_power_w: float
    curve: List[CurveSample]
