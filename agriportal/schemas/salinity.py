from datetime import date
from pydantic import BaseModel, ConfigDict
from typing import Literal

SalinityLevel = Literal["safe", "warning", "danger"]


class SalinityPoint(BaseModel):
    province: str
    forecast_date: date
    salinity: float
    is_forecast: bool

    model_config = ConfigDict(from_attributes=True)


class SalinityAverage(BaseModel):
    province: str
    year: int
    average: float | None
    count: int


class SalinityRecommendation(BaseModel):
    level: SalinityLevel
    label: str
    crops: list[str]
    description: str


class AffectedArea(BaseModel):
    province: str
    salinity: float
    level: SalinityLevel
    forecast_date: date
