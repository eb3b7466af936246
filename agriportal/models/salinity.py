from __future__ import annotations
from datetime import date
from sqlalchemy import String, Date, Float, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from agriportal.db.base import Base


class SalinityForecast(Base):
    __tablename__ = "salinity_forecasts"
    __table_args__ = (UniqueConstraint("province", "forecast_date", name="uq_salinity_province_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    province: Mapped[str] = mapped_column(String(120), index=True)
    forecast_date: Mapped[date] = mapped_column(Date, index=True)
    # grams per litre
    salinity: Mapped[float] = mapped_column(Float)
    is_forecast: Mapped[bool] = mapped_column(Boolean, default=False)
