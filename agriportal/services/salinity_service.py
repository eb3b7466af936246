from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.core.config import settings
from agriportal.models.salinity import SalinityForecast
from agriportal.repositories.salinity_repository import SalinityRepository
from agriportal.schemas.salinity import AffectedArea, SalinityAverage, SalinityRecommendation

# (upper bound in g/L inclusive, label, crops, advice)
CROP_TIERS = [
    (1.0, "Vùng Ngọt Hóa", ["Lúa", "Sầu riêng", "Cam", "Rau"], "Nguồn nước an toàn, thích hợp đa canh."),
    (2.5, "Chịu Mặn Nhẹ", ["Lúa (ST24, ST25)", "Dừa", "Mía", "Dứa"], "Cần theo dõi độ mặn triều cường."),
    (4.0, "Chịu Mặn Trung Bình", ["Dừa xiêm", "Cói / Lác", "Mô hình Tôm - Lúa", "Thanh long"],
     "Hạn chế cây ăn trái mẫn cảm."),
]
HIGH_SALINITY_TIER = ("Vùng Mặn Cao", ["Tôm/Cua", "Không trồng lúa"], "Chuyển đổi sang nuôi trồng thủy sản.")


def get_salinity_level(salinity: float) -> str:
    if salinity < 1:
        return "safe"
    if salinity < 4:
        return "warning"
    return "danger"


def get_recommendations(salinity: float) -> SalinityRecommendation:
    level = get_salinity_level(salinity)
    for upper, label, crops, advice in CROP_TIERS:
        if salinity <= upper:
            return SalinityRecommendation(level=level, label=label, crops=crops, description=advice)
    label, crops, advice = HIGH_SALINITY_TIER
    return SalinityRecommendation(level=level, label=label, crops=crops, description=advice)


def get_user_province(profile_province: str | None) -> str:
    return profile_province or settings.DEFAULT_PROVINCE


class SalinityService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.forecasts = SalinityRepository(db)

    async def get_salinity_average(self, province: str, year: int) -> SalinityAverage:
        rows = await self.forecasts.list_for_province(province, year=year)
        if not rows:
            return SalinityAverage(province=province, year=year, average=None, count=0)
        average = sum(r.salinity for r in rows) / len(rows)
        return SalinityAverage(province=province, year=year, average=round(average, 2), count=len(rows))

    async def get_salinity_series(
        self,
        province: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[SalinityForecast]:
        return await self.forecasts.list_for_province(province, start=start, end=end)

    async def get_affected_areas(self) -> list[AffectedArea]:
        return [
            AffectedArea(
                province=row.province,
                salinity=row.salinity,
                level=get_salinity_level(row.salinity),
                forecast_date=row.forecast_date,
            )
            for row in await self.forecasts.latest_per_province()
        ]
