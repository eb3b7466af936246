"""
Database seeding: the bootstrap administrator and the salinity forecast series
shown on the salinity pages.
"""
import asyncio
import logging
import math
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agriportal.core.config import settings
from agriportal.db.session import AsyncSessionLocal
from agriportal.models.salinity import SalinityForecast
from agriportal.models.user import User
from agriportal.repositories.salinity_repository import SalinityRepository
from agriportal.services.auth_service import AuthService

logger = logging.getLogger(__name__)

# Typical dry-season peak salinity (g/L) per Mekong Delta province
PROVINCE_PEAK_SALINITY = {
    "An Giang": 0.6,
    "Bạc Liêu": 7.5,
    "Bến Tre": 8.2,
    "Cà Mau": 9.0,
    "Cần Thơ": 1.4,
    "Đồng Tháp": 0.9,
    "Hậu Giang": 3.1,
    "Kiên Giang": 5.8,
    "Long An": 4.4,
    "Sóc Trăng": 6.7,
    "Tiền Giang": 5.2,
    "Trà Vinh": 6.9,
    "Vĩnh Long": 3.6,
}
SEED_YEARS = (2024, 2025, 2026)
FORECAST_FROM_YEAR = 2026


def monthly_salinity(peak: float, month: int) -> float:
    """Seasonal curve peaking in March, lowest in September"""
    season = (math.cos((month - 3) * math.pi / 6) + 1) / 2
    return round(peak * (0.15 + 0.85 * season), 2)


def build_salinity_rows() -> list[SalinityForecast]:
    return [
        SalinityForecast(
            province=province,
            forecast_date=date(year, month, 15),
            salinity=monthly_salinity(peak, month),
            is_forecast=year >= FORECAST_FROM_YEAR,
        )
        for province, peak in PROVINCE_PEAK_SALINITY.items()
        for year in SEED_YEARS
        for month in range(1, 13)
    ]


async def create_super_admin(db: AsyncSession) -> User | None:
    """Create the administrator from environment variables when none exists"""
    admin = await AuthService(db).ensure_admin(
        settings.SUPER_ADMIN_USERNAME,
        settings.SUPER_ADMIN_PASSWORD,
        settings.SUPER_ADMIN_PHONE,
    )
    if admin:
        logger.info("Bootstrap administrator %s is ready", admin.username)
    return admin


async def seed_salinity(db: AsyncSession) -> int:
    repository = SalinityRepository(db)
    if await repository.count() > 0:
        return 0
    rows = build_salinity_rows()
    await repository.add_many(rows)
    logger.info("Seeded %d salinity forecast rows", len(rows))
    return len(rows)


async def seed_database(session_factory: async_sessionmaker = AsyncSessionLocal) -> None:
    """Seed the database with initial data"""
    async with session_factory() as db:
        try:
            await create_super_admin(db)
            await seed_salinity(db)
        except Exception:
            await db.rollback()
            logger.exception("Database seeding failed")


if __name__ == "__main__":
    asyncio.run(seed_database())
