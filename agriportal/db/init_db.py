"""
Database initialization - creates all tables and indexes from the SQLAlchemy
models in agriportal/models/.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from agriportal.db.base import Base

# Import all models to ensure they are registered with Base.metadata
from agriportal.models import (  # noqa: F401
    User,
    InvestmentProject,
    ProjectInvestment,
    ProjectRating,
    Notification,
    UserSettings,
    Post,
    PostLike,
    PostComment,
    Product,
    SalinityForecast,
    AuditLog,
    UserFollow,
    ProjectFollow,
    ContentReport,
)

logger = logging.getLogger(__name__)


async def init_database(engine: AsyncEngine):
    """
    Create all tables, indexes and foreign keys. Called on application startup.
    A database that cannot be reached is logged and the app keeps starting, so the
    next startup retries.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialization completed successfully")
    except OSError:
        logger.exception(
            "Cannot connect to the database. Check that it is running and that "
            "DATABASE_URL points to it."
        )
    except Exception:
        logger.exception("Error during database initialization")
