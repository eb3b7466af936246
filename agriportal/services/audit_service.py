"""
Audit trail for changes to money and ownership (projects, investments, ratings,
accounts) and for moderator actions on community content and reports. Rows
outlive the acting user (user_id is nulled on account deletion).
"""
import json
import logging
from enum import Enum
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.audit_log import AuditLog
from agriportal.repositories.audit_repository import AuditFilter, AuditRepository

logger = logging.getLogger(__name__)


class AuditEntity(str, Enum):
    PROJECT = "project"
    INVESTMENT = "investment"
    RATING = "rating"
    ACCOUNT = "account"
    POST = "post"
    PRODUCT = "product"
    COMMENT = "comment"
    REPORT = "report"


class AuditService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = AuditRepository(db)

    async def record(
        self,
        user_id: Optional[int],
        action: str,
        entity: AuditEntity,
        entity_id: int,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditLog:
        log = AuditLog(
            user_id=user_id,
            action=action,
            entity=entity.value,
            entity_id=str(entity_id),
            details=json.dumps(details, ensure_ascii=False, default=str) if details else None,
        )
        logger.debug("audit %s %s:%s by user %s", action, entity.value, entity_id, user_id)
        return await self.repository.create(log)

    async def log_project_action(self, user_id: int, action: str, project_id: int, details: dict | None = None):
        return await self.record(user_id, action, AuditEntity.PROJECT, project_id, details)

    async def log_investment_action(self, user_id: int, action: str, investment_id: int, details: dict | None = None):
        return await self.record(user_id, action, AuditEntity.INVESTMENT, investment_id, details)

    async def log_rating_action(self, user_id: int, action: str, rating_id: int, details: dict | None = None):
        return await self.record(user_id, action, AuditEntity.RATING, rating_id, details)

    async def log_account_deleted(self, user_id: int, username: str) -> AuditLog:
        # Written without an actor: the user row is gone by the time anyone reads it
        return await self.record(None, "delete", AuditEntity.ACCOUNT, user_id, {"username": username})

    async def search(self, filters: AuditFilter, limit: int = 100, offset: int = 0) -> tuple[list[AuditLog], int]:
        """Page of matching entries, newest first, and the total match count"""
        items = await self.repository.list(filters, limit=limit, offset=offset)
        return items, await self.repository.count(filters)
