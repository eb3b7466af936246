from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.audit_log import AuditLog


@dataclass
class AuditFilter:
    user_id: Optional[int] = None
    entity: Optional[str] = None
    entity_id: Optional[str] = None
    action: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None

    def apply(self, query: Select) -> Select:
        conditions = []
        if self.user_id is not None:
            conditions.append(AuditLog.user_id == self.user_id)
        if self.entity:
            conditions.append(AuditLog.entity == self.entity)
        if self.entity_id:
            conditions.append(AuditLog.entity_id == self.entity_id)
        if self.action:
            conditions.append(AuditLog.action == self.action)
        if self.since:
            conditions.append(AuditLog.created_at >= self.since)
        if self.until:
            conditions.append(AuditLog.created_at <= self.until)
        return query.where(and_(*conditions)) if conditions else query


class AuditRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, log: AuditLog) -> AuditLog:
        self.db.add(log)
        await self.db.commit()
        await self.db.refresh(log)
        return log

    async def list(self, filters: AuditFilter, limit: int = 100, offset: int = 0) -> list[AuditLog]:
        query = filters.apply(select(AuditLog)).order_by(AuditLog.id.desc()).limit(limit).offset(offset)
        res = await self.db.execute(query)
        return list(res.scalars().all())

    async def count(self, filters: AuditFilter) -> int:
        res = await self.db.execute(filters.apply(select(func.count(AuditLog.id))))
        return res.scalar() or 0
