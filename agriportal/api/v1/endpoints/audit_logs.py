from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query

from agriportal.core.deps import DBSessionDep, require_admin
from agriportal.repositories.audit_repository import AuditFilter
from agriportal.schemas.audit_log import AuditLogOut, AuditLogPage
from agriportal.services.audit_service import AuditService

router = APIRouter()

AuditEntityName = Literal["project", "investment", "rating", "account", "post", "product", "comment", "report"]


@router.get("", response_model=AuditLogPage)
async def list_audit_logs(
    db: DBSessionDep,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user_id: int | None = Query(None),
    entity: AuditEntityName | None = Query(None),
    entity_id: str | None = Query(None),
    action: str | None = Query(None),
    since: datetime | None = Query(None),
    until: datetime | None = Query(None),
    admin=Depends(require_admin()),
):
    """Admin only: money and ownership changes, newest first"""
    filters = AuditFilter(
        user_id=user_id, entity=entity, entity_id=entity_id, action=action, since=since, until=until
    )
    items, total = await AuditService(db).search(filters, limit=limit, offset=offset)
    return AuditLogPage(items=[AuditLogOut.model_validate(log) for log in items], total=total)
