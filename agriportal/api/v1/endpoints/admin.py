from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from agriportal.core.deps import DBSessionDep, BrokerDep, require_admin
from agriportal.schemas.admin import (
    AdminStats, AdminUserOut, BanRequest, ChangeRoleRequest, DeletableType, ModerateRequest,
    ModeratedType, ModerationItem, ReportOut, ReportStatusLiteral, ResolveReportRequest,
)
from agriportal.services.admin_service import AdminService

router = APIRouter()


def _error(e: Exception) -> HTTPException:
    if isinstance(e, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/stats", response_model=AdminStats)
async def admin_stats(db: DBSessionDep, admin=Depends(require_admin())):
    return await AdminService(db).get_stats()


@router.get("/users", response_model=list[AdminUserOut])
async def admin_list_users(
    db: DBSessionDep,
    search: str | None = Query(None),
    role: Literal["farmer", "business"] | None = Query(None),
    account_status: Literal["active", "banned"] | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin=Depends(require_admin()),
):
    return await AdminService(db).list_users(
        search=search, role=role, status=account_status, limit=limit, offset=offset
    )


@router.post("/users/{user_id}/ban", response_model=AdminUserOut)
async def admin_ban_user(db: DBSessionDep, user_id: int, data: BanRequest, admin=Depends(require_admin())):
    """Ban or unban an account; banned users can neither sign in nor use existing tokens"""
    try:
        return await AdminService(db).set_ban(admin, user_id, data.ban_status, data.reason)
    except (ValueError, LookupError) as e:
        raise _error(e)


@router.put("/users/{user_id}/role", response_model=AdminUserOut)
async def admin_change_role(
    db: DBSessionDep, user_id: int, data: ChangeRoleRequest, admin=Depends(require_admin())
):
    try:
        return await AdminService(db).change_role(admin, user_id, data.new_role, data.make_admin)
    except (ValueError, LookupError) as e:
        raise _error(e)


@router.get("/content", response_model=list[ModerationItem])
async def admin_list_content(
    db: DBSessionDep,
    content_type: ModeratedType = Query("post"),
    moderation_status: Literal["pending", "approved", "rejected"] | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin=Depends(require_admin()),
):
    return await AdminService(db).list_content(content_type, status=moderation_status, limit=limit, offset=offset)


@router.post("/content/{content_type}/{content_id}/moderate", response_model=ModerationItem)
async def admin_moderate(
    db: DBSessionDep,
    broker: BrokerDep,
    content_type: ModeratedType,
    content_id: int,
    data: ModerateRequest,
    admin=Depends(require_admin()),
):
    try:
        return await AdminService(db, broker).moderate(admin, content_type, content_id, data.new_status, data.note)
    except LookupError as e:
        raise _error(e)


@router.delete("/content/{content_type}/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_content(
    db: DBSessionDep,
    broker: BrokerDep,
    content_type: DeletableType,
    content_id: int,
    reason: str = Query(""),
    admin=Depends(require_admin()),
):
    try:
        await AdminService(db, broker).delete_content(admin, content_type, content_id, reason)
    except (ValueError, LookupError) as e:
        raise _error(e)
    return None


@router.get("/reports", response_model=list[ReportOut])
async def admin_list_reports(
    db: DBSessionDep,
    report_status: ReportStatusLiteral | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin=Depends(require_admin()),
):
    return await AdminService(db).list_reports(status=report_status, limit=limit, offset=offset)


@router.post("/reports/{report_id}/resolve", response_model=ReportOut)
async def admin_resolve_report(
    db: DBSessionDep, report_id: int, data: ResolveReportRequest, admin=Depends(require_admin())
):
    try:
        return await AdminService(db).resolve_report(admin, report_id, data.new_status, data.resolution_note)
    except (ValueError, LookupError) as e:
        raise _error(e)
