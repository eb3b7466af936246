from fastapi import APIRouter, HTTPException, status

from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.schemas.admin import ReportCreate, ReportOut
from agriportal.services.admin_service import AdminService

router = APIRouter()


@router.post("", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
async def create_report(db: DBSessionDep, data: ReportCreate, user: CurrentUser):
    """Flag a post, product, project, comment or user for administrator review"""
    try:
        return await AdminService(db).create_report(
            user, data.content_type, data.content_id, data.reason, data.description
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
