from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.schemas.project import ProjectCreate, ProjectUpdate, ProjectStatusUpdate, ProjectWithStats
from agriportal.services.project_service import ProjectService
from agriportal.services.storage_service import UploadedImage

router = APIRouter()

PROJECT_NOT_FOUND = "Không tìm thấy dự án"


@router.get("", response_model=list[ProjectWithStats])
async def list_projects(
    db: DBSessionDep,
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Public project listing, newest first"""
    return await ProjectService(db).list_projects(status=status_filter, limit=limit, offset=offset)


@router.post("", response_model=ProjectWithStats, status_code=status.HTTP_201_CREATED)
async def create_project(db: DBSessionDep, data: ProjectCreate, user: CurrentUser):
    try:
        return await ProjectService(db).create_project(user, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/me", response_model=list[ProjectWithStats])
async def my_projects(db: DBSessionDep, user: CurrentUser):
    return await ProjectService(db).list_user_projects(user.id)


@router.get("/{project_id}", response_model=ProjectWithStats)
async def get_project(db: DBSessionDep, project_id: int):
    project = await ProjectService(db).get_project(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND)
    return project


@router.put("/{project_id}", response_model=ProjectWithStats)
async def update_project(db: DBSessionDep, project_id: int, data: ProjectUpdate, user: CurrentUser):
    try:
        project = await ProjectService(db).update_project(user, project_id, data.model_dump(exclude_unset=True))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND)
    return project


@router.patch("/{project_id}/status", response_model=ProjectWithStats)
async def set_project_status(db: DBSessionDep, project_id: int, data: ProjectStatusUpdate, user: CurrentUser):
    try:
        project = await ProjectService(db).set_status(user, project_id, data.status)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND)
    return project


@router.post("/{project_id}/image", response_model=ProjectWithStats)
async def upload_project_image(db: DBSessionDep, project_id: int, user: CurrentUser, file: UploadFile = File(...)):
    image = UploadedImage(content=await file.read(), content_type=file.content_type, filename=file.filename)
    try:
        project = await ProjectService(db).set_image(user, project_id, image)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND)
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(db: DBSessionDep, project_id: int, user: CurrentUser):
    try:
        deleted = await ProjectService(db).delete_project(user, project_id)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND)
