from fastapi import APIRouter, HTTPException, status

from agriportal.core.deps import DBSessionDep, CurrentUser, BrokerDep
from agriportal.repositories.project_repository import ProjectRepository
from agriportal.schemas.investment import InvestmentCreate, InvestmentOut, InvestmentStatusUpdate, InvestmentWithProject
from agriportal.services.investment_service import InvestmentService

router = APIRouter()


@router.post("/projects/{project_id}/investments", response_model=InvestmentOut, status_code=status.HTTP_201_CREATED)
async def invest(db: DBSessionDep, broker: BrokerDep, project_id: int, data: InvestmentCreate, user: CurrentUser):
    try:
        return await InvestmentService(db, broker).invest(user, project_id, data.model_dump())
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/projects/{project_id}/investments", response_model=list[InvestmentOut])
async def list_project_investments(db: DBSessionDep, project_id: int, user: CurrentUser):
    """Investor contact details are only visible to the project owner and admins"""
    project = await ProjectRepository(db).get_by_id(project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Không tìm thấy dự án")
    if project.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Bạn không có quyền xem danh sách đầu tư")
    return await InvestmentService(db).list_project_investments(project_id)


@router.get("/investments/me", response_model=list[InvestmentWithProject])
async def my_investments(db: DBSessionDep, user: CurrentUser):
    investments = await InvestmentService(db).list_user_investments(user.id)
    projects = {p.id: p for p in await ProjectRepository(db).list_by_ids({i.project_id for i in investments})}
    return [
        InvestmentWithProject.model_validate(i).model_copy(
            update={"project_title": projects[i.project_id].title if i.project_id in projects else None}
        )
        for i in investments
    ]


@router.patch("/investments/{investment_id}/status", response_model=InvestmentOut)
async def update_investment_status(db: DBSessionDep, investment_id: int, data: InvestmentStatusUpdate, user: CurrentUser):
    try:
        investment = await InvestmentService(db).update_status(user, investment_id, data.status)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not investment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Không tìm thấy khoản đầu tư")
    return investment
