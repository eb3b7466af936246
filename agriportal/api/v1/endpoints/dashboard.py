from fastapi import APIRouter, Query

from agriportal.core.deps import DBSessionDep, CurrentUser, OptionalUser
from agriportal.schemas.dashboard import Activity, UserStats
from agriportal.schemas.post import TrendingPost
from agriportal.schemas.product import ProductOut
from agriportal.schemas.project import ProjectWithStats
from agriportal.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=UserStats)
async def user_stats(db: DBSessionDep, user: CurrentUser):
    return await DashboardService(db).get_user_stats(user)


@router.get("/activities", response_model=list[Activity])
async def recent_activities(db: DBSessionDep, user: CurrentUser, limit: int = Query(10, ge=1, le=50)):
    return await DashboardService(db).get_recent_activities(user, limit)


@router.get("/trending-posts", response_model=list[TrendingPost])
async def trending_posts(db: DBSessionDep, viewer: OptionalUser, limit: int = Query(5, ge=1, le=20)):
    return await DashboardService(db).get_trending_posts(viewer, limit)


@router.get("/recent-products", response_model=list[ProductOut])
async def recent_products(db: DBSessionDep, limit: int = Query(4, ge=1, le=20)):
    return await DashboardService(db).get_recent_products(limit)


@router.get("/active-projects", response_model=list[ProjectWithStats])
async def active_projects(db: DBSessionDep, limit: int = Query(3, ge=1, le=20)):
    return await DashboardService(db).get_active_projects(limit)
