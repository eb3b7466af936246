from fastapi import APIRouter, HTTPException, Query, status

from agriportal.core.deps import DBSessionDep, CurrentUser, BrokerDep
from agriportal.schemas.rating import RatingInput, RatingOut, RatingStats, RatingPage, CanRate, LeaderboardProject
from agriportal.services.rating_service import RatingService

router = APIRouter()


@router.post("/projects/{project_id}/ratings", response_model=RatingOut)
async def rate_project(db: DBSessionDep, broker: BrokerDep, project_id: int, data: RatingInput, user: CurrentUser):
    """Create or replace the caller's rating of a project they invested in"""
    try:
        return await RatingService(db, broker).rate_project(user, project_id, data.rating, data.review)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/projects/{project_id}/ratings", response_model=RatingPage)
async def list_ratings(
    db: DBSessionDep,
    project_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    items, total = await RatingService(db).get_project_ratings(project_id, page=page, page_size=page_size)
    return RatingPage(items=items, total=total, page=page, page_size=page_size)


@router.get("/projects/{project_id}/ratings/me", response_model=RatingOut | None)
async def my_rating(db: DBSessionDep, project_id: int, user: CurrentUser):
    return await RatingService(db).get_user_rating(user, project_id)


@router.get("/projects/{project_id}/ratings/stats", response_model=RatingStats)
async def rating_stats(db: DBSessionDep, project_id: int):
    return await RatingService(db).get_project_rating_stats(project_id)


@router.get("/projects/{project_id}/ratings/can-rate", response_model=CanRate)
async def can_rate(db: DBSessionDep, project_id: int, user: CurrentUser):
    return CanRate(can_rate=await RatingService(db).can_user_rate(user, project_id))


@router.get("/leaderboard/projects", response_model=list[LeaderboardProject])
async def project_leaderboard(db: DBSessionDep, limit: int | None = Query(None, ge=1, le=100)):
    return await RatingService(db).get_project_leaderboard(limit)
