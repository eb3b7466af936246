from fastapi import APIRouter, Query

from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.schemas.contributor import ContributorOut, UserRank
from agriportal.services.contributor_service import ContributorService

router = APIRouter()


@router.get("/top", response_model=list[ContributorOut])
async def top_contributors(db: DBSessionDep, limit: int = Query(10, ge=1, le=100)):
    return await ContributorService(db).get_top_contributors(limit)


@router.get("/me/rank", response_model=UserRank)
async def my_rank(db: DBSessionDep, user: CurrentUser):
    return await ContributorService(db).get_user_rank(user)
