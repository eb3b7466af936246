from datetime import date

from fastapi import APIRouter, Query

from agriportal.core.config import settings
from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.schemas.salinity import AffectedArea, SalinityAverage, SalinityPoint, SalinityRecommendation
from agriportal.services.salinity_service import SalinityService, get_recommendations, get_user_province

router = APIRouter()


@router.get("/average", response_model=SalinityAverage)
async def salinity_average(db: DBSessionDep, province: str = Query(...), year: int = Query(...)):
    return await SalinityService(db).get_salinity_average(province, year)


@router.get("/series", response_model=list[SalinityPoint])
async def salinity_series(
    db: DBSessionDep,
    province: str = Query(...),
    start: date | None = Query(None),
    end: date | None = Query(None),
):
    return await SalinityService(db).get_salinity_series(province, start, end)


@router.get("/recommendations", response_model=SalinityRecommendation)
async def recommendations(salinity: float = Query(..., ge=0)):
    return get_recommendations(salinity)


@router.get("/affected-areas", response_model=list[AffectedArea])
async def affected_areas(db: DBSessionDep):
    return await SalinityService(db).get_affected_areas()


@router.get("/my-province")
async def my_province(user: CurrentUser):
    return {"province": get_user_province(user.province)}


@router.get("/config")
async def map_config():
    """Client-side map configuration"""
    return {"maps_api_key": settings.MAPS_API_KEY, "default_province": settings.DEFAULT_PROVINCE}
