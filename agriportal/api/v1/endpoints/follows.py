from fastapi import APIRouter, HTTPException, Query, status

from agriportal.core.deps import DBSessionDep, CurrentUser, OptionalUser, BrokerDep
from agriportal.schemas.follow import FollowEntry, FollowState, FollowStats, FollowedProject, ProjectFollowStats
from agriportal.schemas.post import PostOut
from agriportal.services.follow_service import FollowService

router = APIRouter()


def _not_found(e: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/feed", response_model=list[PostOut])
async def following_feed(
    db: DBSessionDep,
    user: CurrentUser,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Posts from the users the caller follows, newest first"""
    return await FollowService(db).following_feed(user, limit=limit, offset=offset)


@router.post("/users/{user_id}", response_model=FollowState)
async def follow_user(db: DBSessionDep, broker: BrokerDep, user_id: int, user: CurrentUser):
    try:
        await FollowService(db, broker).follow_user(user, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LookupError as e:
        raise _not_found(e)
    return FollowState(following=True)


@router.delete("/users/{user_id}", response_model=FollowState)
async def unfollow_user(db: DBSessionDep, user_id: int, user: CurrentUser):
    await FollowService(db).unfollow_user(user, user_id)
    return FollowState(following=False)


@router.get("/users/{user_id}/stats", response_model=FollowStats)
async def user_follow_stats(db: DBSessionDep, user_id: int, viewer: OptionalUser):
    try:
        return await FollowService(db).user_stats(user_id, viewer)
    except LookupError as e:
        raise _not_found(e)


@router.get("/users/{user_id}/followers", response_model=list[FollowEntry])
async def user_followers(
    db: DBSessionDep,
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return await FollowService(db).followers(user_id, limit=limit, offset=offset)
    except LookupError as e:
        raise _not_found(e)


@router.get("/users/{user_id}/following", response_model=list[FollowEntry])
async def user_following(
    db: DBSessionDep,
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return await FollowService(db).following(user_id, limit=limit, offset=offset)
    except LookupError as e:
        raise _not_found(e)


@router.get("/users/{user_id}/projects", response_model=list[FollowedProject])
async def followed_projects(
    db: DBSessionDep,
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return await FollowService(db).followed_projects(user_id, limit=limit, offset=offset)
    except LookupError as e:
        raise _not_found(e)


@router.post("/projects/{project_id}", response_model=FollowState)
async def follow_project(db: DBSessionDep, project_id: int, user: CurrentUser):
    try:
        await FollowService(db).follow_project(user, project_id)
    except LookupError as e:
        raise _not_found(e)
    return FollowState(following=True)


@router.delete("/projects/{project_id}", response_model=FollowState)
async def unfollow_project(db: DBSessionDep, project_id: int, user: CurrentUser):
    await FollowService(db).unfollow_project(user, project_id)
    return FollowState(following=False)


@router.get("/projects/{project_id}/stats", response_model=ProjectFollowStats)
async def project_follow_stats(db: DBSessionDep, project_id: int, viewer: OptionalUser):
    try:
        return await FollowService(db).project_stats(project_id, viewer)
    except LookupError as e:
        raise _not_found(e)


@router.get("/projects/{project_id}/followers", response_model=list[FollowEntry])
async def project_followers(
    db: DBSessionDep,
    project_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    try:
        return await FollowService(db).project_followers(project_id, limit=limit, offset=offset)
    except LookupError as e:
        raise _not_found(e)
