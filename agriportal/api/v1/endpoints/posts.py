from fastapi import APIRouter, HTTPException, Query, status

from agriportal.core.deps import DBSessionDep, CurrentUser, OptionalUser, BrokerDep
from agriportal.schemas.post import PostCreate, PostUpdate, PostOut, CommentCreate, CommentOut, LikeState
from agriportal.services.post_service import PostService

router = APIRouter()

POST_NOT_FOUND = "Không tìm thấy bài viết"


@router.get("", response_model=list[PostOut])
async def list_posts(
    db: DBSessionDep,
    viewer: OptionalUser,
    category: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return await PostService(db).list_posts(viewer, category=category, limit=limit, offset=offset)


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(db: DBSessionDep, data: PostCreate, user: CurrentUser):
    try:
        return await PostService(db).create_post(user, data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(db: DBSessionDep, comment_id: int, user: CurrentUser):
    try:
        deleted = await PostService(db).delete_comment(user, comment_id)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Không tìm thấy bình luận")


@router.get("/{post_id}", response_model=PostOut)
async def get_post(db: DBSessionDep, post_id: int, viewer: OptionalUser):
    post = await PostService(db).get_post(post_id, viewer)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=POST_NOT_FOUND)
    return post


@router.put("/{post_id}", response_model=PostOut)
async def update_post(db: DBSessionDep, post_id: int, data: PostUpdate, user: CurrentUser):
    try:
        post = await PostService(db).update_post(user, post_id, data.model_dump(exclude_unset=True))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=POST_NOT_FOUND)
    return post


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(db: DBSessionDep, post_id: int, user: CurrentUser):
    try:
        deleted = await PostService(db).delete_post(user, post_id)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=POST_NOT_FOUND)


@router.post("/{post_id}/view")
async def track_view(db: DBSessionDep, post_id: int):
    views = await PostService(db).track_view(post_id)
    if views is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=POST_NOT_FOUND)
    return {"views_count": views}


@router.post("/{post_id}/like", response_model=LikeState)
async def like_post(db: DBSessionDep, broker: BrokerDep, post_id: int, user: CurrentUser):
    try:
        liked, count = await PostService(db, broker).like_post(user, post_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return LikeState(liked=liked, likes_count=count)


@router.delete("/{post_id}/like", response_model=LikeState)
async def unlike_post(db: DBSessionDep, post_id: int, user: CurrentUser):
    try:
        liked, count = await PostService(db).unlike_post(user, post_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return LikeState(liked=liked, likes_count=count)


@router.get("/{post_id}/comments", response_model=list[CommentOut])
async def list_comments(db: DBSessionDep, post_id: int):
    """Top-level comments with their replies nested"""
    return await PostService(db).get_comments(post_id)


@router.post("/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(db: DBSessionDep, broker: BrokerDep, post_id: int, data: CommentCreate, user: CurrentUser):
    try:
        return await PostService(db, broker).add_comment(user, post_id, data.content, data.parent_comment_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
