from fastapi import APIRouter, File, HTTPException, UploadFile, status

from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.user import UserOut, UserPublic, UserUpdate
from agriportal.services.auth_service import AuthService
from agriportal.services.storage_service import StorageService, UploadedImage

router = APIRouter()


@router.get("/me", response_model=UserOut)
async def get_me(user: CurrentUser):
    return user


@router.put("/me", response_model=UserOut)
async def update_me(db: DBSessionDep, data: UserUpdate, user: CurrentUser):
    try:
        return await AuthService(db).update_profile(
            user,
            phone_number=data.phone_number,
            avatar_url=data.avatar_url,
            province=data.province,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/me/avatar", response_model=UserOut)
async def upload_avatar(db: DBSessionDep, user: CurrentUser, file: UploadFile = File(...)):
    image = UploadedImage(content=await file.read(), content_type=file.content_type, filename=file.filename)
    storage = StorageService()
    try:
        url = storage.upload_image(bucket="avatars", user_id=user.id, image=image)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    old_url = user.avatar_url
    updated = await AuthService(db).update_profile(user, avatar_url=url)
    storage.delete_file(old_url)
    return updated


@router.get("/{username}", response_model=UserPublic)
async def get_user(db: DBSessionDep, username: str, user: CurrentUser):
    found = await UserRepository(db).get_by_username(username)
    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Không tìm thấy người dùng")
    return found
