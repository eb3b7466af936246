from fastapi import APIRouter, status

from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.schemas.settings import SettingsOut, SettingsUpdate, DataExport
from agriportal.services.settings_service import SettingsService

router = APIRouter()


@router.get("", response_model=SettingsOut)
async def get_settings(db: DBSessionDep, user: CurrentUser):
    return await SettingsService(db).get_user_settings(user)


@router.put("", response_model=SettingsOut)
async def update_settings(db: DBSessionDep, data: SettingsUpdate, user: CurrentUser):
    return await SettingsService(db).update_user_settings(user, **data.model_dump(exclude_unset=True))


@router.get("/export", response_model=DataExport)
async def export_data(db: DBSessionDep, user: CurrentUser):
    return await SettingsService(db).export_user_data(user)


@router.delete("/account", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(db: DBSessionDep, user: CurrentUser):
    await SettingsService(db).delete_user_account(user)
