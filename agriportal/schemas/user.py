from datetime import datetime
from pydantic import BaseModel, ConfigDict


class UserPublic(BaseModel):
    id: int
    username: str
    role: str
    avatar_url: str | None = None
    province: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserOut(UserPublic):
    phone_number: str | None = None
    is_admin: bool = False
    is_active: bool = True
    created_at: datetime
    last_login: datetime | None = None


class UserUpdate(BaseModel):
    phone_number: str | None = None
    avatar_url: str | None = None
    province: str | None = None
