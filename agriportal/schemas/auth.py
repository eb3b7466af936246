from pydantic import BaseModel
from typing import Literal, Optional

from agriportal.schemas.user import UserOut


class RegisterInput(BaseModel):
    # Field rules live in core.validation so the messages stay in Vietnamese
    username: str
    password: str
    phone_number: str
    confirm_password: Optional[str] = None
    role: Literal["farmer", "business"] = "farmer"
    province: Optional[str] = None


class LoginInput(BaseModel):
    username: str
    password: str
    remember_me: bool = False


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_token: Optional[str] = None
    user: Optional[UserOut] = None


class RefreshTokenInput(BaseModel):
    refresh_token: str


class ChangePassword(BaseModel):
    current_password: str
    new_password: str


class UsernameAvailability(BaseModel):
    username: str
    available: bool
    error: Optional[str] = None


class PasswordInput(BaseModel):
    password: str


class PasswordStrength(BaseModel):
    level: Literal["weak", "medium", "strong"]
    score: int
