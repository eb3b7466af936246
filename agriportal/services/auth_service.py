import logging
from datetime import datetime
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.core.security import verify_password, hash_password, create_token_pair, user_id_from_token
from agriportal.core.validation import (
    validate_sign_up_data,
    validate_sign_in_data,
    validate_password,
    validate_phone_number,
    validate_username,
    normalize_phone_number,
)
from agriportal.models.user import User, UserRole
from agriportal.models.user_settings import UserSettings
from agriportal.repositories.user_repository import UserRepository
from agriportal.repositories.settings_repository import SettingsRepository
from agriportal.schemas.user import UserOut

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Tên đăng nhập hoặc mật khẩu không đúng"
ACCOUNT_LOCKED = "Tài khoản đã bị khóa"


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    async def is_username_available(self, username: str) -> bool:
        return await self.users.get_by_username(username) is None

    async def register(
        self,
        username: str,
        password: str,
        phone_number: str,
        confirm_password: str | None = None,
        role: str = UserRole.FARMER.value,
        province: str | None = None,
        is_admin: bool = False,
    ) -> User:
        errors = validate_sign_up_data(username, password, phone_number, confirm_password)
        if errors:
            raise ValueError(errors[0].message)
        if role not in (UserRole.FARMER.value, UserRole.BUSINESS.value):
            role = UserRole.FARMER.value
        if not await self.is_username_available(username):
            raise ValueError("Tên đăng nhập đã tồn tại")

        user = User(
            username=username,
            phone_number=normalize_phone_number(phone_number),
            password_hash=hash_password(password),
            role=role,
            province=province,
            is_admin=is_admin,
            is_active=True,
        )
        user = await self.users.create(user)
        await SettingsRepository(self.db).create(UserSettings(user_id=user.id))
        logger.info("Registered user %s (%s)", user.username, user.role)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        errors = validate_sign_in_data(username, password)
        if errors:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=errors[0].message)
        user = await self.users.get_by_username(username)
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed sign in for %s", username)
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
        if not user.is_active or user.is_banned:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=ACCOUNT_LOCKED)
        user.last_login = datetime.utcnow()
        return await self.users.update(user)

    async def login(self, username: str, password: str, remember_me: bool = False) -> dict:
        user = await self.authenticate(username, password)
        tokens = create_token_pair(user.id, remember_me)
        tokens["user"] = UserOut.model_validate(user)
        return tokens

    async def refresh(self, refresh_token: str) -> dict:
        user_id = user_id_from_token(refresh_token, token_type="refresh")
        user = await self.users.get_by_id(user_id) if user_id is not None else None
        if not user or not user.is_active or user.is_banned:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Phiên đăng nhập đã hết hạn")
        return create_token_pair(user.id)

    async def update_profile(
        self,
        user: User,
        phone_number: str | None = None,
        avatar_url: str | None = None,
        province: str | None = None,
    ) -> User:
        if phone_number is not None:
            error = validate_phone_number(phone_number)
            if error:
                raise ValueError(error.message)
            user.phone_number = normalize_phone_number(phone_number)
        if avatar_url is not None:
            user.avatar_url = avatar_url or None
        if province is not None:
            user.province = province.strip() or None
        return await self.users.update(user)

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise ValueError("Mật khẩu hiện tại không đúng")
        error = validate_password(new_password)
        if error:
            raise ValueError(error.message)
        user.password_hash = hash_password(new_password)
        await self.users.update(user)
        logger.info("User %s changed password", user.id)

    async def ensure_admin(self, username: str, password: str, phone_number: str) -> User | None:
        """Create the bootstrap administrator when no admin exists yet"""
        if await self.users.has_admin_user():
            return None
        if validate_username(username) is not None:
            logger.warning("SUPER_ADMIN_USERNAME %r is not a valid username, skipping admin bootstrap", username)
            return None
        existing = await self.users.get_by_username(username)
        if existing:
            existing.is_admin = True
            return await self.users.update(existing)
        return await self.register(username, password, phone_number, is_admin=True)
