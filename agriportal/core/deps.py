from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection

from agriportal.core.config import settings
from agriportal.db.session import get_db
from agriportal.core.security import user_id_from_token
from agriportal.models.user import User
from agriportal.repositories.user_repository import UserRepository
from agriportal.services.realtime import NotificationBroker


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token", auto_error=False)


DBSessionDep = Annotated[AsyncSession, Depends(get_db)]


async def user_from_token(db: AsyncSession, token: str | None) -> User | None:
    if not token:
        return None
    user_id = user_id_from_token(token)
    if user_id is None:
        return None
    user = await UserRepository(db).get_by_id(user_id)
    if not user or not user.is_active or user.is_banned:
        return None
    return user


async def get_current_user(db: DBSessionDep, token: Annotated[str, Depends(oauth2_scheme)]) -> User:
    user = await user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Phiên đăng nhập không hợp lệ",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    db: DBSessionDep, token: Annotated[str | None, Depends(optional_oauth2_scheme)]
) -> User | None:
    """Current user when a valid token is sent, otherwise None"""
    return await user_from_token(db, token)


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]


def require_admin():
    """Require the administrator flag"""
    async def _admin_dep(user: User = Depends(get_current_user)):
        if not user.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Chỉ quản trị viên mới có quyền truy cập"
            )
        return user
    return _admin_dep


def get_notification_broker(connection: HTTPConnection) -> NotificationBroker:
    """Broker shared by HTTP routes and the notification WebSocket"""
    return connection.app.state.notification_broker


BrokerDep = Annotated[NotificationBroker, Depends(get_notification_broker)]
