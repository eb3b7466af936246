from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm

from agriportal.core.deps import DBSessionDep, CurrentUser
from agriportal.core.validation import validate_username, get_password_strength
from agriportal.schemas.auth import (
    RegisterInput, LoginInput, Token, RefreshTokenInput, ChangePassword,
    UsernameAvailability, PasswordInput, PasswordStrength,
)
from agriportal.schemas.user import UserOut
from agriportal.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(db: DBSessionDep, data: RegisterInput):
    """Create a farmer or business account"""
    try:
        return await AuthService(db).register(
            username=data.username,
            password=data.password,
            phone_number=data.phone_number,
            confirm_password=data.confirm_password,
            role=data.role,
            province=data.province,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/login", response_model=Token)
async def login(db: DBSessionDep, login_data: LoginInput):
    """Login endpoint - accepts username and password"""
    return await AuthService(db).login(login_data.username, login_data.password, login_data.remember_me)


@router.post("/token", response_model=Token)
async def login_access_token(db: DBSessionDep, form_data: OAuth2PasswordRequestForm = Depends()):
    """OAuth2 compatible login endpoint"""
    return await AuthService(db).login(form_data.username, form_data.password)


@router.post("/refresh", response_model=Token)
async def refresh_token(db: DBSessionDep, data: RefreshTokenInput):
    return await AuthService(db).refresh(data.refresh_token)


@router.get("/check-username", response_model=UsernameAvailability)
async def check_username(db: DBSessionDep, username: str = Query(...)):
    error = validate_username(username)
    if error:
        return UsernameAvailability(username=username, available=False, error=error.message)
    available = await AuthService(db).is_username_available(username)
    return UsernameAvailability(
        username=username,
        available=available,
        error=None if available else "Tên đăng nhập đã tồn tại",
    )


@router.post("/password-strength", response_model=PasswordStrength)
async def password_strength(data: PasswordInput):
    level, score = get_password_strength(data.password)
    return PasswordStrength(level=level, score=score)


@router.post("/change-password")
async def change_password(db: DBSessionDep, data: ChangePassword, user: CurrentUser):
    try:
        await AuthService(db).change_password(user, data.current_password, data.new_password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"ok": True}


@router.post("/logout")
async def logout(user: CurrentUser):
    # Tokens are stateless; the client drops them
    return {"ok": True}
