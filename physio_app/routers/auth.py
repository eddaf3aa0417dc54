from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm

from physio_app.models import User
from physio_app.rate_limit import limiter
from physio_app.schemas import (
    DeviceTokenIn,
    PractitionerRegisterIn,
    RefreshIn,
    Token,
    UserOut,
)
from physio_app.security import create_token_pair, get_current_user
from physio_app.services import auth_service, notification_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_out(user: User) -> UserOut:
    return UserOut(id=str(user.id), name=user.name, email=user.email, role=user.role)


@router.post("/register", response_model=Token)
@limiter.limit("5/minute")
async def route_register(request: Request, payload: PractitionerRegisterIn):
    """Create a practitioner account and log it in."""
    user = await auth_service.register_practitioner(
        email=payload.email,
        password=payload.password,
        name=payload.name,
    )
    access, refresh = create_token_pair(user)
    return Token(access_token=access, refresh_token=refresh)


@router.post("/login", response_model=Token)
@limiter.limit("10/minute")
async def route_login(request: Request, form_data: OAuth2PasswordRequestForm = Depends()):
    """Login with email (as username) and password."""
    (access, refresh), _ = await auth_service.login_with_password(
        email=form_data.username,
        password=form_data.password,
    )
    return Token(access_token=access, refresh_token=refresh)


@router.post("/refresh", response_model=Token)
async def route_refresh(payload: RefreshIn):
    access, refresh = await auth_service.refresh_tokens(payload.refresh_token)
    return Token(access_token=access, refresh_token=refresh)


@router.get("/me", response_model=UserOut)
async def route_me(current: User = Depends(get_current_user)):
    return _user_out(current)


@router.post("/device-token")
async def route_register_device_token(payload: DeviceTokenIn, current: User = Depends(get_current_user)):
    await notification_service.register_device_token(
        user_id=current.id,
        token=payload.token,
        platform=payload.platform,
    )
    return {"status": "registered"}
