from fastapi import HTTPException

from physio_app.constants import Role
from physio_app.models import User
from physio_app.security import (
    create_token_pair,
    decode_token,
    hash_password,
    user_from_payload,
    verify_password,
)
from physio_app.services import patient_service
from physio_app.utils.logger import get_logger

logger = get_logger("auth_service")


async def register_practitioner(*, email: str, password: str, name: str | None) -> User:
    if await User.find_one(User.email == email):
        raise HTTPException(status_code=400, detail="Email already exists")
    user = User(
        email=email,
        name=name,
        role=Role.PRACTITIONER,
        password_hash=hash_password(password),
    )
    await user.insert()
    logger.info(f"Practitioner registered: {user.id}")
    return user


async def login_with_password(*, email: str, password: str) -> tuple[tuple[str, str], User]:
    """Email + password login for every role.
    Returns ((access_token, refresh_token), user). A patient login stamps last_login.
    """
    user = await User.find_one(User.email == email)
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for {email}")
        raise HTTPException(status_code=400, detail="Invalid credentials")

    if user.role == Role.PATIENT:
        await patient_service.record_login(user)

    logger.info(f"User logged in: {user.id} ({user.role.value})")
    return create_token_pair(user), user


async def refresh_tokens(refresh_token: str) -> tuple[str, str]:
    payload = decode_token(refresh_token, token_type="refresh")
    user = await user_from_payload(payload)
    if not user:
        raise HTTPException(status_code=401, detail="Could not validate credentials")
    return create_token_pair(user)
