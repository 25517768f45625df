# backoffice/services/auth_service.py
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.models.user_models import User
from backoffice.core.security import verify_password, verify_pin, create_access_token
from backoffice.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES
from backoffice.utils.activity_helpers import log_user_activity


async def authenticate_user(db: AsyncSession, username: str, password: str) -> User:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalars().first()
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive.")
    return user


async def create_token(db: AsyncSession, user: User) -> str:
    """
    Issue an access token carrying token_version, so bumping the version
    invalidates every token already handed out.
    """
    expire_minutes = (
        ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES
        if user.role == "admin"
        else ACCESS_TOKEN_EXPIRE_MINUTES
    )

    access_token = create_access_token(
        {"sub": user.username, "user_id": user.id, "role": user.role},
        token_version=user.token_version,
        expires_delta=timedelta(minutes=expire_minutes),
    )

    user.last_login = datetime.now(timezone.utc)
    await log_user_activity(db, user_id=user.id, username=user.username, message=f"{user.role.capitalize()} logged in")
    await db.commit()

    return access_token


async def check_pin(db: AsyncSession, user: User, pin: str) -> bool:
    valid = verify_pin(pin, user.pin_hash)
    if not valid:
        await log_user_activity(
            db, user_id=user.id, username=user.username, message="Failed PIN verification", commit=True
        )
    return valid
