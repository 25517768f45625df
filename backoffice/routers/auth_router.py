# backoffice/routers/auth_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.db import get_db
from backoffice.schemas.auth_schemas import UserLogin, TokenResponse, UserOut, PinCheck, PinCheckResponse
from backoffice.services.auth_service import authenticate_user, create_token, check_pin
from backoffice.utils.get_user import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.username, data.password)
    access_token = await create_token(db, user)
    return TokenResponse(access_token=access_token, role=user.role)

@router.get("/me", response_model=UserOut)
async def me(current_user=Depends(get_current_user)):
    return current_user

@router.post("/verify-pin", response_model=PinCheckResponse)
async def verify_pin_route(data: PinCheck, db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    """
    Re-authorisation before a sensitive action. Answers only valid / not valid.
    """
    return PinCheckResponse(valid=await check_pin(db, current_user, data.pin))
