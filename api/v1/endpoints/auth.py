from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.clock import Clock, get_clock
from core.config import settings
from db.database import get_database
from models.staff import StaffMember
from schemas.auth import StaffProfile, Token
from services.security import authenticate, create_access_token, get_current_user, record_login


router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/auth/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncIOMotorDatabase = Depends(get_database),
    clock: Clock = Depends(get_clock),
) -> Token:
    email = (form_data.username or "").strip()
    staff = await authenticate(db, email, form_data.password)
    if staff is None:
        logger.warning("auth.login_rejected", extra={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")

    await record_login(db, staff, clock)
    token = create_access_token({"email": staff.email, "role": staff.role})
    logger.info("auth.login_success", extra={"email": staff.email, "role": staff.role})
    return Token(access_token=token, expires_in=settings.access_token_expire_minutes * 60)


@router.get("/users/me", response_model=StaffProfile)
async def read_current_staff(current: StaffMember = Depends(get_current_user)) -> StaffProfile:
    return StaffProfile.from_model(current)
