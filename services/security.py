from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from motor.motor_asyncio import AsyncIOMotorDatabase
from passlib.context import CryptContext
from pydantic import EmailStr

from core.clock import Clock
from core.config import settings
from db.database import get_database
from models.staff import StaffMember, StaffRole
from repositories.base import BaseRepository


STAFF = "staff"

password_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
logger = logging.getLogger(__name__)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return password_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return password_context.hash(password)


def create_access_token(subject: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = subject.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


async def get_staff_by_email(db: AsyncIOMotorDatabase, email: str) -> Optional[StaffMember]:
    repo = BaseRepository(db)
    # Case-insensitive exact match on email to avoid login failures due to casing
    email_ci = {"$regex": f"^{re.escape(str(email))}$", "$options": "i"}
    doc = await repo.find_one(STAFF, {"email": email_ci})
    if not doc:
        logger.warning("auth.user_not_found", extra={"email": email})
        return None
    return StaffMember(**doc)


async def authenticate(db: AsyncIOMotorDatabase, email: str, password: str) -> Optional[StaffMember]:
    user = await get_staff_by_email(db, email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        logger.warning("auth.login_invalid_password", extra={"email": email})
        return None
    return user


async def record_login(db: AsyncIOMotorDatabase, staff: StaffMember, clock: Clock) -> None:
    repo = BaseRepository(db, clock)
    await repo.update_one(STAFF, {"_id": staff.id}, {"$set": {"last_login": clock.now()}})


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> StaffMember:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        email: str | None = payload.get("email")
        if email is None:
            logger.error("auth.token_missing_email")
            raise credentials_exception
    except JWTError:
        logger.warning("auth.jwt_error")
        raise credentials_exception

    user = await get_staff_by_email(db, email)
    if user is None or not user.is_active:
        logger.error("auth.user_not_found_for_token", extra={"email": email})
        raise credentials_exception
    return user


async def require_admin(current_user: StaffMember = Depends(get_current_user)) -> StaffMember:
    if not current_user.is_admin:
        logger.warning("auth.admin_required", extra={"email": current_user.email, "role": current_user.role})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


async def create_initial_admin_if_missing(
    db: AsyncIOMotorDatabase, name: str, email: EmailStr, password: str, role: str = StaffRole.admin.value
) -> StaffMember:
    repo = BaseRepository(db)
    existing = await repo.find_one(STAFF, {"email": str(email)})
    if existing:
        return StaffMember(**existing)
    doc = {"name": name, "email": str(email), "role": role, "hashed_password": get_password_hash(password), "is_active": True}
    inserted_id = await repo.insert_one(STAFF, doc)
    doc.update({"_id": inserted_id})
    return StaffMember(**doc)
