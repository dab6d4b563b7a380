from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings


load_dotenv()


class AppSettings(BaseSettings):
    # Pydantic v2 settings configuration

    mongo_uri: str = Field(default="mongodb://localhost:27017", alias="MONGO_URI")
    # Accept MONGO_DB_NAME (preferred) or DATABASE_NAME (legacy)
    database_name: str = Field(
        default="luxe-salon",
        validation_alias=AliasChoices("MONGO_DB_NAME", "DATABASE_NAME"),
    )

    # Salon identity (rendered into emails)
    salon_name: str = Field(default="Luxe Salon", alias="SALON_NAME")
    salon_address: str = Field(
        default="123 Beauty Street, City, State 12345", alias="SALON_ADDRESS"
    )
    salon_phone: str = Field(default="(555) 123-4567", alias="SALON_PHONE")
    salon_email: str = Field(default="info@luxesalon.com", alias="SALON_EMAIL")
    frontend_base_url: str = Field(default="http://localhost:3000", alias="FRONTEND_BASE_URL")

    # Operating hours; closed_weekday follows date.weekday() (Monday=0, Sunday=6)
    opening_hour: int = Field(default=9, ge=0, le=23, alias="OPENING_HOUR")
    closing_hour: int = Field(default=18, ge=1, le=24, alias="CLOSING_HOUR")
    slot_minutes: int = Field(default=30, ge=5, le=240, alias="SLOT_MINUTES")
    closed_weekday: int = Field(default=6, ge=0, le=6, alias="CLOSED_WEEKDAY")

    # SMTP email sending
    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: Optional[str] = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    email_from_address: str = Field(
        default="noreply@luxesalon.com",
        validation_alias=AliasChoices("SMTP_FROM_EMAIL", "EMAIL_FROM_ADDRESS"),
    )
    email_from_name: str = Field(default="Luxe Salon", alias="SMTP_FROM_NAME")
    admin_email: str = Field(default="admin@luxesalon.com", alias="ADMIN_EMAIL")

    # Auth / JWT
    jwt_secret_key: str = Field(default="dev-secret", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    allowed_origins: str = Field(default="http://localhost:3000", alias="ALLOWED_ORIGINS")

    environment: Literal["development", "production", "test"] = Field(
        default="development", alias="ENVIRONMENT"
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
