# app/core/config.py
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from app.schemas.order import order_field_names


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string)

    Optional:
      - SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY (image uploads)
      - WHATSAPP_PHONE_NUMBER_ID / WHATSAPP_TOKEN / ADMIN_WHATSAPP_NUMBER
        (order notifications)
    """

    PROJECT_NAME: str = "Storefront API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    # DB config
    DATABASE_URL: str
    DATABASE_SSL_VERIFY: bool | None = None
    DB_POOL_SIZE: int = 5

    # Object store (Supabase Storage)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "products"

    # WhatsApp Cloud API
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    WHATSAPP_TOKEN: str | None = None
    ADMIN_WHATSAPP_NUMBER: str | None = None
    WHATSAPP_API_VERSION: str = "v18.0"

    OUTBOUND_TIMEOUT_SECONDS: float = 10.0
    NOTIFY_MAX_RETRIES: int = 2
    NOTIFY_BACKOFF_SECONDS: float = 0.5

    # background: acknowledge first, notify afterwards (errors logged only)
    # sync:       notify first, 500 if the notification fails
    ORDER_NOTIFY_MODE: Literal["background", "sync"] = "background"
    ORDER_PERSIST: bool = False

    ORDER_REQUIRED_FIELDS: Annotated[list[str], NoDecode] = ["customerName", "phone"]
    PRODUCT_REQUIRED_FIELDS: Annotated[list[str], NoDecode] = ["title", "category"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator(
        "CORS_ORIGINS",
        "ORDER_REQUIRED_FIELDS",
        "PRODUCT_REQUIRED_FIELDS",
        mode="before",
    )
    @classmethod
    def split_csv(cls, v):
        """Accept comma-separated strings from the environment."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("ORDER_REQUIRED_FIELDS")
    @classmethod
    def known_order_fields(cls, v: list[str]) -> list[str]:
        known = order_field_names()
        unknown = [name for name in v if name not in known]
        if unknown:
            raise ValueError(f"unknown order field(s): {', '.join(unknown)}")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    @property
    def db_ssl_verify(self) -> bool:
        """
        TLS verification for the DB connection.

        Explicit DATABASE_SSL_VERIFY wins; otherwise verify only in production.
        """
        if self.DATABASE_SSL_VERIFY is not None:
            return self.DATABASE_SSL_VERIFY
        return self.is_production


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
