from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_LOCALES = ("en", "ar")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Merchant Dashboard"
    ENVIRONMENT: str = "local"
    DEFAULT_LOCALE: str = "en"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./merchant_dashboard.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Inventory backend
    # ==============================
    TRANSACTIONS_LIMIT: int = Field(default=50, ge=1, le=500)
    # Stored procedures tried before the manual fallbacks.
    ADJUST_INVENTORY_RPC: str = "adjust_inventory"
    TRANSFER_INVENTORY_RPC: str = "transfer_inventory"

    # ==============================
    # Dashboard login (disabled unless a user and password are set)
    # ==============================
    DASHBOARD_USERNAME: Optional[str] = None
    DASHBOARD_PASSWORD: Optional[str] = None
    DASHBOARD_PASSWORD_HASH: Optional[str] = None
    DASHBOARD_PASSWORD_SALT: Optional[str] = None
    DASHBOARD_PBKDF2_ROUNDS: int = 200_000
    DASHBOARD_SESSION_SECRET: Optional[str] = None
    DASHBOARD_SESSION_COOKIE: str = "md_session"

    @field_validator("DEFAULT_LOCALE")
    @classmethod
    def _known_locale(cls, value: str) -> str:
        value = (value or "en").strip().lower()
        return value if value in SUPPORTED_LOCALES else "en"

    @property
    def is_local(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "local"


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["SUPPORTED_LOCALES", "Settings", "get_settings"]
