from typing import Optional

from fastapi import Query, Request

from merchant_dashboard.config import SUPPORTED_LOCALES, get_settings
from merchant_dashboard.core.dashboard_auth import session_user
from merchant_dashboard.database.session import get_db


def current_actor(request: Request) -> Optional[str]:
    return session_user(request)


def current_locale(locale: Optional[str] = Query(None, description="Display locale (en or ar)")) -> str:
    value = (locale or "").strip().lower()
    if value in SUPPORTED_LOCALES:
        return value
    return get_settings().DEFAULT_LOCALE


__all__ = ["current_actor", "current_locale", "get_db"]
