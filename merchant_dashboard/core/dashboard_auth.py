from __future__ import annotations

import hashlib
import hmac
from typing import Optional
from urllib.parse import quote

from fastapi import HTTPException, Request, status
from fastapi.responses import RedirectResponse

from merchant_dashboard.config import get_settings
from merchant_dashboard.core.constants import DEFAULT_DASHBOARD_PATH

SESSION_USER_KEY = "dashboard_user"
LOGIN_PATH = "/login"


def dashboard_auth_enabled() -> bool:
    settings = get_settings()
    has_password = bool(settings.DASHBOARD_PASSWORD or settings.DASHBOARD_PASSWORD_HASH)
    return bool(settings.DASHBOARD_USERNAME) and has_password


def hash_dashboard_password(password: str, salt: str, rounds: int) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return digest.hex()


def verify_dashboard_credentials(username: str, password: str) -> bool:
    if not dashboard_auth_enabled():
        return False
    settings = get_settings()

    if not hmac.compare_digest(
        username.strip().casefold(),
        settings.DASHBOARD_USERNAME.strip().casefold(),
    ):
        return False

    password = password.strip()
    if not settings.DASHBOARD_PASSWORD_HASH:
        return hmac.compare_digest(password, (settings.DASHBOARD_PASSWORD or "").strip())

    if not settings.DASHBOARD_PASSWORD_SALT:
        raise ValueError("Dashboard password salt is not configured.")
    computed = hash_dashboard_password(
        password,
        settings.DASHBOARD_PASSWORD_SALT,
        settings.DASHBOARD_PBKDF2_ROUNDS,
    )
    return hmac.compare_digest(computed, settings.DASHBOARD_PASSWORD_HASH)


def session_user(request: Request) -> Optional[str]:
    """Logged in user name; also recorded as ``performed_by`` on stock changes."""
    return request.session.get(SESSION_USER_KEY)


def login_user(request: Request, username: str) -> None:
    request.session[SESSION_USER_KEY] = username.strip()


def safe_next_path(value: Optional[str]) -> str:
    # Only local paths; anything else falls back to the dashboard.
    if not value or not value.startswith("/") or value.startswith("//"):
        return DEFAULT_DASHBOARD_PATH
    return value


def redirect_if_unauthenticated(request: Request) -> Optional[RedirectResponse]:
    if not dashboard_auth_enabled() or session_user(request):
        return None
    target = quote(request.url.path, safe="/")
    return RedirectResponse(url="{}?next={}".format(LOGIN_PATH, target), status_code=303)


def require_login_api(request: Request) -> None:
    if not dashboard_auth_enabled() or session_user(request):
        return
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
