from typing import Optional

from fastapi import APIRouter, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from merchant_dashboard.core.dashboard_auth import (
    LOGIN_PATH,
    dashboard_auth_enabled,
    login_user,
    safe_next_path,
    verify_dashboard_credentials,
)

router = APIRouter(tags=["Auth"])

NOT_CONFIGURED_MESSAGE = "Login is not configured. Set dashboard credentials in the environment."
INVALID_LOGIN_MESSAGE = "Invalid login ID or password."


def _login_page(request: Request, next_path: str, error: Optional[str] = None, status_code: int = 200):
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "error": error,
            "next_path": next_path,
            "auth_enabled": dashboard_auth_enabled(),
        },
        status_code=status_code,
    )


@router.get(LOGIN_PATH, response_class=HTMLResponse)
def login_page(request: Request, next_path: Optional[str] = Query(None, alias="next")):
    return _login_page(request, safe_next_path(next_path))


@router.post(LOGIN_PATH, response_class=HTMLResponse)
def login_submit(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    next_path: Optional[str] = Form(None, alias="next"),
):
    target = safe_next_path(next_path)
    if not dashboard_auth_enabled():
        return _login_page(request, target, NOT_CONFIGURED_MESSAGE, status_code=400)

    try:
        if verify_dashboard_credentials(username, password):
            login_user(request, username)
            return RedirectResponse(url=target, status_code=303)
        error_message = INVALID_LOGIN_MESSAGE
    except ValueError as exc:
        error_message = str(exc)

    return _login_page(request, target, error_message, status_code=401)


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse(url=LOGIN_PATH, status_code=303)
