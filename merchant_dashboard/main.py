import logging
import secrets
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from merchant_dashboard.config import Settings, get_settings
from merchant_dashboard.core.constants import DEFAULT_DASHBOARD_PATH, STATIC_DIR, TEMPLATES_DIR
from merchant_dashboard.core.logging import setup_logging
from merchant_dashboard.database import Base, engine
from merchant_dashboard.models import import_all_models
from merchant_dashboard.routers import (
    auth_router,
    branches_router,
    health_router,
    inventory_router,
    products_router,
)

logger = logging.getLogger(__name__)

ROUTERS = (health_router, auth_router, inventory_router, branches_router, products_router)


def _session_secret(settings: Settings) -> str:
    if settings.DASHBOARD_SESSION_SECRET:
        return settings.DASHBOARD_SESSION_SECRET
    # Sessions will not survive a restart.
    logger.warning("DASHBOARD_SESSION_SECRET is not set; using a random secret")
    return secrets.token_urlsafe(32)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    application = FastAPI(title=settings.APP_NAME)
    application.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    application.add_middleware(
        SessionMiddleware,
        secret_key=_session_secret(settings),
        session_cookie=settings.DASHBOARD_SESSION_COOKIE,
        same_site="lax",
        https_only=not settings.is_local,
    )
    application.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    for router in ROUTERS:
        application.include_router(router)

    @application.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url=DEFAULT_DASHBOARD_PATH, status_code=302)

    return application


app = create_app()


__all__ = ["app", "create_app"]
