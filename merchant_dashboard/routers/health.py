import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from merchant_dashboard.config import get_settings
from merchant_dashboard.dependencies import get_db

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)

# Tables the dashboard degrades without; a missing one means an unmigrated backend.
INVENTORY_TABLES = ("store_branches", "inventory", "inventory_transactions")


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    settings = get_settings()
    try:
        db.execute(text("SELECT 1"))
        existing = set(inspect(db.connection()).get_table_names())
        database = "ok"
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        existing = set()
        database = "unavailable"

    tables = {name: name in existing for name in INVENTORY_TABLES}
    return {
        "status": "ok" if database == "ok" and all(tables.values()) else "degraded",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "database": database,
        "tables": tables,
        "time": datetime.now(timezone.utc).isoformat(),
    }
