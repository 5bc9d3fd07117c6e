import json
import logging
from datetime import datetime, timezone
from typing import Optional

from merchant_dashboard.config import get_settings

# Passed through ``extra=`` by the inventory services.
CONTEXT_FIELDS = ("store_id", "product_id", "branch_id", "strategy", "actor")


def _context(record: logging.LogRecord) -> dict:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ContextFormatter(logging.Formatter):
    """Plain text lines with the inventory context appended as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if not context:
            return line
        pairs = " ".join("{}={}".format(key, value) for key, value in context.items())
        return "{} [{}]".format(line, pairs)


def setup_logging(level: Optional[str] = None) -> None:
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL).upper()

    handler = logging.StreamHandler()
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            ContextFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
    # SQL echo stays off unless asked for explicitly.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
