"""Logging setup shared by the whole service.

Plain text on stdout by default, one JSON object per line when ``json_logs``
is enabled. Each inbound request gets an id stored in ``REQUEST_ID`` so log
lines emitted while serving it can be correlated.
"""

from __future__ import annotations

import contextvars
import datetime
import json
import logging
import sys
from typing import Optional

from cinenova.settings import settings

REQUEST_ID: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

logger = logging.getLogger("cinenova")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        rid = REQUEST_ID.get("")
        if rid:
            payload["rid"] = rid
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.rid = REQUEST_ID.get("") or "-"
        return True


def setup_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    level = (level or settings.log_level).upper()
    if json_logs is None:
        json_logs = settings.json_logs

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    if json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] [%(name)s] [rid=%(rid)s] %(message)s",
            datefmt="%H:%M:%S",
        ))

    # Replace our own handler on repeated calls (app factory runs once per app)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
