"""
Logging setup for the triage service.

Every line carries the request id and, once a handler knows it, the feedback
id being worked on. Feedback text is user supplied and model errors echo it
back, so messages pass through mask_pii before they are written.
Production/staging log one JSON object per line; everything else gets a
compact human format.
"""

import json
import logging
import re
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

from app.config import settings

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")
feedback_id_ctx: ContextVar[str] = ContextVar("feedback_id", default="-")

QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "openai", "asyncio")


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


def current_context() -> Dict[str, str]:
    """The tracking ids that are set for the current task."""
    ctx = {"request_id": request_id_ctx.get(), "feedback_id": feedback_id_ctx.get()}
    return {k: v for k, v in ctx.items() if v and v != "-"}


# ──────────── masking ────────────

_EMAIL = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")
_SECRETS = (
    (re.compile(r'("?api_key"?\s*[:=]\s*)"[^"]*"', re.I), r'\1"***"'),
    (re.compile(r"\bsk-[A-Za-z0-9_-]{8,}"), "sk-***"),
)


def _mask_email(match: re.Match) -> str:
    local, domain = match.group(1), match.group(2)
    tail = local[-1] if len(local) > 2 else ""
    return f"{local[0]}***{tail}@{domain}"


def mask_pii(text: str) -> str:
    """Hide email addresses and OpenAI keys in a log message."""
    for pattern, replacement in _SECRETS:
        text = pattern.sub(replacement, text)
    return _EMAIL.sub(_mask_email, text)


# ──────────── formatters ────────────

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_pii(record.getMessage()),
        }
        entry.update(current_context())
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(context)s] %(message)s"

    def __init__(self):
        super().__init__(self.FORMAT, datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        record.context = " ".join(current_context().values()) or "-"
        record.msg = mask_pii(record.getMessage())
        record.args = None
        return super().format(record)


def setup_logging(level: Optional[str] = None) -> None:
    """Install a single stdout handler on the root logger."""
    structured = settings.is_production or settings.is_staging
    level = level or settings.LOG_LEVEL or ("INFO" if structured else "DEBUG")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if structured else HumanFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
