# app/core/logging.py
from __future__ import annotations

import contextvars
import logging
import os
import re
import sys
import time

RESET = "\033[0m"

# message tag -> ANSI color
TAG_COLORS = {
    "ERROR": "\033[31m",
    "NOT_FOUND": "\033[33m",
    "INVALID": "\033[33m",
    "BEHAVIOR": "\033[36m",
    "PERSIST": "\033[36m",
    "STARTUP": "\033[32m",
}

_TAG = re.compile(r"\[([A-Z_]+)\]")

request_id_cv = contextvars.ContextVar("request_id", default=None)


def _color_enabled(stream) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    return os.getenv("FORCE_COLOR") == "1" or getattr(stream, "isatty", lambda: False)()


class ServerFormatter(logging.Formatter):
    """`time : LEVEL : logger [request] : message`, with colored [TAG]s on a terminal."""

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created))
        request_id = request_id_cv.get()
        where = f"{record.name} [{request_id[:8]}]" if request_id else record.name
        message = record.getMessage()
        if self.color:
            message = _TAG.sub(
                lambda m: f"{TAG_COLORS.get(m.group(1), RESET)}[{m.group(1)}]{RESET}",
                message,
            )
        line = f"{stamp} : {record.levelname:<5} : {where} : {message}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str = "INFO", stream=None) -> None:
    """Send every logger to one stream handler; uvicorn stays quiet below DEBUG."""
    stream = stream or sys.stdout
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ServerFormatter(color=_color_enabled(stream)))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric)

    quiet = numeric if numeric == logging.DEBUG else logging.WARNING
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).setLevel(quiet)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger("ddsl.core").info(f"[STARTUP] logging at {logging.getLevelName(numeric)}")


def set_request_id(value: str) -> None:
    request_id_cv.set(value)
