import logging
import os
from typing import Optional

_CONFIGURED = False

# Structured fields handlers pass through ``extra=``
CONTEXT_KEYS = ("backend", "op", "task")


class SafeFormatter(logging.Formatter):
    """Formatter that tolerates records logged without the context fields."""

    def format(self, record: logging.LogRecord) -> str:
        for key in CONTEXT_KEYS:
            if key not in record.__dict__:
                record.__dict__[key] = "-"
        return super().format(record)


def configure_logging(level: Optional[str] = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = (level or os.getenv("APP_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved_level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        fields = " ".join(f"{key}=%({key})s" for key in CONTEXT_KEYS)
        handler = logging.StreamHandler()
        handler.setFormatter(SafeFormatter(f"%(asctime)s %(levelname)s %(name)s {fields} %(message)s"))
        root.addHandler(handler)

    root.setLevel(resolved_level)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(resolved_level)

    _CONFIGURED = True
