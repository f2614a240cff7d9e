from __future__ import annotations

import logging
import os
import sys
import json
import time
from typing import Optional


class JsonFormatter(logging.Formatter):
    """
    Minimal JSON log formatter:
      { "t": 169, "lvl": "INFO", "name": "terrain.stitch", "msg": "text", "extra": {...} }
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):  # type: ignore[attr-defined]
            payload["extra"] = record.extra  # type: ignore[attr-defined]
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Console-friendly variant; appends the extra dict as key=value pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s [%(name)s] %(message)s")

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        text = super().format(record)
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict) and extra:
            text += " " + " ".join(f"{k}={v}" for k, v in extra.items())
        return text


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure root logger once.
    Level precedence:
      - explicit `level` arg
      - env LOG_LEVEL (e.g., DEBUG/INFO/WARN/ERROR)
      - default INFO
    Format precedence is the same with env LOG_FORMAT ("json" or "plain"), default json.
    """
    root = logging.getLogger()
    if getattr(root, "_terrain_configured", False):  # idempotent
        if level:
            root.setLevel(_resolve_level(level))
        if fmt:
            for h in root.handlers:
                h.setFormatter(_formatter(fmt))
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_formatter(fmt or os.environ.get("LOG_FORMAT") or "json"))

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level or os.environ.get("LOG_LEVEL") or "INFO"))
    root._terrain_configured = True  # type: ignore[attr-defined]


def _formatter(name: str) -> logging.Formatter:
    return PlainFormatter() if name.lower() == "plain" else JsonFormatter()


def _resolve_level(name: str) -> int:
    lvl = getattr(logging, name.upper(), None)
    return lvl if isinstance(lvl, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensures root is configured."""
    setup_logging()
    return logging.getLogger(name)
