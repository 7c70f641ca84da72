"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
import logging
from typing import Any

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_BODY_PREVIEW_LIMIT = 300


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def body_preview(text: str | None, *, limit: int = _BODY_PREVIEW_LIMIT) -> str:
    """Collapse a response body to a single bounded line for log output."""
    flattened = " ".join((text or "").split())
    if len(flattened) <= limit:
        return flattened
    return f"{flattened[:limit]}...(+{len(flattened) - limit} chars)"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=_LOG_FORMAT, force=True)
    # httpx logs every request URL at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("azure").setLevel(logging.WARNING)
