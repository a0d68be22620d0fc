# -*- coding: utf-8 -*-
r"""Logging utilities for centralized structured logging.

Provides:
- ContextVar-based session key propagation
- Stdlib logging bridge to loguru
- Truncation and hashing helpers for raw WebSocket frames
"""

from __future__ import annotations

import hashlib
import logging
from contextvars import ContextVar
from typing import Any

from loguru import logger

# Context var for per-connection correlation
_session_key_ctx: ContextVar[str | None] = ContextVar("session_key", default=None)


def set_session_key(session_key: str | None) -> None:
    """Set the session key attached to log records of the current task."""
    _session_key_ctx.set(session_key)


def get_session_key() -> str | None:
    """Get the session key attached to log records of the current task."""
    return _session_key_ctx.get()


class InterceptHandler(logging.Handler):
    """Redirect stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1
        logger.bind(component="stdlib", src_logger=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def configure_stdlib_bridge() -> None:
    """Bridge stdlib root and the websocket/chat libraries' loggers to loguru."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("websockets", "websockets.client", "twitchAPI", "asyncio"):
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False


def truncate_and_hash(text: str | bytes, limit_bytes: int = 4096) -> dict[str, Any]:
    """Return sampling metadata with truncation to limit_bytes and hash for identity."""
    if isinstance(text, bytes):
        encoded = text
        text = text.decode("utf-8", errors="replace")
    else:
        encoded = text.encode("utf-8", errors="ignore")
    digest = hashlib.sha256(encoded).hexdigest()[:8]
    if len(encoded) <= limit_bytes:
        return {
            "payload": text,
            "payload_hash": digest,
            "truncated": False,
        }
    preview_text = encoded[:limit_bytes].decode("utf-8", errors="ignore")
    return {
        "payload": f"{preview_text}... [truncated: {len(encoded) // 1024}KB]",
        "payload_hash": digest,
        "truncated": True,
    }
