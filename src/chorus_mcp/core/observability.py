"""
Structured events for upstream Chorus calls.

Every HTTP round trip produces one ``op_call`` record carrying the tool
that issued it, the endpoint, the status (or ``"exception"``), its
duration and the retry attempt. The API key never appears in any field.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

OBSERVABILITY_LOGGER = "chorus_mcp.observability"

# Attributes every LogRecord already owns; extras must not collide with them.
RESERVED_LOG_KEYS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def log_event(event: str, logger: logging.Logger | None = None, **fields: Any) -> None:
    """Emit ``event`` at INFO with ``fields`` as record extras."""
    log = logger or logging.getLogger(OBSERVABILITY_LOGGER)
    extra = {k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS}
    log.info(event, extra=extra)


def log_op_call(
    *,
    tool: Optional[str],
    method: str,
    endpoint: str,
    started: float,
    attempt: int,
    status: Optional[int] = None,
    error: Optional[BaseException] = None,
) -> None:
    """Record one finished upstream call; ``started`` is a perf_counter() value."""
    fields: Dict[str, Any] = {
        "tool": tool,
        "method": method,
        "endpoint": "/" + endpoint.lstrip("/"),
        "status": "exception" if error is not None else status,
        "duration_ms": int((time.perf_counter() - started) * 1000),
        "attempt": attempt,
    }
    if error is not None:
        fields["error_type"] = type(error).__name__
    log_event("op_call", **fields)


__all__ = ["OBSERVABILITY_LOGGER", "log_event", "log_op_call"]
