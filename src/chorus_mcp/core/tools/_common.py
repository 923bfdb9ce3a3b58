"""
Shared plumbing for tool handlers: fetch + normalize, query building and the
error boundary that turns failures into a single descriptive line.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from mcp.types import ToolAnnotations

from ..client import ChorusClient
from ..envelope import (
    CanonicalCollection,
    CanonicalRecord,
    as_collection,
    as_record,
    normalize,
)
from ..errors import classify_error
from ..pagination import clamp_limit

log = logging.getLogger("chorus_mcp.tools")

F = TypeVar("F", bound=Callable[..., Awaitable[str]])

READ_ONLY = ToolAnnotations(
    readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True
)
CREATE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True
)
DELETE = ToolAnnotations(
    readOnlyHint=False, destructiveHint=True, idempotentHint=False, openWorldHint=True
)


def chorus_tool(annotations: ToolAnnotations = READ_ONLY) -> Callable[[F], F]:
    """Mark a handler as a tool and convert any failure into its error text."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(client: ChorusClient, *args: Any, **kwargs: Any) -> str:
            try:
                return await func(client, *args, **kwargs)
            except Exception as exc:
                category = classify_error(exc)
                log.warning(
                    "tool_failed",
                    extra={
                        "tool": func.__name__,
                        "error_kind": category.kind.value,
                        "status": category.status,
                    },
                )
                return category.message

        wrapper.tool_annotations = annotations  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator


def page_params(limit: int, offset: int = 0) -> Dict[str, Any]:
    params: Dict[str, Any] = {"page[size]": clamp_limit(limit)}
    if offset > 0:
        params["page[offset]"] = offset
    return params


def filter_params(**filters: Optional[Any]) -> Dict[str, Any]:
    """Build ``filter[<name>]`` query params, dropping unset values."""
    return {f"filter[{k}]": v for k, v in filters.items() if v not in (None, "")}


async def fetch_collection(
    client: ChorusClient,
    endpoint: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    body: Optional[Dict[str, Any]] = None,
    tool: Optional[str] = None,
) -> CanonicalCollection:
    """GET ``endpoint``, or POST ``body`` to it, as a collection."""
    if body is not None:
        raw = await client.post(endpoint, json=body, tool=tool)
    else:
        raw = await client.get(endpoint, params=params, tool=tool)
    return as_collection(normalize(raw))


async def fetch_record(
    client: ChorusClient,
    endpoint: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    tool: Optional[str] = None,
) -> CanonicalRecord:
    body = await client.get(endpoint, params=params, tool=tool)
    return as_record(normalize(body))


def not_found(noun: str, record_id: str) -> str:
    """Reply for a get endpoint that answered without a record."""
    return f"No {noun} found with ID {record_id}."


def ms_to_seconds(value: Any) -> int:
    """Chorus timestamps are milliseconds; narrative output wants seconds."""
    try:
        return int(float(value)) // 1000
    except (TypeError, ValueError, OverflowError):
        return 0


def text(record: CanonicalRecord, key: str, default: str = "") -> str:
    value = record.get(key)
    return default if value in (None, "") else str(value)


__all__ = [
    "CREATE",
    "DELETE",
    "READ_ONLY",
    "chorus_tool",
    "fetch_collection",
    "fetch_record",
    "filter_params",
    "ms_to_seconds",
    "not_found",
    "page_params",
    "text",
]
