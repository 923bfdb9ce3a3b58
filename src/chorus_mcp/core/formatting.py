"""
Rendering of tool results into bounded text.

Handlers hand over the canonical value plus a callable that renders it as
markdown; ``format_output`` picks the rendering and caps its size.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from pydantic import BaseModel

CHARACTER_LIMIT = 25000
TRUNCATION_NOTICE = (
    "\n\n---\n*Response truncated. Use `limit` and `offset` parameters "
    "or add filters to see more results.*"
)


class ResponseFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


def truncate_response(text: str, limit: int = CHARACTER_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters and append the truncation notice."""
    if len(text) <= limit:
        return text
    # Plain character cut: a truncated JSON rendering is no longer valid JSON.
    return text[:limit] + TRUNCATION_NOTICE


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        dumped = value.model_dump(mode="json")
        return {k: v for k, v in dumped.items() if v is not None}
    return value


def to_json_text(value: Any) -> str:
    return json.dumps(_jsonable(value), indent=2, ensure_ascii=False, default=str)


def format_output(
    value: Any,
    render_markdown: Callable[[], str],
    response_format: ResponseFormat | str = ResponseFormat.MARKDOWN,
) -> str:
    # Anything other than markdown is rendered as JSON
    if response_format == ResponseFormat.MARKDOWN:
        text = render_markdown()
    else:
        text = to_json_text(value)
    return truncate_response(text)


def format_date(iso_string: Any) -> str:
    """'2024-06-15T14:30:00Z' -> 'Jun 15, 2024, 02:30 PM'; junk is returned as-is."""
    if not isinstance(iso_string, str):
        return "" if iso_string is None else str(iso_string)
    raw = iso_string.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return iso_string
    return f"{dt:%b} {dt.day}, {dt.year}, {dt:%I:%M %p}"


def format_duration(seconds: Any) -> str:
    try:
        seconds = int(seconds or 0)
    except (TypeError, ValueError, OverflowError):
        return str(seconds)

    if seconds < 60:
        return f"{seconds}s"
    minutes, remaining = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {remaining}s" if remaining else f"{minutes}m"
    hours, remaining_minutes = divmod(minutes, 60)
    return f"{hours}h {remaining_minutes}m" if remaining_minutes else f"{hours}h"


def format_participants(participants: Iterable[Any]) -> str:
    names = [
        str(p.get("name") or "Unknown") if isinstance(p, Mapping) else str(p)
        for p in participants or []
    ]
    if not names:
        return "None"
    if len(names) <= 3:
        return ", ".join(names)
    return f"{', '.join(names[:3])} (+{len(names) - 3} others)"


__all__ = [
    "CHARACTER_LIMIT",
    "TRUNCATION_NOTICE",
    "ResponseFormat",
    "format_date",
    "format_duration",
    "format_output",
    "format_participants",
    "to_json_text",
    "truncate_response",
]
