from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ..client import ChorusClient
from ..envelope import as_record, normalize
from ..formatting import ResponseFormat, format_date, format_duration, format_output
from ..pagination import (
    DEFAULT_PAGE_SIZE,
    format_pagination_info,
    window_from_collection,
)
from ._common import (
    CREATE,
    DELETE,
    chorus_tool,
    fetch_collection,
    fetch_record,
    filter_params,
    ms_to_seconds,
    not_found,
    page_params,
    text,
)

SHARED_ON_LOOKBACK = timedelta(days=90)


def _iso_millis(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def shared_on_range(
    start_date: Optional[str],
    end_date: Optional[str],
    *,
    now: Optional[datetime] = None,
) -> str:
    """
    Chorus requires ``filter[shared_on]`` as "start:end". Missing bounds
    default to the last 90 days.
    """
    now = now or datetime.now(timezone.utc)
    end = end_date or _iso_millis(now)
    start = start_date or _iso_millis(now - SHARED_ON_LOOKBACK)
    return f"{start}:{end}"


@chorus_tool()
async def list_moments(
    client: ChorusClient,
    *,
    conversation_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    List shared moments across conversations. Without a date range the last
    90 days are searched.
    """
    params = {
        **page_params(limit, offset),
        **filter_params(conversation_id=conversation_id),
        "filter[shared_on]": shared_on_range(start_date, end_date),
    }
    collection = await fetch_collection(
        client, "moments", params=params, tool="moments"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No moments found in the specified date range."

    def _render() -> str:
        lines = ["# Shared Moments", "", format_pagination_info(window), ""]
        for m in window.items:
            lines.append(f"- **{text(m, 'subject', 'Untitled')}** ({text(m, 'id')})")
            creator = m.get("creator")
            creator_name = text(creator, "name") if isinstance(creator, dict) else ""
            if m.get("shared_on"):
                by = f" by {creator_name}" if creator_name else ""
                lines.append(f"  Shared: {format_date(m['shared_on'])}{by}")
            if m.get("conversation"):
                lines.append(f"  Conversation: {m['conversation']}")
            if m.get("duration"):
                lines.append(f"  Duration: {format_duration(m['duration'])}")
            lines.append("")
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_moment(
    client: ChorusClient,
    moment_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get one moment including its transcript snippet and context."""
    moment = await fetch_record(client, f"moments/{moment_id}", tool="moments")
    if moment.get("id") is None:
        return not_found("moment", moment_id)

    def _render() -> str:
        time = format_duration(ms_to_seconds(moment.get("timestamp")))
        lines = [
            f"# {text(moment, 'title', 'Untitled')}",
            "",
            f"- **ID**: {text(moment, 'id')}",
            f"- **Conversation**: {text(moment, 'conversationId')}",
            f"- **Timestamp**: {time}",
        ]
        if moment.get("duration"):
            duration = format_duration(ms_to_seconds(moment["duration"]))
            lines.append(f"- **Duration**: {duration}")
        if moment.get("type"):
            lines.append(f"- **Type**: {moment['type']}")
        if moment.get("description"):
            lines.extend(["", "## Description", str(moment["description"])])
        if moment.get("text"):
            lines.extend(["", "## Transcript Snippet", f"> {moment['text']}"])
        return "\n".join(lines)

    return format_output(moment, _render, response_format)


@chorus_tool(CREATE)
async def create_moment(
    client: ChorusClient,
    conversation_id: str,
    timestamp_ms: int,
    title: str,
    *,
    duration_ms: Optional[int] = None,
    description: Optional[str] = None,
    moment_type: Optional[str] = None,
) -> str:
    """Create an external moment on a conversation at a timestamp (ms from start)."""
    body: Dict[str, Any] = {
        "conversationId": conversation_id,
        "timestamp": timestamp_ms,
        "title": title,
    }
    if duration_ms is not None:
        body["duration"] = duration_ms
    if description:
        body["description"] = description
    if moment_type:
        body["type"] = moment_type

    created = await client.post("moments", json=body, tool="moments")
    moment = as_record(normalize(created))
    shown_title = moment.get("title") or moment.get("subject") or "N/A"
    conversation = moment.get("conversation") or moment.get("conversationId") or "N/A"
    return (
        "Moment created successfully.\n"
        f"- **ID**: {text(moment, 'id')}\n"
        f"- **Title**: {shown_title}\n"
        f"- **Conversation**: {conversation}"
    )


@chorus_tool(DELETE)
async def delete_moment(client: ChorusClient, moment_id: str) -> str:
    """Delete an external moment. This action is irreversible."""
    await client.delete(f"moments/{moment_id}", tool="moments")
    return f"Moment {moment_id} deleted successfully."
