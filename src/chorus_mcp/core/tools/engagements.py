from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..client import ChorusClient
from ..formatting import (
    ResponseFormat,
    format_date,
    format_duration,
    format_output,
    format_participants,
)
from ..pagination import (
    DEFAULT_PAGE_SIZE,
    format_pagination_info,
    window_from_collection,
)
from ._common import (
    chorus_tool,
    fetch_collection,
    fetch_record,
    filter_params,
    not_found,
    page_params,
    text,
)

ENGAGEMENT_TYPES = ("meeting", "dialer", "all")


def _participants(record: Dict[str, Any]) -> List[Any]:
    value = record.get("participants")
    return value if isinstance(value, list) else []


@chorus_tool()
async def filter_engagements(
    client: ChorusClient,
    *,
    engagement_type: str = "all",
    participant_emails: Optional[List[str]] = None,
    outcome: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    Filter engagements (meetings and dialer calls) by type ('meeting',
    'dialer' or 'all'), participant emails, outcome and date range.
    """
    if engagement_type not in ENGAGEMENT_TYPES:
        raise ValueError(
            f"engagement_type must be one of {', '.join(ENGAGEMENT_TYPES)}"
        )
    # The filter endpoint takes its criteria as a POST body
    body: Dict[str, Any] = {
        **page_params(limit, offset),
        **filter_params(
            type=None if engagement_type == "all" else engagement_type,
            participant_emails=participant_emails or None,
            outcome=outcome,
            start_date=start_date,
            end_date=end_date,
        ),
    }
    collection = await fetch_collection(
        client, "engagements/filter", body=body, tool="engagements"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No engagements found matching the specified filters."

    def _render() -> str:
        lines = ["# Engagements", "", format_pagination_info(window), ""]
        for e in window.items:
            lines.append(
                f"## {text(e, 'type', 'Unknown')} - {format_date(e.get('date'))} "
                f"({text(e, 'id')})"
            )
            lines.append(
                f"- **Participants**: {format_participants(_participants(e))}"
            )
            if e.get("duration"):
                lines.append(f"- **Duration**: {format_duration(e['duration'])}")
            if e.get("outcome"):
                lines.append(f"- **Outcome**: {e['outcome']}")
            lines.append("")
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_engagement(
    client: ChorusClient,
    engagement_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get one engagement with its participants, duration and outcome."""
    eng = await fetch_record(
        client, f"engagements/{engagement_id}", tool="engagements"
    )
    if eng.get("id") is None:
        return not_found("engagement", engagement_id)

    def _render() -> str:
        lines = [
            f"# {text(eng, 'type', 'Unknown')} Engagement",
            "",
            f"- **ID**: {text(eng, 'id')}",
            f"- **Date**: {format_date(eng.get('date'))}",
            f"- **Participants**: {format_participants(_participants(eng))}",
        ]
        if eng.get("duration"):
            lines.append(f"- **Duration**: {format_duration(eng['duration'])}")
        if eng.get("outcome"):
            lines.append(f"- **Outcome**: {eng['outcome']}")
        if eng.get("conversationId"):
            lines.append(f"- **Conversation ID**: {eng['conversationId']}")
        return "\n".join(lines)

    return format_output(eng, _render, response_format)
