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
    ms_to_seconds,
    not_found,
    page_params,
    text,
)


def _participants(record: Dict[str, Any]) -> List[Dict[str, Any]]:
    value = record.get("participants")
    return [p for p in value if isinstance(p, dict)] if isinstance(value, list) else []


def _conversation_summary_lines(c: Dict[str, Any], *, with_status: bool) -> List[str]:
    lines = [
        f"## {text(c, 'title', 'Untitled')} ({text(c, 'id')})",
        f"- **Date**: {format_date(c.get('date'))}",
        f"- **Duration**: {format_duration(c.get('duration'))}",
        f"- **Participants**: {format_participants(_participants(c))}",
    ]
    if with_status and c.get("status"):
        lines.append(f"- **Status**: {c['status']}")
    lines.append("")
    return lines


@chorus_tool()
async def list_conversations(
    client: ChorusClient,
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    participant_email: Optional[str] = None,
    team_id: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    List conversations (calls and meetings) with optional date, participant
    and team filters. Returns a paginated list with title, date, duration
    and participants.
    """
    params = {
        **page_params(limit, offset),
        **filter_params(
            start_date=start_date,
            end_date=end_date,
            participant_email=participant_email,
            team_id=team_id,
        ),
    }
    collection = await fetch_collection(
        client, "conversations", params=params, tool="conversations"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No conversations found matching the specified filters."

    def _render() -> str:
        lines = ["# Conversations", "", format_pagination_info(window), ""]
        for c in window.items:
            lines.extend(_conversation_summary_lines(c, with_status=True))
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_conversation(
    client: ChorusClient,
    conversation_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get full details of one conversation: metadata, participants, summary."""
    conversation = await fetch_record(
        client, f"conversations/{conversation_id}", tool="conversations"
    )
    if conversation.get("id") is None:
        return not_found("conversation", conversation_id)

    def _render() -> str:
        participants = _participants(conversation)
        lines = [
            f"# {text(conversation, 'title', 'Untitled Conversation')}",
            "",
            f"- **ID**: {text(conversation, 'id')}",
            f"- **Date**: {format_date(conversation.get('date'))}",
            f"- **Duration**: {format_duration(conversation.get('duration'))}",
            f"- **Participants**: {format_participants(participants)}",
        ]
        if conversation.get("type"):
            lines.append(f"- **Type**: {conversation['type']}")
        if conversation.get("status"):
            lines.append(f"- **Status**: {conversation['status']}")
        if conversation.get("summary"):
            lines.extend(["", "## Summary", str(conversation["summary"])])
        if participants:
            lines.extend(["", "## Participants"])
            for p in participants:
                email = f" ({p['email']})" if p.get("email") else ""
                role = f" - {p['role']}" if p.get("role") else ""
                lines.append(f"- **{text(p, 'name', 'Unknown')}**{email}{role}")
        return "\n".join(lines)

    return format_output(conversation, _render, response_format)


@chorus_tool()
async def get_transcript(
    client: ChorusClient,
    conversation_id: str,
    *,
    speaker_filter: Optional[str] = None,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    Retrieve a conversation transcript with speaker attribution and
    timestamps. ``speaker_filter`` keeps only segments whose speaker name
    contains the given text (case-insensitive).
    """
    collection = await fetch_collection(
        client, f"conversations/{conversation_id}/transcript", tool="conversations"
    )
    segments = collection.items
    if speaker_filter:
        needle = speaker_filter.casefold()
        segments = [s for s in segments if needle in text(s, "speaker").casefold()]

    if not segments:
        if speaker_filter:
            return f'No transcript segments found for speaker "{speaker_filter}".'
        return "No transcript available for this conversation."

    def _render() -> str:
        lines = ["# Transcript", ""]
        if speaker_filter:
            lines.extend([f"*Filtered to speaker: {speaker_filter}*", ""])
        for seg in segments:
            time = format_duration(ms_to_seconds(seg.get("startTime")))
            speaker = text(seg, "speaker", "Unknown")
            lines.extend([f"**[{time}] {speaker}**: {text(seg, 'text')}", ""])
        return "\n".join(lines)

    return format_output({"segments": segments}, _render, response_format)


@chorus_tool()
async def get_conversation_trackers(
    client: ChorusClient,
    conversation_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get tracker hits (competitor mentions, keywords, topics) in a conversation."""
    collection = await fetch_collection(
        client, f"conversations/{conversation_id}/trackers", tool="conversations"
    )
    trackers = collection.items
    if not trackers:
        return "No trackers detected in this conversation."

    def _render() -> str:
        lines = ["# Conversation Trackers", ""]
        for t in trackers:
            category = f" ({t['category']})" if t.get("category") else ""
            lines.append(f"## {text(t, 'name', 'Unknown')}{category}")
            lines.append(f"- **Occurrences**: {text(t, 'count', '0')}")
            occurrences = t.get("occurrences")
            if isinstance(occurrences, list) and occurrences:
                lines.append("- **Instances**:")
                for occ in occurrences:
                    if not isinstance(occ, dict):
                        continue
                    time = format_duration(ms_to_seconds(occ.get("timestamp")))
                    lines.append(f'  - [{time}]: "{text(occ, "text")}"')
            lines.append("")
        return "\n".join(lines)

    return format_output({"trackers": trackers}, _render, response_format)


@chorus_tool()
async def search_conversations(
    client: ChorusClient,
    query: str,
    *,
    participant_email: Optional[str] = None,
    tracker_name: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Search conversations by keyword, tracker, participant or date range."""
    params = {
        "q": query,
        **page_params(limit, offset),
        **filter_params(
            start_date=start_date,
            end_date=end_date,
            participant_email=participant_email,
            tracker_name=tracker_name,
        ),
    }
    collection = await fetch_collection(
        client, "conversations/search", params=params, tool="conversations"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return f'No conversations found matching "{query}".'

    def _render() -> str:
        lines = [f'# Search Results: "{query}"', "", format_pagination_info(window), ""]
        for c in window.items:
            lines.extend(_conversation_summary_lines(c, with_status=False))
        return "\n".join(lines)

    return format_output(window, _render, response_format)
