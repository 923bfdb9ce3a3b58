from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..client import ChorusClient
from ..envelope import as_record, normalize
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
    CREATE,
    DELETE,
    chorus_tool,
    fetch_collection,
    fetch_record,
    filter_params,
    not_found,
    page_params,
    text,
)


class RecordingParticipant(BaseModel):
    name: str
    email: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


@chorus_tool()
async def list_video_conferences(
    client: ChorusClient,
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List video conference recordings with title, date and status."""
    params = {
        **page_params(limit, offset),
        **filter_params(start_date=start_date, end_date=end_date),
    }
    collection = await fetch_collection(
        client, "video-conferences", params=params, tool="video_conferences"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No video conferences found."

    def _render() -> str:
        lines = ["# Video Conferences", "", format_pagination_info(window), ""]
        for c in window.items:
            status = f" [{c['status']}]" if c.get("status") else ""
            lines.append(
                f"- **{text(c, 'title', 'Untitled')}** ({text(c, 'id')}) - "
                f"{format_date(c.get('date'))}{status}"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_video_conference(
    client: ChorusClient,
    conference_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get a video conference with its participants and recording URL."""
    conf = await fetch_record(
        client, f"video-conferences/{conference_id}", tool="video_conferences"
    )
    if conf.get("id") is None:
        return not_found("video conference", conference_id)

    def _render() -> str:
        participants = conf.get("participants")
        if not isinstance(participants, list):
            participants = []
        lines = [
            f"# {text(conf, 'title', 'Untitled')}",
            "",
            f"- **ID**: {text(conf, 'id')}",
            f"- **Date**: {format_date(conf.get('date'))}",
            f"- **Participants**: {format_participants(participants)}",
        ]
        if conf.get("duration"):
            lines.append(f"- **Duration**: {format_duration(conf['duration'])}")
        if conf.get("status"):
            lines.append(f"- **Status**: {conf['status']}")
        if conf.get("recordingUrl"):
            lines.append(f"- **Recording**: {conf['recordingUrl']}")
        return "\n".join(lines)

    return format_output(conf, _render, response_format)


@chorus_tool(CREATE)
async def upload_recording(
    client: ChorusClient,
    title: str,
    recording_url: str,
    participants: List[RecordingParticipant],
    date: str,
    *,
    duration_seconds: Optional[int] = None,
    external_id: Optional[str] = None,
) -> str:
    """
    Upload a recording from an external dialer or source. ``participants``
    is a list of ``{name, email?}`` objects.
    """
    body: Dict[str, Any] = {
        "title": title,
        "recordingUrl": recording_url,
        "participants": [
            RecordingParticipant.model_validate(p).model_dump(exclude_none=True)
            for p in participants
        ],
        "date": date,
    }
    if duration_seconds is not None:
        body["durationSeconds"] = duration_seconds
    if external_id:
        body["externalId"] = external_id

    created = await client.post(
        "video-conferences", json=body, tool="video_conferences"
    )
    conf = as_record(normalize(created))
    return (
        "Recording uploaded successfully.\n"
        f"- **ID**: {text(conf, 'id')}\n"
        f"- **Title**: {text(conf, 'title')}\n"
        f"- **Date**: {format_date(conf.get('date'))}"
    )


@chorus_tool(DELETE)
async def delete_recording(client: ChorusClient, conference_id: str) -> str:
    """
    Delete a recording. This is irreversible; use it for data retention or
    GDPR requests.
    """
    await client.delete(f"video-conferences/{conference_id}", tool="video_conferences")
    return f"Recording {conference_id} deleted successfully."
