from __future__ import annotations

from typing import Any, Dict, List

from ..client import ChorusClient
from ..formatting import ResponseFormat, format_duration, format_output
from ..pagination import (
    DEFAULT_PAGE_SIZE,
    format_pagination_info,
    slice_window,
    window_from_collection,
)
from ._common import (
    chorus_tool,
    fetch_collection,
    fetch_record,
    ms_to_seconds,
    not_found,
    page_params,
    text,
)


def _embedded_moments(playlist: Dict[str, Any]) -> List[Dict[str, Any]]:
    moments = playlist.get("moments")
    if not isinstance(moments, list):
        return []
    return [m for m in moments if isinstance(m, dict)]


@chorus_tool()
async def list_playlists(
    client: ChorusClient,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List coaching playlists with names, descriptions and moment counts."""
    collection = await fetch_collection(
        client, "playlists", params=page_params(limit, offset), tool="playlists"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No playlists found."

    def _render() -> str:
        lines = ["# Playlists", "", format_pagination_info(window), ""]
        for p in window.items:
            count = p.get("momentCount")
            moments = f" - {count} moments" if count is not None else ""
            description = f": {p['description']}" if p.get("description") else ""
            lines.append(
                f"- **{text(p, 'name', 'Untitled')}** ({text(p, 'id')})"
                f"{moments}{description}"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_playlist(
    client: ChorusClient,
    playlist_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get playlist details including its moments."""
    playlist = await fetch_record(client, f"playlists/{playlist_id}", tool="playlists")
    if playlist.get("id") is None:
        return not_found("playlist", playlist_id)

    def _render() -> str:
        lines = [f"# {text(playlist, 'name', 'Untitled')}", ""]
        if playlist.get("description"):
            lines.extend([str(playlist["description"]), ""])
        lines.append(f"- **ID**: {text(playlist, 'id')}")
        if playlist.get("momentCount") is not None:
            lines.append(f"- **Moments**: {playlist['momentCount']}")
        moments = _embedded_moments(playlist)
        if moments:
            lines.extend(["", "## Moments"])
            for m in moments:
                time = format_duration(ms_to_seconds(m.get("timestamp")))
                description = f": {m['description']}" if m.get("description") else ""
                title = text(m, "title", "Untitled")
                lines.append(f"- [{time}] **{title}**{description}")
        return "\n".join(lines)

    return format_output(playlist, _render, response_format)


@chorus_tool()
async def list_playlist_moments(
    client: ChorusClient,
    playlist_id: str,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    List the moments of a playlist with timestamps and transcript snippets.

    Playlists embed their full moment list and have no paging endpoint, so
    the page is cut locally from the fetched playlist.
    """
    playlist = await fetch_record(client, f"playlists/{playlist_id}", tool="playlists")
    if playlist.get("id") is None:
        return not_found("playlist", playlist_id)
    window = slice_window(_embedded_moments(playlist), offset, limit)
    if not window.items:
        if window.total:
            return f"No moments at offset {window.offset}; playlist has {window.total}."
        return "No moments found in this playlist."

    def _render() -> str:
        lines = ["# Playlist Moments", "", format_pagination_info(window), ""]
        for m in window.items:
            time = format_duration(ms_to_seconds(m.get("timestamp")))
            lines.append(f"## {text(m, 'title', 'Untitled')} ({text(m, 'id')})")
            lines.append(f"- **Timestamp**: {time}")
            lines.append(f"- **Conversation**: {text(m, 'conversationId')}")
            if m.get("type"):
                lines.append(f"- **Type**: {m['type']}")
            if m.get("text"):
                lines.append(f'- **Snippet**: "{m["text"]}"')
            lines.append("")
        return "\n".join(lines)

    return format_output(window, _render, response_format)
