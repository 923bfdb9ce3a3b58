"""
Read-only ``chorus://`` resources.

Each reader fetches one entity and returns it as indented JSON. Failures are
returned as the classified error line, so a resource read never raises.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List

from .client import ChorusClient
from .envelope import as_record, normalize
from .errors import classify_error
from .formatting import to_json_text

log = logging.getLogger("chorus_mcp.resources")

RESOURCE_MIME_TYPE = "application/json"

Reader = Callable[..., Awaitable[str]]

RESOURCES: List[Reader] = []


def chorus_resource(
    name: str, uri: str, description: str
) -> Callable[[Reader], Reader]:
    """Register a reader for ``uri``; its parameters after ``client`` match the URI."""

    def decorator(func: Reader) -> Reader:
        @functools.wraps(func)
        async def wrapper(client: ChorusClient, *args: Any, **kwargs: Any) -> str:
            try:
                return await func(client, *args, **kwargs)
            except Exception as exc:
                category = classify_error(exc)
                log.warning(
                    "resource_failed",
                    extra={
                        "resource": name,
                        "error_kind": category.kind.value,
                        "status": category.status,
                    },
                )
                return category.message

        wrapper.resource_name = name  # type: ignore[attr-defined]
        wrapper.resource_uri = uri  # type: ignore[attr-defined]
        wrapper.resource_description = description  # type: ignore[attr-defined]
        RESOURCES.append(wrapper)
        return wrapper

    return decorator


async def _read_json(client: ChorusClient, endpoint: str) -> str:
    body = await client.get(endpoint, tool="resources")
    return to_json_text(normalize(body))


@chorus_resource(
    "chorus_user_profile",
    "chorus://users/{user_id}",
    "Access a Chorus user profile by user ID. Returns name, email, role, "
    "team membership, and activity summary.",
)
async def user_profile(client: ChorusClient, user_id: str) -> str:
    return await _read_json(client, f"users/{user_id}")


@chorus_resource(
    "chorus_team",
    "chorus://teams/{team_id}",
    "Access team structure including members, manager, and team hierarchy.",
)
async def team(client: ChorusClient, team_id: str) -> str:
    return await _read_json(client, f"teams/{team_id}")


@chorus_resource(
    "chorus_scorecard_template",
    "chorus://scorecard-templates/{template_id}",
    "Access a scorecard evaluation template with criteria definitions, "
    "scoring rubric, and expected behaviors.",
)
async def scorecard_template(client: ChorusClient, template_id: str) -> str:
    return await _read_json(client, f"scorecards/templates/{template_id}")


@chorus_resource(
    "chorus_saved_search",
    "chorus://saved-searches/{search_id}",
    "Access a saved search query definition including filters, criteria, "
    "and configuration.",
)
async def saved_search(client: ChorusClient, search_id: str) -> str:
    return await _read_json(client, f"saved-searches/{search_id}")


@chorus_resource(
    "chorus_conversation_summary",
    "chorus://conversations/{conversation_id}/summary",
    "Quick summary of a conversation including participants, duration, date, "
    "and key topics. Lighter weight than the full conversation tool.",
)
async def conversation_summary(client: ChorusClient, conversation_id: str) -> str:
    body = await client.get(f"conversations/{conversation_id}", tool="resources")
    conversation = as_record(normalize(body))
    participants = conversation.get("participants")
    if not isinstance(participants, list):
        participants = []
    summary: Dict[str, Any] = {
        "id": conversation.get("id"),
        "title": conversation.get("title"),
        "date": conversation.get("date"),
        "duration": conversation.get("duration"),
        "participantCount": len(participants),
        "participants": [
            p.get("name") if isinstance(p, dict) else p for p in participants
        ],
        "type": conversation.get("type"),
        "status": conversation.get("status"),
    }
    return to_json_text(summary)


@chorus_resource(
    "chorus_playlist",
    "chorus://playlists/{playlist_id}",
    "Access a coaching playlist with its moments list, descriptions, and "
    "associated calls.",
)
async def playlist(client: ChorusClient, playlist_id: str) -> str:
    return await _read_json(client, f"playlists/{playlist_id}")


__all__ = [
    "RESOURCES",
    "RESOURCE_MIME_TYPE",
    "chorus_resource",
    "conversation_summary",
    "playlist",
    "saved_search",
    "scorecard_template",
    "team",
    "user_profile",
]
