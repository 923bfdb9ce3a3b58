from __future__ import annotations

from typing import Any, Dict, Optional

from ..client import ChorusClient
from ..formatting import ResponseFormat, format_output
from ..pagination import (
    DEFAULT_PAGE_SIZE,
    PaginationWindow,
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


def _user_line(u: Dict[str, Any], *, with_team: bool = True) -> str:
    role = f" [{u['role']}]" if u.get("role") else ""
    team = f" | Team: {u['teamName']}" if with_team and u.get("teamName") else ""
    return (
        f"- **{text(u, 'name', 'Unknown')}** ({text(u, 'id')}) - "
        f"{text(u, 'email')}{role}{team}"
    )


def _render_user_list(title: str, window: PaginationWindow, *, with_team: bool) -> str:
    lines = [title, "", format_pagination_info(window), ""]
    lines.extend(_user_line(u, with_team=with_team) for u in window.items)
    return "\n".join(lines)


@chorus_tool()
async def list_users(
    client: ChorusClient,
    *,
    team_id: Optional[str] = None,
    role: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    List users in the Chorus organization, optionally filtered by team or
    role ('admin', 'user', 'manager', ...).
    """
    params = {**page_params(limit, offset), **filter_params(team_id=team_id, role=role)}
    collection = await fetch_collection(client, "users", params=params, tool="users")
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No users found matching the specified filters."

    return format_output(
        window,
        lambda: _render_user_list("# Chorus Users", window, with_team=True),
        response_format,
    )


@chorus_tool()
async def get_user(
    client: ChorusClient,
    user_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get the profile of one user: name, email, role, team and status."""
    user = await fetch_record(client, f"users/{user_id}", tool="users")
    if user.get("id") is None:
        return not_found("user", user_id)

    def _render() -> str:
        lines = [
            f"# {text(user, 'name', 'Unknown')}",
            "",
            f"- **ID**: {text(user, 'id')}",
            f"- **Email**: {text(user, 'email')}",
        ]
        if user.get("role"):
            lines.append(f"- **Role**: {user['role']}")
        if user.get("teamName"):
            lines.append(f"- **Team**: {user['teamName']}")
        if user.get("active") is not None:
            lines.append(f"- **Active**: {'Yes' if user['active'] else 'No'}")
        return "\n".join(lines)

    return format_output(user, _render, response_format)


@chorus_tool()
async def search_users(
    client: ChorusClient,
    query: str,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Search users by name or email."""
    params = {"q": query, **page_params(limit, offset)}
    collection = await fetch_collection(
        client, "users/search", params=params, tool="users"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return f'No users found matching "{query}".'

    return format_output(
        window,
        lambda: _render_user_list(f'# User Search: "{query}"', window, with_team=False),
        response_format,
    )
