from __future__ import annotations

from ..client import ChorusClient
from ..formatting import ResponseFormat, format_output
from ..pagination import (
    DEFAULT_PAGE_SIZE,
    format_pagination_info,
    window_from_collection,
)
from ._common import (
    chorus_tool,
    fetch_collection,
    fetch_record,
    not_found,
    page_params,
    text,
)


@chorus_tool()
async def list_teams(
    client: ChorusClient,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List teams with their manager and member count."""
    collection = await fetch_collection(
        client, "teams", params=page_params(limit, offset), tool="teams"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No teams found."

    def _render() -> str:
        lines = ["# Teams", "", format_pagination_info(window), ""]
        for t in window.items:
            manager = f" - Manager: {t['managerName']}" if t.get("managerName") else ""
            members = (
                f" ({t['memberCount']} members)"
                if t.get("memberCount") is not None
                else ""
            )
            name = text(t, "name", "Untitled")
            lines.append(f"- **{name}** ({text(t, 'id')}){members}{manager}")
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_team(
    client: ChorusClient,
    team_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get team details including manager and members."""
    team = await fetch_record(client, f"teams/{team_id}", tool="teams")
    if team.get("id") is None:
        return not_found("team", team_id)

    def _render() -> str:
        lines = [
            f"# {text(team, 'name', 'Untitled')}",
            "",
            f"- **ID**: {text(team, 'id')}",
        ]
        if team.get("managerName"):
            lines.append(f"- **Manager**: {team['managerName']}")
        if team.get("memberCount") is not None:
            lines.append(f"- **Members**: {team['memberCount']}")
        members = team.get("members")
        if isinstance(members, list) and members:
            lines.extend(["", "## Team Members"])
            for m in members:
                if not isinstance(m, dict):
                    continue
                role = f" [{m['role']}]" if m.get("role") else ""
                lines.append(
                    f"- **{text(m, 'name', 'Unknown')}** ({text(m, 'email')}){role}"
                )
        return "\n".join(lines)

    return format_output(team, _render, response_format)


@chorus_tool()
async def get_team_members(
    client: ChorusClient,
    team_id: str,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List members of a team with their profile details."""
    collection = await fetch_collection(
        client,
        f"teams/{team_id}/members",
        params=page_params(limit, offset),
        tool="teams",
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No members found for this team."

    def _render() -> str:
        lines = ["# Team Members", "", format_pagination_info(window), ""]
        for m in window.items:
            role = f" [{m['role']}]" if m.get("role") else ""
            lines.append(
                f"- **{text(m, 'name', 'Unknown')}** ({text(m, 'id')}) - "
                f"{text(m, 'email')}{role}"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)
