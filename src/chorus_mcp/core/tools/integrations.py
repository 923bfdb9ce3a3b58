from __future__ import annotations

from typing import List

from ..client import ChorusClient
from ..envelope import normalize
from ..formatting import ResponseFormat, format_output, to_json_text
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


def _json_block(value: object) -> List[str]:
    return ["```json", to_json_text(value), "```"]


@chorus_tool()
async def list_integrations(
    client: ChorusClient,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List configured integrations (Salesforce, HubSpot, ...) and their status."""
    collection = await fetch_collection(
        client, "integrations", params=page_params(limit, offset), tool="integrations"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No integrations configured."

    def _render() -> str:
        lines = ["# Integrations", "", format_pagination_info(window), ""]
        for i in window.items:
            lines.append(
                f"- **{text(i, 'name', 'Untitled')}** ({text(i, 'id')}) "
                f"[{text(i, 'type', 'Unknown')}] - "
                f"Status: {text(i, 'status', 'Unknown')}"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_integration(
    client: ChorusClient,
    integration_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get one integration's type, status and configuration."""
    integ = await fetch_record(
        client, f"integrations/{integration_id}", tool="integrations"
    )
    if integ.get("id") is None:
        return not_found("integration", integration_id)

    def _render() -> str:
        lines = [
            f"# {text(integ, 'name', 'Untitled')}",
            "",
            f"- **ID**: {text(integ, 'id')}",
            f"- **Type**: {text(integ, 'type', 'Unknown')}",
            f"- **Status**: {text(integ, 'status', 'Unknown')}",
        ]
        if integ.get("config"):
            lines.extend(["", "## Configuration", *_json_block(integ["config"])])
        return "\n".join(lines)

    return format_output(integ, _render, response_format)


@chorus_tool()
async def get_session(
    client: ChorusClient,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    Get the current API session and its permissions. Useful to verify the
    API key and see what it can access.
    """
    session = normalize(
        await client.get("sessions/current", tool="integrations")
    )
    return format_output(
        session,
        lambda: "\n".join(["# Current Session", "", *_json_block(session)]),
        response_format,
    )
