from __future__ import annotations

from ..client import ChorusClient
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


@chorus_tool()
async def list_saved_searches(
    client: ChorusClient,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List saved search queries with their names and query text."""
    collection = await fetch_collection(
        client,
        "saved-searches",
        params=page_params(limit, offset),
        tool="saved_searches",
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No saved searches found."

    def _render() -> str:
        lines = ["# Saved Searches", "", format_pagination_info(window), ""]
        for s in window.items:
            query = f' - Query: "{s["query"]}"' if s.get("query") else ""
            name = text(s, "name", "Untitled")
            lines.append(f"- **{name}** ({text(s, 'id')}){query}")
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_saved_search(
    client: ChorusClient,
    search_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get a saved search definition including its query and filters."""
    search = await fetch_record(
        client, f"saved-searches/{search_id}", tool="saved_searches"
    )
    if search.get("id") is None:
        return not_found("saved search", search_id)

    def _render() -> str:
        lines = [
            f"# {text(search, 'name', 'Untitled')}",
            "",
            f"- **ID**: {text(search, 'id')}",
        ]
        if search.get("query"):
            lines.append(f"- **Query**: {search['query']}")
        if search.get("filters"):
            lines.extend(
                ["", "## Filters", "```json", to_json_text(search["filters"]), "```"]
            )
        return "\n".join(lines)

    return format_output(search, _render, response_format)


@chorus_tool()
async def execute_saved_search(
    client: ChorusClient,
    search_id: str,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Run a saved search and list the conversations it matches."""
    collection = await fetch_collection(
        client,
        f"saved-searches/{search_id}/execute",
        body=page_params(limit, offset),
        tool="saved_searches",
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No conversations matched this saved search."

    def _render() -> str:
        lines = ["# Saved Search Results", "", format_pagination_info(window), ""]
        for c in window.items:
            lines.append(
                f"- **{text(c, 'title', 'Untitled')}** ({text(c, 'id')}) - "
                f"{text(c, 'date')}"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)
