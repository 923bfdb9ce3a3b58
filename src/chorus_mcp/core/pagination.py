from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .envelope import CanonicalCollection

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PaginationWindow(BaseModel):
    """One page of a collection relative to its full size."""

    total: int = Field(ge=0)
    count: int = Field(ge=0)
    offset: int = Field(ge=0)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    has_more: bool = False
    next_offset: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


def clamp_limit(limit: int) -> int:
    """Clamp a client limit into 1..MAX_PAGE_SIZE to avoid huge payloads."""
    return max(1, min(limit, MAX_PAGE_SIZE))


def build_window(
    items: Sequence[Dict[str, Any]], total: int, offset: int
) -> PaginationWindow:
    """
    Describe ``items`` as the page starting at ``offset`` of ``total`` results.

    ``total`` is advisory: a stale upstream count smaller than the page is
    reported as-is rather than rejected.
    """
    total = max(0, total)
    offset = max(0, offset)
    count = len(items)
    has_more = total > offset + count
    return PaginationWindow(
        total=total,
        count=count,
        offset=offset,
        items=list(items),
        has_more=has_more,
        next_offset=offset + count if has_more else None,
    )


def window_from_collection(
    collection: CanonicalCollection, offset: int
) -> PaginationWindow:
    """Server-paginated mode: the upstream already applied the page size."""
    items = collection.items
    # A zero total from Chorus means "not reported"
    total = collection.total or len(items)
    return build_window(items, total, offset)


def slice_window(
    all_items: Sequence[Dict[str, Any]], offset: int, limit: int
) -> PaginationWindow:
    """
    Local-slice mode for resources with no paging endpoint.

    The whole child collection is fetched once, the page is cut here, and
    the full length becomes the window total.
    """
    offset = max(0, offset)
    page = list(all_items[offset : offset + clamp_limit(limit)])
    return build_window(page, len(all_items), offset)


def format_pagination_info(window: PaginationWindow) -> str:
    lines = [
        f"Showing {window.count} of {window.total} results (offset: {window.offset})"
    ]
    if window.has_more and window.next_offset is not None:
        lines.append(f"More results available. Use offset={window.next_offset}")
    return "\n".join(lines)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "PaginationWindow",
    "build_window",
    "clamp_limit",
    "format_pagination_info",
    "slice_window",
    "window_from_collection",
]
