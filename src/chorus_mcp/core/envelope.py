"""
Detection and flattening of Chorus response envelopes.

Chorus answers some endpoints with JSON:API documents
(``{"data": [...], "meta": {"page": {...}}}``) and others with plain JSON.
Everything here is a pure function of the body; unexpected shapes are
passed through untouched instead of raising.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DATA_KEY = "data"
ATTRIBUTES_KEY = "attributes"
ID_KEY = "id"

CanonicalRecord = Dict[str, Any]


class EnvelopeKind(str, Enum):
    COLLECTION = "collection"
    SINGLE = "single"
    EMPTY = "empty"
    PASSTHROUGH = "passthrough"


class CanonicalCollection(BaseModel):
    """Flattened list result: ``items`` plus the best known full-set ``total``."""

    items: List[CanonicalRecord] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    cursor: Optional[Any] = None

    model_config = ConfigDict(extra="forbid")


def _has_attribute_bag(value: Any) -> bool:
    return isinstance(value, Mapping) and ATTRIBUTES_KEY in value


def classify_body(body: Any) -> EnvelopeKind:
    """Return the envelope shape of ``body``; the first matching rule wins."""
    if not isinstance(body, Mapping) or DATA_KEY not in body:
        return EnvelopeKind.PASSTHROUGH

    data = body[DATA_KEY]
    if isinstance(data, list):
        if data and _has_attribute_bag(data[0]):
            return EnvelopeKind.COLLECTION
        if not data:
            return EnvelopeKind.EMPTY
        return EnvelopeKind.PASSTHROUGH

    if _has_attribute_bag(data):
        return EnvelopeKind.SINGLE

    return EnvelopeKind.PASSTHROUGH


def flatten_record(record: Any) -> CanonicalRecord:
    """
    Merge a JSON:API resource's ``id`` and ``attributes`` into one dict.

    The resource identifier is written last so an attribute that happens to
    be called ``id`` can never replace it. Records that were already
    flattened come back with the same ``id``.
    """
    if not isinstance(record, Mapping):
        return {ID_KEY: None}

    attributes = record.get(ATTRIBUTES_KEY)
    flat: CanonicalRecord = dict(attributes) if isinstance(attributes, Mapping) else {}
    flat[ID_KEY] = record.get(ID_KEY)
    return flat


def _page_meta(body: Mapping[str, Any]) -> Mapping[str, Any]:
    meta = body.get("meta")
    if not isinstance(meta, Mapping):
        return {}
    page = meta.get("page")
    return page if isinstance(page, Mapping) else {}


def _reported_total(page: Mapping[str, Any]) -> Optional[int]:
    total = page.get("total")
    # bool is an int subclass; a JSON true is not a count
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        return None
    return total


def _reported_cursor(page: Mapping[str, Any]) -> Optional[Any]:
    # Opaque token, carried through with its original JSON type
    return page.get("cursor")


def normalize(body: Any) -> Union[CanonicalRecord, CanonicalCollection, Any]:
    """
    Auto-normalize a Chorus response body:
    - JSON:API list   -> CanonicalCollection(items=[flattened...], total, cursor)
    - JSON:API single -> flattened record dict
    - ``{"data": []}`` -> CanonicalCollection(items=[], total=0)
    - anything else   -> returned as-is
    """
    kind = classify_body(body)

    if kind is EnvelopeKind.COLLECTION:
        items = [flatten_record(element) for element in body[DATA_KEY]]
        page = _page_meta(body)
        total = _reported_total(page)
        return CanonicalCollection(
            items=items,
            total=len(items) if total is None else total,
            cursor=_reported_cursor(page),
        )

    if kind is EnvelopeKind.SINGLE:
        return flatten_record(body[DATA_KEY])

    if kind is EnvelopeKind.EMPTY:
        return CanonicalCollection(items=[], total=0)

    return body


def as_collection(value: Any) -> CanonicalCollection:
    """
    Coerce a normalized value into a collection for list-style handlers.

    Plain ``{"items": [...], "total": n}`` bodies and bare arrays are
    accepted too, since some endpoints already answer in that shape.
    """
    if isinstance(value, CanonicalCollection):
        return value
    if isinstance(value, list):
        items = [v for v in value if isinstance(v, dict)]
        return CanonicalCollection(items=items, total=len(items))
    if isinstance(value, Mapping):
        raw_items = value.get("items")
        if isinstance(raw_items, list):
            items = [v for v in raw_items if isinstance(v, dict)]
            total = _reported_total(value)
            return CanonicalCollection(
                items=items, total=len(items) if total is None else total
            )
    return CanonicalCollection()


def as_record(value: Any) -> CanonicalRecord:
    """Return ``value`` when it is a mapping, else an empty record."""
    return dict(value) if isinstance(value, Mapping) else {}


__all__ = [
    "CanonicalCollection",
    "CanonicalRecord",
    "EnvelopeKind",
    "as_collection",
    "as_record",
    "classify_body",
    "flatten_record",
    "normalize",
]
