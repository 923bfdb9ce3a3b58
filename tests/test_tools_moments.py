import json
from datetime import datetime, timezone

import httpx
import pytest
import respx
from chorus_mcp.core.client import ChorusClient
from chorus_mcp.core.tools.moments import (
    create_moment,
    delete_moment,
    get_moment,
    list_moments,
    shared_on_range,
)
from chorus_mcp.core.tools._common import ms_to_seconds
from httpx import Response

BASE = "https://mock-chorus.test/api/v1"


@pytest.fixture
def client():
    return ChorusClient(base_url=BASE, api_key="mock-key")


def test_shared_on_range_defaults_to_last_90_days():
    now = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)

    assert (
        shared_on_range(None, None, now=now)
        == "2024-03-17T12:00:00.000Z:2024-06-15T12:00:00.000Z"
    )
    assert shared_on_range("2024-01-01", None, now=now).startswith("2024-01-01:")
    assert shared_on_range("a", "b", now=now) == "a:b"


@pytest.mark.asyncio
@respx.mock
async def test_list_moments_always_sends_shared_on(client):
    route = respx.get(f"{BASE}/moments").mock(
        return_value=Response(
            200,
            json={
                "data": [
                    {
                        "id": "m1",
                        "type": "moment",
                        "attributes": {
                            "subject": "Pricing pushback",
                            "shared_on": "2024-06-15T14:30:00Z",
                            "creator": {"name": "Ada"},
                            "conversation": "c1",
                            "duration": 75,
                        },
                    }
                ],
                "meta": {"page": {"total": 1}},
            },
        )
    )

    async with client:
        out = await list_moments(client, conversation_id="c1")

    params = route.calls[0].request.url.params
    assert ":" in params["filter[shared_on]"]
    assert params["filter[conversation_id]"] == "c1"
    assert "- **Pricing pushback** (m1)" in out
    assert "  Shared: Jun 15, 2024, 02:30 PM by Ada" in out
    assert "  Duration: 1m 15s" in out


@pytest.mark.asyncio
@respx.mock
async def test_list_moments_empty(client):
    respx.get(f"{BASE}/moments").mock(return_value=Response(200, json={"data": []}))

    async with client:
        out = await list_moments(client, start_date="s", end_date="e")

    assert out == "No moments found in the specified date range."


@pytest.mark.asyncio
@respx.mock
async def test_get_moment(client):
    respx.get(f"{BASE}/moments/m1").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "id": "m1",
                    "type": "moment",
                    "attributes": {
                        "title": "Great close",
                        "conversationId": "c1",
                        "timestamp": 61000,
                        "text": "Let's sign today.",
                    },
                }
            },
        )
    )

    async with client:
        out = await get_moment(client, "m1")

    assert out.startswith("# Great close")
    assert "- **Timestamp**: 1m 1s" in out
    assert "## Transcript Snippet\n> Let's sign today." in out


@pytest.mark.asyncio
@respx.mock
async def test_create_moment_posts_body(client):
    route = respx.post(f"{BASE}/moments").mock(
        return_value=Response(
            201,
            json={
                "data": {
                    "id": "m9",
                    "type": "moment",
                    "attributes": {"title": "Intro", "conversationId": "c1"},
                }
            },
        )
    )

    async with client:
        out = await create_moment(client, "c1", 5000, "Intro", duration_ms=3000)

    sent = json.loads(route.calls[0].request.content)
    assert sent == {
        "conversationId": "c1",
        "timestamp": 5000,
        "title": "Intro",
        "duration": 3000,
    }
    assert out.startswith("Moment created successfully.")
    assert "- **ID**: m9" in out
    assert "- **Conversation**: c1" in out


@pytest.mark.asyncio
@respx.mock
async def test_create_moment_sends_moment_type_as_type(client):
    route = respx.post(f"{BASE}/moments").mock(
        return_value=Response(201, json={"data": {"id": "m3", "attributes": {}}})
    )

    async with client:
        await create_moment(client, "c1", 0, "Objection", moment_type="objection")

    sent = json.loads(route.calls[0].request.content)
    assert sent["type"] == "objection"
    assert "moment_type" not in sent


@pytest.mark.asyncio
@respx.mock
async def test_create_moment_bad_request_returns_text(client):
    respx.post(f"{BASE}/moments").mock(
        return_value=Response(400, json={"message": "timestamp out of range"})
    )

    async with client:
        out = await create_moment(client, "c1", -1, "Intro")

    assert out == "Error: Bad request. timestamp out of range"


@pytest.mark.asyncio
@respx.mock
async def test_delete_moment(client):
    route = respx.delete(f"{BASE}/moments/m1").mock(return_value=Response(204))

    async with client:
        out = await delete_moment(client, "m1")

    assert route.called
    assert out == "Moment m1 deleted successfully."


@pytest.mark.asyncio
@respx.mock
async def test_delete_moment_connection_error_returns_text(client):
    respx.delete(f"{BASE}/moments/m1").mock(side_effect=httpx.ConnectError("refused"))

    async with client:
        out = await delete_moment(client, "m1")

    assert out.startswith("Error: Could not connect to the Chorus API")


def test_write_tools_carry_annotations():
    def hints(func):
        return func.tool_annotations.model_dump(by_alias=True)

    assert hints(create_moment)["readOnlyHint"] is False
    assert hints(delete_moment)["destructiveHint"] is True
    assert hints(list_moments)["readOnlyHint"] is True


@pytest.mark.asyncio
@respx.mock
async def test_get_moment_with_infinite_timestamp_renders_zero(client):
    respx.get(f"{BASE}/moments/m5").mock(
        return_value=Response(
            200,
            content=b'{"data": {"id": "m5", "attributes": {"timestamp": Infinity}}}',
            headers={"Content-Type": "application/json"},
        )
    )

    async with client:
        out = await get_moment(client, "m5")

    assert "- **Timestamp**: 0s" in out


def test_ms_to_seconds_tolerates_junk():
    assert ms_to_seconds(90500) == 90
    assert ms_to_seconds(float("inf")) == 0
    assert ms_to_seconds("soon") == 0
    assert ms_to_seconds(None) == 0
