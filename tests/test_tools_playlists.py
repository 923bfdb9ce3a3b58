import json

import pytest
import respx
from chorus_mcp.core.client import ChorusClient
from chorus_mcp.core.tools.playlists import (
    get_playlist,
    list_playlist_moments,
    list_playlists,
)
from httpx import Response

BASE = "https://mock-chorus.test/api/v1"


def _playlist(moment_count):
    moments = [
        {
            "id": f"m{i}",
            "title": f"Moment {i}",
            "timestamp": i * 60000,
            "conversationId": "c1",
        }
        for i in range(moment_count)
    ]
    return {
        "data": {
            "id": "p1",
            "type": "playlist",
            "attributes": {
                "name": "Objection handling",
                "description": "Best rebuttals",
                "momentCount": moment_count,
                "moments": moments,
            },
        }
    }


@pytest.fixture
def client():
    return ChorusClient(base_url=BASE, api_key="mock-key")


@pytest.mark.asyncio
@respx.mock
async def test_list_playlists(client):
    respx.get(f"{BASE}/playlists").mock(
        return_value=Response(
            200,
            json={
                "data": [
                    {
                        "id": "p1",
                        "type": "playlist",
                        "attributes": {
                            "name": "Objection handling",
                            "momentCount": 3,
                            "description": "Best rebuttals",
                        },
                    }
                ]
            },
        )
    )

    async with client:
        out = await list_playlists(client)

    assert "- **Objection handling** (p1) - 3 moments: Best rebuttals" in out
    assert "Showing 1 of 1 results (offset: 0)" in out


@pytest.mark.asyncio
@respx.mock
async def test_get_playlist_renders_moments(client):
    respx.get(f"{BASE}/playlists/p1").mock(return_value=Response(200, json=_playlist(2)))

    async with client:
        out = await get_playlist(client, "p1")

    assert out.startswith("# Objection handling\n\nBest rebuttals")
    assert "- **Moments**: 2" in out
    assert "- [0s] **Moment 0**" in out
    assert "- [1m] **Moment 1**" in out


@pytest.mark.asyncio
@respx.mock
async def test_list_playlist_moments_slices_locally(client):
    route = respx.get(f"{BASE}/playlists/p1").mock(
        return_value=Response(200, json=_playlist(5))
    )

    async with client:
        out = await list_playlist_moments(
            client, "p1", limit=2, offset=1, response_format="json"
        )

    parsed = json.loads(out)
    assert parsed["total"] == 5
    assert parsed["count"] == 2
    assert parsed["offset"] == 1
    assert parsed["has_more"] is True
    assert parsed["next_offset"] == 3
    assert [m["id"] for m in parsed["items"]] == ["m1", "m2"]
    # No paging params are sent for the embedded list
    assert "page[size]" not in route.calls[0].request.url.params


@pytest.mark.asyncio
@respx.mock
async def test_list_playlist_moments_last_slice(client):
    respx.get(f"{BASE}/playlists/p1").mock(return_value=Response(200, json=_playlist(5)))

    async with client:
        out = await list_playlist_moments(client, "p1", limit=2, offset=4)

    assert "Showing 1 of 5 results (offset: 4)" in out
    assert "More results available" not in out
    assert "## Moment 4 (m4)" in out
    assert "- **Timestamp**: 4m" in out


@pytest.mark.asyncio
@respx.mock
async def test_list_playlist_moments_offset_past_end(client):
    respx.get(f"{BASE}/playlists/p1").mock(return_value=Response(200, json=_playlist(3)))

    async with client:
        out = await list_playlist_moments(client, "p1", offset=10)

    assert out == "No moments at offset 10; playlist has 3."


@pytest.mark.asyncio
@respx.mock
async def test_list_playlist_moments_empty_playlist(client):
    respx.get(f"{BASE}/playlists/p1").mock(return_value=Response(200, json=_playlist(0)))

    async with client:
        out = await list_playlist_moments(client, "p1")

    assert out == "No moments found in this playlist."
