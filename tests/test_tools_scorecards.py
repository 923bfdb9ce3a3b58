import json

import pytest
import respx
from chorus_mcp.core.client import ChorusClient
from chorus_mcp.core.tools.scorecards import (
    get_scorecard,
    get_scorecard_template,
    list_scorecard_templates,
    list_scorecards,
)
from httpx import Response

BASE = "https://mock-chorus.test/api/v1"

CRITERIA = [
    {"name": "Discovery", "score": 4, "maxScore": 5, "comments": "Good questions"},
    {"name": "Next steps", "score": 2, "maxScore": 5},
]


@pytest.fixture
def client():
    return ChorusClient(base_url=BASE, api_key="mock-key")


@pytest.mark.asyncio
@respx.mock
async def test_list_scorecards_filters_and_markdown(client):
    route = respx.get(f"{BASE}/scorecards").mock(
        return_value=Response(
            200,
            json={
                "data": [
                    {
                        "id": "s1",
                        "type": "scorecard",
                        "attributes": {
                            "userName": "Bob",
                            "overallScore": 6,
                            "maxScore": 10,
                            "conversationId": "c1",
                            "templateName": "Discovery rubric",
                        },
                    }
                ],
                "meta": {"page": {"total": 4}},
            },
        )
    )

    async with client:
        out = await list_scorecards(client, user_id="u2", limit=1)

    assert route.calls[0].request.url.params["filter[user_id]"] == "u2"
    assert "## Bob - 6/10" in out
    assert "- **Template**: Discovery rubric" in out
    assert "More results available. Use offset=1" in out


@pytest.mark.asyncio
@respx.mock
async def test_get_scorecard_percent_and_criteria(client):
    respx.get(f"{BASE}/scorecards/s1").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "id": "s1",
                    "type": "scorecard",
                    "attributes": {
                        "userId": "u2",
                        "overallScore": 6,
                        "maxScore": 10,
                        "criteria": CRITERIA,
                    },
                }
            },
        )
    )

    async with client:
        out = await get_scorecard(client, "s1")

    assert out.startswith("# Scorecard: u2")
    assert "- **Overall Score**: 6/10 (60%)" in out
    assert "| Discovery | 4 | 5 |" in out
    assert "- **Discovery**: Good questions" in out
    assert "Next steps**:" not in out


@pytest.mark.asyncio
@respx.mock
async def test_get_scorecard_without_max_score_has_no_percent(client):
    respx.get(f"{BASE}/scorecards/s2").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "id": "s2",
                    "type": "scorecard",
                    "attributes": {"userName": "Ada", "overallScore": 3, "maxScore": 0},
                }
            },
        )
    )

    async with client:
        out = await get_scorecard(client, "s2")

    assert "- **Overall Score**: 3/0\n" in out


@pytest.mark.asyncio
@respx.mock
async def test_list_scorecard_templates(client):
    respx.get(f"{BASE}/scorecards/templates").mock(
        return_value=Response(
            200,
            json={
                "data": [
                    {
                        "id": "tpl1",
                        "type": "template",
                        "attributes": {"name": "Discovery rubric", "criteria": CRITERIA},
                    }
                ]
            },
        )
    )

    async with client:
        out = await list_scorecard_templates(client)
        empty_json = await list_scorecard_templates(client, response_format="json")

    assert "- **Discovery rubric** (tpl1) - 2 criteria" in out
    assert json.loads(empty_json)["items"][0]["id"] == "tpl1"


@pytest.mark.asyncio
@respx.mock
async def test_get_scorecard_template(client):
    respx.get(f"{BASE}/scorecards/templates/tpl1").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "id": "tpl1",
                    "type": "template",
                    "attributes": {
                        "name": "Discovery rubric",
                        "criteria": [{"name": "Discovery", "maxScore": 5}],
                    },
                }
            },
        )
    )

    async with client:
        out = await get_scorecard_template(client, "tpl1")

    assert "| Discovery | 5 | N/A |  |" in out


@pytest.mark.asyncio
@respx.mock
async def test_get_scorecard_server_error(client):
    respx.get(f"{BASE}/scorecards/s1").mock(return_value=Response(503, text="down"))

    async with client:
        out = await get_scorecard(client, "s1")

    assert out == "Error: Chorus API server error (503). Try again later."


@pytest.mark.asyncio
@respx.mock
async def test_get_scorecard_with_infinite_score_omits_percent(client):
    respx.get(f"{BASE}/scorecards/s9").mock(
        return_value=Response(
            200,
            content=(
                b'{"data": {"id": "s9", "attributes": '
                b'{"overallScore": Infinity, "maxScore": 5}}}'
            ),
            headers={"Content-Type": "application/json"},
        )
    )

    async with client:
        out = await get_scorecard(client, "s9")

    assert "- **Overall Score**: inf/5\n" in out
    assert "%" not in out


@pytest.mark.asyncio
@respx.mock
async def test_get_scorecard_without_record_says_not_found(client):
    respx.get(f"{BASE}/scorecards/s0").mock(
        return_value=Response(200, json={"data": []})
    )

    async with client:
        out = await get_scorecard(client, "s0")

    assert out == "No scorecard found with ID s0."
