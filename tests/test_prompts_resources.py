import json

import pytest
import respx
from chorus_mcp.core.client import ChorusClient
from chorus_mcp.core.prompts import (
    PROMPTS,
    chorus_call_analysis,
    chorus_competitive_intelligence,
    chorus_deal_risk_assessment,
)
from chorus_mcp.core.resources import (
    RESOURCES,
    conversation_summary,
    playlist,
    scorecard_template,
    user_profile,
)
from httpx import Response

BASE = "https://mock-chorus.test/api/v1"


@pytest.fixture
def client():
    return ChorusClient(base_url=BASE, api_key="mock-key")


def test_call_analysis_names_tools_and_focus():
    out = chorus_call_analysis("c42", focus_areas="discovery,closing")

    assert out.startswith('Analyze the sales call with conversation ID "c42".')
    assert "chorus_get_transcript" in out
    assert "covering these focus areas: discovery,closing" in out


def test_prompt_defaults():
    assert "focus areas: overall" in chorus_call_analysis("c1")
    assert "over the last 30 days" in chorus_deal_risk_assessment("a@b.test")


def test_competitive_intelligence_repeats_competitor():
    out = chorus_competitive_intelligence("Gong", "2024-01-01", "2024-03-31")

    assert "from 2024-01-01 to 2024-03-31" in out
    assert "## How Prospects Describe Gong" in out
    assert "## Objections Related to Gong" in out


def test_every_prompt_has_a_description():
    assert len(PROMPTS) == 6
    assert all(p.prompt_description for p in PROMPTS)
    assert all(p.__name__.startswith("chorus_") for p in PROMPTS)


def test_resource_uris_are_unique():
    uris = [r.resource_uri for r in RESOURCES]

    assert len(uris) == len(set(uris)) == 6
    assert all(uri.startswith("chorus://") for uri in uris)


@pytest.mark.asyncio
@respx.mock
async def test_user_profile_returns_flattened_json(client):
    respx.get(f"{BASE}/users/u1").mock(
        return_value=Response(
            200,
            json={"data": {"id": "u1", "type": "user", "attributes": {"name": "Ada"}}},
        )
    )

    async with client:
        out = await user_profile(client, "u1")

    assert json.loads(out) == {"name": "Ada", "id": "u1"}


@pytest.mark.asyncio
@respx.mock
async def test_scorecard_template_reads_templates_endpoint(client):
    route = respx.get(f"{BASE}/scorecards/templates/t1").mock(
        return_value=Response(200, json={"data": {"id": "t1", "attributes": {}}})
    )

    async with client:
        out = await scorecard_template(client, "t1")

    assert route.called
    assert json.loads(out) == {"id": "t1"}


@pytest.mark.asyncio
@respx.mock
async def test_conversation_summary_shape(client):
    respx.get(f"{BASE}/conversations/c1").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "id": "c1",
                    "attributes": {
                        "title": "Demo",
                        "date": "2024-06-15",
                        "duration": 1800,
                        "participants": [{"name": "Ada"}, {"name": "Cy"}],
                        "type": "meeting",
                        "status": "processed",
                        "transcript": "not part of the summary",
                    },
                }
            },
        )
    )

    async with client:
        out = await conversation_summary(client, "c1")

    assert json.loads(out) == {
        "id": "c1",
        "title": "Demo",
        "date": "2024-06-15",
        "duration": 1800,
        "participantCount": 2,
        "participants": ["Ada", "Cy"],
        "type": "meeting",
        "status": "processed",
    }


@pytest.mark.asyncio
@respx.mock
async def test_resource_failure_returns_error_text(client, caplog):
    respx.get(f"{BASE}/playlists/p9").mock(return_value=Response(404, json={}))

    async with client:
        with caplog.at_level("WARNING", logger="chorus_mcp.resources"):
            out = await playlist(client, "p9")

    assert out.startswith("Error: Resource not found")
    record = next(r for r in caplog.records if r.message == "resource_failed")
    assert record.resource == "chorus_playlist"
    assert record.error_kind == "not_found"
