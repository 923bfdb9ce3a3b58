import inspect
from types import ModuleType

import pytest
from chorus_mcp.core.client import ChorusClient
from chorus_mcp.core.registry import (
    discover_tool_modules,
    iter_tool_functions,
    register_discovered_tools,
    register_prompts,
    register_resources,
)

BASE = "https://mock-chorus.test/api/v1"


def _make_module(name: str, code: str) -> ModuleType:
    module = ModuleType(name)
    exec(code, module.__dict__)
    return module


class RecordingApp:
    def __init__(self):
        self.registered = []
        self.prompts = []
        self.resources = []

    def tool(self, name, **kwargs):
        def decorator(fn):
            self.registered.append((name, fn, kwargs))
            return fn

        return decorator

    def prompt(self, name, **kwargs):
        def decorator(fn):
            self.prompts.append((name, fn, kwargs))
            return fn

        return decorator

    def resource(self, uri, **kwargs):
        def decorator(fn):
            self.resources.append((uri, fn, kwargs))
            return fn

        return decorator


@pytest.mark.asyncio
async def test_register_discovered_tools_registers_valid_tools_only():
    code = """
async def tool_fn(client, *, foo:int=1):
    return (client.base_url, foo)

async def _private(client):
    return None

async def wrong_first(arg1, client):
    return None

def sync_func(client):
    return None
"""
    mod = _make_module("fake_mod", code)
    app = RecordingApp()
    client = ChorusClient(base_url=BASE, api_key="mock-key")

    names = register_discovered_tools(app, client, modules=[mod])

    assert names == ["chorus_tool_fn"]
    assert [n for n, _, _ in app.registered] == ["chorus_tool_fn"]

    # wrapper signature should not expose client
    sig = inspect.signature(app.registered[0][1])
    assert "client" not in sig.parameters

    result = await app.registered[0][1](foo=5)
    assert result == (BASE, 5)


def test_register_discovered_tools_duplicate_names_raise():
    mod1 = _make_module("mod1", "async def tool_fn(client): return None")
    mod2 = _make_module("mod2", "async def tool_fn(client): return None")
    client = ChorusClient(base_url=BASE, api_key="mock-key")

    with pytest.raises(ValueError):
        register_discovered_tools(RecordingApp(), client, modules=[mod1, mod2])


def test_register_requires_tool_decorator():
    client = ChorusClient(base_url=BASE, api_key="mock-key")
    with pytest.raises(TypeError):
        register_discovered_tools(object(), client, modules=[])


def test_discover_skips_helper_modules_and_finds_entities():
    names = {m.__name__.rsplit(".", 1)[-1] for m in discover_tool_modules()}

    assert {
        "conversations",
        "users",
        "teams",
        "playlists",
        "moments",
        "scorecards",
        "emails",
        "engagements",
        "integrations",
        "reports",
        "saved_searches",
        "video_conferences",
    } <= names
    assert "_common" not in names


def test_real_tools_register_with_annotations():
    app = RecordingApp()
    client = ChorusClient(base_url=BASE, api_key="mock-key")

    names = register_discovered_tools(app, lambda: client)

    assert "chorus_list_conversations" in names
    assert "chorus_list_playlist_moments" in names
    assert len(names) == len(set(names)) == 39

    hints = {
        n: kwargs["annotations"].model_dump(by_alias=True)
        for n, _, kwargs in app.registered
    }
    assert hints["chorus_get_user"]["readOnlyHint"] is True
    assert hints["chorus_create_moment"]["readOnlyHint"] is False
    assert hints["chorus_delete_moment"]["destructiveHint"] is True
    assert hints["chorus_upload_recording"]["readOnlyHint"] is False
    assert hints["chorus_delete_recording"]["destructiveHint"] is True
    assert hints["chorus_filter_engagements"]["readOnlyHint"] is True


def test_helpers_imported_into_tool_modules_are_not_tools():
    from chorus_mcp.core.tools import users

    names = [f.__name__ for f in iter_tool_functions(users)]

    assert sorted(names) == ["get_user", "list_users", "search_users"]


def test_discover_tool_modules_skips_import_failures(monkeypatch, caplog):
    import importlib
    import pkgutil

    class Info:
        def __init__(self, name):
            self.name = name

    def fake_iter_modules(path, prefix):
        return [Info(prefix + "good"), Info(prefix + "bad")]

    good_mod = _make_module(
        "chorus_mcp.core.tools.good", "async def tool_fn(client): return None"
    )
    real_import_module = importlib.import_module

    def fake_import_module(name, *args, **kwargs):
        if name == "chorus_mcp.core.tools.bad":
            raise ImportError("boom")
        if name == "chorus_mcp.core.tools.good":
            return good_mod
        return real_import_module(name, *args, **kwargs)

    monkeypatch.setattr(pkgutil, "iter_modules", fake_iter_modules)
    monkeypatch.setattr(importlib, "import_module", fake_import_module)

    with caplog.at_level("ERROR"):
        modules = discover_tool_modules()

    assert [m.__name__ for m in modules] == ["chorus_mcp.core.tools.good"]
    assert any("Failed importing tool module" in rec.message for rec in caplog.records)


def test_register_prompts_uses_names_and_descriptions():
    app = RecordingApp()

    names = register_prompts(app)

    assert names == [n for n, _, _ in app.prompts]
    assert set(names) == {
        "chorus_call_analysis",
        "chorus_deal_risk_assessment",
        "chorus_competitive_intelligence",
        "chorus_meeting_summary",
        "chorus_rep_performance_review",
        "chorus_customer_feedback_synthesis",
    }
    assert all(kwargs["description"] for _, _, kwargs in app.prompts)


@pytest.mark.asyncio
async def test_register_resources_hides_client_and_keeps_uri_params():
    app = RecordingApp()
    client = ChorusClient(base_url=BASE, api_key="mock-key")

    uris = register_resources(app, client)

    assert "chorus://users/{user_id}" in uris
    assert "chorus://conversations/{conversation_id}/summary" in uris
    assert len(uris) == 6

    by_uri = {uri: (fn, kwargs) for uri, fn, kwargs in app.resources}
    fn, kwargs = by_uri["chorus://teams/{team_id}"]
    assert list(inspect.signature(fn).parameters) == ["team_id"]
    assert kwargs["name"] == "chorus_team"
    assert kwargs["mime_type"] == "application/json"
