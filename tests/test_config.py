import pytest
from chorus_mcp.core.client import DEFAULT_BASE_URL
from chorus_mcp.core.config import (
    create_client_from_env,
    load_env_config,
    load_log_level,
)


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    # Prevent load_dotenv from repopulating values from a local .env
    monkeypatch.setattr("chorus_mcp.core.config.load_dotenv", lambda *a, **k: None)


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.delenv("CHORUS_API_KEY", raising=False)

    with pytest.raises(ValueError) as exc:
        create_client_from_env()

    assert "Missing CHORUS_API_KEY" in str(exc.value)


def test_base_url_defaults_to_public_api(monkeypatch):
    monkeypatch.delenv("CHORUS_BASE_URL", raising=False)
    monkeypatch.setenv("CHORUS_API_KEY", " token ")

    assert load_env_config() == (DEFAULT_BASE_URL, "token")


@pytest.mark.asyncio
async def test_client_built_from_env(monkeypatch):
    monkeypatch.setenv("CHORUS_BASE_URL", "https://eu.chorus.test/api/v1/")
    monkeypatch.setenv("CHORUS_API_KEY", "token")

    client = create_client_from_env(timeout_seconds=5)
    try:
        assert client.base_url == "https://eu.chorus.test/api/v1"
        assert client.timeout_seconds == 5
    finally:
        await client.aclose()


def test_log_level_from_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert load_log_level() == "INFO"
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert load_log_level() == "debug"
