from __future__ import annotations

import os
from typing import Tuple

from dotenv import load_dotenv

from .client import DEFAULT_BASE_URL, ChorusClient


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str]:
    """Load Chorus base URL and API key from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    base_url = os.getenv("CHORUS_BASE_URL", "").strip() or DEFAULT_BASE_URL
    api_key = os.getenv("CHORUS_API_KEY", "").strip()
    return base_url, api_key


def load_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"


def create_client_from_env(**kwargs) -> ChorusClient:
    """Create a ChorusClient from environment variables."""
    base_url, api_key = load_env_config()
    if not api_key:
        raise ValueError(
            "Missing CHORUS_API_KEY in environment. "
            "Generate an API token from your Chorus Personal Settings page."
        )
    return ChorusClient(base_url=base_url, api_key=api_key, **kwargs)


__all__ = ["load_env_config", "load_log_level", "create_client_from_env"]
