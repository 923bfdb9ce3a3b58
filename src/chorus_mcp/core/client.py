from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .observability import log_op_call

DEFAULT_BASE_URL = "https://chorus.ai/api/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0


class ChorusClientError(Exception):
    """Base error for client failures."""


class ChorusHTTPError(ChorusClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_json: Optional[Dict[str, Any]] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        self.response_json = response_json
        self.response_text = response_text


class ChorusTimeoutError(ChorusClientError):
    """The upstream did not answer within the configured timeout."""


class ChorusConnectionError(ChorusClientError):
    """The upstream could not be reached at all."""


class ChorusParseError(ChorusClientError):
    pass


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 0  # the Chorus tools never retry by default
    backoff_base_seconds: float = 0.3  # 0.3, 0.6, 1.2...
    retry_statuses: frozenset[int] = frozenset({502, 503, 504})


class ChorusClient:
    """
    Shared HTTP client for the Chorus REST API.
    - Handles auth, base URL, timeouts and optional retries
    - Returns the raw parsed JSON body; envelope handling lives in core.envelope
    - No business logic; tools own domain decisions
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").rstrip("/")
        api_key = (api_key or "").strip()

        if not base_url:
            raise ValueError("base_url must be provided.")
        if not api_key:
            raise ValueError(
                "api_key must be provided. Generate an API token from your "
                "Chorus Personal Settings page."
            )

        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.retry = retry if retry is not None else RetryConfig()
        self.log = logger or logging.getLogger("chorus_mcp.client")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=self.base_url + "/",
            headers={
                # Chorus expects the bare token, no scheme prefix
                "Authorization": api_key,
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "ChorusClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        tool: Optional[str] = None,
    ) -> Any:
        """
        Perform one call against ``{base_url}/{endpoint}``.
        - Raises ChorusHTTPError on non-2xx HTTP responses
        - Raises ChorusTimeoutError / ChorusConnectionError on transport failures
        - Raises ChorusParseError if the response isn't valid JSON
        - Returns the parsed JSON value ({} for an empty body)
        """
        method = method.upper()
        endpoint = endpoint.lstrip("/")
        start = time.perf_counter()
        attempt = 0

        while True:
            try:
                resp = await self.http.request(
                    method, endpoint, params=params, json=json
                )
            except httpx.TimeoutException as exc:
                if await self._backoff(attempt):
                    attempt += 1
                    continue
                log_op_call(
                    tool=tool,
                    method=method,
                    endpoint=endpoint,
                    started=start,
                    attempt=attempt,
                    error=exc,
                )
                raise ChorusTimeoutError(
                    f"Timed out calling {method} {endpoint} "
                    f"after {self.timeout_seconds}s: {exc}"
                ) from exc
            except httpx.ConnectError as exc:
                if await self._backoff(attempt):
                    attempt += 1
                    continue
                log_op_call(
                    tool=tool,
                    method=method,
                    endpoint=endpoint,
                    started=start,
                    attempt=attempt,
                    error=exc,
                )
                raise ChorusConnectionError(
                    f"Could not connect calling {method} {endpoint}: {exc}"
                ) from exc
            except httpx.HTTPError as exc:
                # Other httpx exceptions (rare) - do not blindly retry
                log_op_call(
                    tool=tool,
                    method=method,
                    endpoint=endpoint,
                    started=start,
                    attempt=attempt,
                    error=exc,
                )
                raise ChorusClientError(
                    f"HTTPX error calling {method} {endpoint}: {exc}"
                ) from exc

            if resp.status_code in self.retry.retry_statuses and await self._backoff(
                attempt
            ):
                attempt += 1
                continue

            log_op_call(
                tool=tool,
                method=method,
                endpoint=endpoint,
                started=start,
                attempt=attempt,
                status=resp.status_code,
            )
            if resp.status_code < 200 or resp.status_code >= 300:
                raise self._to_http_error(resp, method=method)

            return self._safe_json(resp)

    async def _backoff(self, attempt: int) -> bool:
        if attempt >= self.retry.max_retries:
            return False
        delay = self.retry.backoff_base_seconds * (2**attempt)
        self.log.debug("Retrying Chorus call (attempt %s) in %.2fs", attempt + 1, delay)
        await asyncio.sleep(delay)
        return True

    def _safe_json(self, resp: httpx.Response) -> Any:
        # Handle empty responses (204 No Content, DELETE, etc.)
        if not resp.content:
            return {}

        try:
            return resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise ChorusParseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

    def _to_http_error(self, resp: httpx.Response, *, method: str) -> ChorusHTTPError:
        url = str(resp.request.url)
        # Try JSON first; fall back to text snippet.
        response_json: Optional[Dict[str, Any]] = None
        response_text: Optional[str] = None
        message = ""

        try:
            parsed = resp.json()
            if isinstance(parsed, dict):
                response_json = parsed
                message = str(parsed.get("message") or parsed.get("error") or "")
        except ValueError:
            response_text = (resp.text or "")[:500]

        return ChorusHTTPError(
            status_code=resp.status_code,
            method=method,
            url=url,
            message=message,
            response_json=response_json,
            response_text=response_text,
        )

    async def get(
        self,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        tool: Optional[str] = None,
    ) -> Any:
        return await self.request("GET", endpoint, params=params, tool=tool)

    async def post(
        self, endpoint: str, *, json: Any, tool: Optional[str] = None
    ) -> Any:
        return await self.request("POST", endpoint, json=json, tool=tool)

    async def put(self, endpoint: str, *, json: Any, tool: Optional[str] = None) -> Any:
        return await self.request("PUT", endpoint, json=json, tool=tool)

    async def delete(self, endpoint: str, *, tool: Optional[str] = None) -> Any:
        return await self.request("DELETE", endpoint, tool=tool)
