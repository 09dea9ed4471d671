"""Async client for the Firecrawl scrape endpoint.

Firecrawl renders a job posting into markdown and runs an LLM extraction
against a JSON schema in the same call.  ``maxAge`` (milliseconds) lets the
service answer from a cached capture younger than that age; ``0`` forces a
live fetch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from jobheist.core.config import settings

logger = logging.getLogger(__name__)


class FirecrawlError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FirecrawlClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout_s: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_backoff_s: float = 1.0,
    ):
        self._api_key = api_key
        self._base_url = (base_url or settings.firecrawl_base_url).rstrip("/")
        self._timeout_s = settings.firecrawl_timeout_s if timeout_s is None else timeout_s
        self._max_retries = settings.firecrawl_max_retries if max_retries is None else max_retries
        self._transport = transport
        self._retry_backoff_s = retry_backoff_s

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout_s,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
        )

    async def scrape(self, url: str, *, json_schema: dict[str, Any], max_age_ms: int) -> dict[str, Any]:
        """Return the ``data`` object of a scrape response (``markdown``, ``json``, ``metadata`` ...)."""
        body = {
            "url": url,
            "formats": ["markdown", {"type": "json", "schema": json_schema}],
            "maxAge": max_age_ms,
            "onlyMainContent": True,
        }
        attempts = max(1, self._max_retries + 1)
        last_error: Exception | None = None
        async with self._client() as client:
            for attempt in range(attempts):
                try:
                    response = await client.post("/v2/scrape", json=body)
                    response.raise_for_status()
                    payload = response.json()
                    if not isinstance(payload, dict) or payload.get("success") is False:
                        message = payload.get("error") if isinstance(payload, dict) else None
                        raise FirecrawlError(f"Firecrawl scrape failed: {message or 'unexpected response'}")
                    data = payload.get("data")
                    return data if isinstance(data, dict) else {}
                except httpx.HTTPStatusError as exc:
                    status = exc.response.status_code
                    last_error = FirecrawlError(f"Firecrawl returned HTTP {status} for {url}", status_code=status)
                    logger.warning("firecrawl_http_error status=%s url=%s attempt=%s", status, url, attempt + 1)
                    if 400 <= status < 500 and status != 429:
                        break
                except (httpx.TimeoutException, httpx.TransportError) as exc:
                    last_error = FirecrawlError(f"Firecrawl request failed for {url}: {exc}")
                    logger.warning("firecrawl_request_failed url=%s attempt=%s: %s", url, attempt + 1, exc)
                except ValueError as exc:
                    raise FirecrawlError(f"Firecrawl returned invalid JSON for {url}") from exc
                if attempt + 1 < attempts:
                    await asyncio.sleep(self._retry_backoff_s * (attempt + 1))

        raise last_error or FirecrawlError(f"Firecrawl scrape failed for {url}")
