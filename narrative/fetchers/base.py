"""Shared plumbing for HTTP upstream adapters."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

import httpx
from pydantic import ValidationError

from narrative.cache import Cache, NullCache
from narrative.errors import MalformedPayload, UpstreamUnavailable, classify_http_error
from narrative.fetchers.results import Empty, FetchResult, MalformedResponse, Ok

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = "RoboticsNarrativeIndex/1.0"


def _is_empty(payload: Any) -> bool:
    return payload is None or (isinstance(payload, (list, tuple)) and not payload)


class HttpFetcher:
    """Base class for adapters talking to one upstream over httpx.

    Subclasses call `_request_json` for raw calls and wrap each public fetch
    in `_fetch`, which consults the injected cache and turns failures into
    tagged results.
    """

    source = "upstream"

    def __init__(
        self,
        *,
        base_url: str,
        cache: Cache | None = None,
        cache_ttl: float = 1800,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self.cache: Cache = cache if cache is not None else NullCache()
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/json", **(headers or {})}
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Perform a request and decode its JSON body.

        Raises:
            UpstreamUnavailable: HTTP error status, timeout or network failure
            MalformedPayload: Body is not valid JSON
        """
        client = await self._get_client()
        try:
            resp = await client.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise classify_http_error(
                self.source,
                e.response.status_code,
                f"{method} {url} failed: {e.response.text[:200]}",
            ) from e
        except httpx.TimeoutException as e:
            raise UpstreamUnavailable(self.source, f"{method} {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(self.source, f"{method} {url} network error: {e}") from e

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedPayload(self.source, f"{method} {url} returned invalid JSON") from e

    async def _fetch(self, cache_key: str, producer: Callable[[], Awaitable[T]]) -> FetchResult[T]:
        cached = self.cache.get(cache_key)
        if cached is not None:
            return Ok(cached)

        try:
            payload = await producer()
        except (MalformedPayload, ValidationError) as exc:
            logger.warning("%s returned a malformed response: %s", self.source, exc)
            return MalformedResponse(str(exc))
        except UpstreamUnavailable as exc:
            logger.warning("%s unavailable: %s", self.source, exc.reason)
            return Empty(exc.reason)

        if _is_empty(payload):
            return Empty(f"{self.source}: no data")
        self.cache.set(cache_key, payload, self.cache_ttl)
        return Ok(payload)

    async def close(self) -> None:
        """Close any open HTTP connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
