"""HTTP transport shared by the providers.

Wraps a ``requests.Session`` and adds the two things the providers need on
top of a plain GET: routing a request through a cross-origin relay, and a
cache-busting ``_t`` query parameter so that no caching intermediary
serves a stale page.
"""

from __future__ import annotations

import time
from typing import Any, Callable
from urllib.parse import quote, urlencode

import requests

from pricecache.config import DEFAULT_RELAY_URL, DEFAULT_USER_AGENT
from pricecache.errors import PriceError, PriceErrorCode


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class HttpTransport:
    """Blocking HTTP client with relay and cache-buster support.

    Args:
        relay_url: Prefix the percent-encoded target URL is appended to
            when a request is relayed.
        timeout: Per-request timeout in seconds; ``None`` disables it.
        user_agent: User-Agent header for every request.
        session: Pre-built session (tests inject a mock here).
        stamp: Source of the cache-buster value.
    """

    def __init__(
        self,
        relay_url: str = DEFAULT_RELAY_URL,
        timeout: float | None = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
        stamp: Callable[[], int] = _epoch_millis,
    ) -> None:
        self.relay_url = relay_url
        self.timeout = timeout
        self._stamp = stamp
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    # ------------------------------------------------------------------ urls

    def build_url(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        relay: bool = False,
        bust_cache: bool = False,
    ) -> str:
        query = dict(params or {})
        if bust_cache:
            query["_t"] = self._stamp()
        if query:
            sep = "&" if "?" in url else "?"
            url = f"{url}{sep}{urlencode(query)}"
        if relay:
            url = f"{self.relay_url}{quote(url, safe='')}"
        return url

    # -------------------------------------------------------------- requests

    def get_text(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        relay: bool = False,
        bust_cache: bool = False,
    ) -> str:
        resp = self._get(self.build_url(url, params, relay=relay, bust_cache=bust_cache))
        return resp.text

    def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        relay: bool = False,
        bust_cache: bool = False,
    ) -> Any:
        resp = self._get(self.build_url(url, params, relay=relay, bust_cache=bust_cache))
        try:
            return resp.json()
        except ValueError as exc:
            raise PriceError(
                f"Response from {url} is not valid JSON",
                code=PriceErrorCode.EXTRACTION_FAILED,
            ) from exc

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------ internals

    def _get(self, url: str) -> requests.Response:
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as exc:
            raise PriceError(
                f"Request timed out: {exc}",
                code=PriceErrorCode.TIMEOUT,
                retryable=True,
            ) from exc
        except requests.RequestException as exc:
            raise PriceError(
                f"Request failed: {exc}",
                code=PriceErrorCode.TRANSPORT_ERROR,
                retryable=True,
            ) from exc
        self._check_response(resp)
        return resp

    @staticmethod
    def _check_response(resp: requests.Response) -> None:
        if resp.status_code == 429:
            raise PriceError(
                "Provider rate limited",
                code=PriceErrorCode.RATE_LIMITED,
                retryable=True,
            )
        if resp.status_code == 404:
            raise PriceError(
                "Resource not found",
                code=PriceErrorCode.NOT_FOUND,
            )
        if not resp.ok:
            raise PriceError(
                f"HTTP {resp.status_code}",
                code=PriceErrorCode.TRANSPORT_ERROR,
                retryable=resp.status_code >= 500,
            )
