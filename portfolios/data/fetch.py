"""
HTTP text fetcher.

One GET per call with no retries. Failures come back as a ``FetchResult``
with ``success=False`` rather than an exception, so loaders can branch on
the result and always clear their loading state.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import aiohttp

from portfolios.core.logging_utils import get_module_logger

logger = get_module_logger("HttpFetcher")

DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "PortfoliOS"

# 100 ns ticks between 0001-01-01 and the Unix epoch.
_EPOCH_TICKS = 621_355_968_000_000_000


@dataclass
class FetchResult:
    success: bool
    text: str = ""
    error: Optional[str] = None
    status: Optional[int] = None


def utc_ticks() -> int:
    return time.time_ns() // 100 + _EPOCH_TICKS


def cache_busted(url: str, ticks: Optional[int] = None) -> str:
    """Append a ``t=<ticks>`` query parameter so proxies never serve a stale copy."""
    value = utc_ticks() if ticks is None else ticks
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}t={value}"


class HttpFetcher:
    """Thin wrapper over an ``aiohttp.ClientSession``.

    Pass a session to share it; otherwise one is created lazily and closed
    by :meth:`close` (or on leaving ``async with``).
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self._session = session
        self._owns_session = session is None
        self.timeout = timeout
        self.user_agent = user_agent

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"User-Agent": self.user_agent},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if not self._owns_session or self._session is None:
            return
        if not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch_text(
        self,
        url: str,
        *,
        cache_bust: bool = False,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchResult:
        final_url = cache_busted(url) if cache_bust else url
        request_headers: Dict[str, str] = dict(headers or {})
        session = self._get_session()

        try:
            async with session.get(
                final_url,
                headers=request_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                try:
                    text = await response.text()
                except UnicodeDecodeError as exc:
                    error = f"Undecodable response body ({exc.encoding}): {exc.reason}"
                    logger.warning("GET %s failed: %s", final_url, error)
                    return FetchResult(False, error=error, status=response.status)
                if not 200 <= response.status < 300:
                    error = f"HTTP {response.status} {response.reason or ''}".strip()
                    logger.warning("GET %s failed: %s", final_url, error)
                    return FetchResult(False, text, error, response.status)
                logger.debug("GET %s -> %d (%d chars)", final_url, response.status, len(text))
                return FetchResult(True, text, None, response.status)
        except asyncio.TimeoutError:
            logger.warning("GET %s timed out after %.1fs", final_url, self.timeout)
            return FetchResult(False, error=f"Request timed out after {self.timeout:g}s")
        except aiohttp.ClientError as exc:
            logger.warning("GET %s failed: %s", final_url, exc)
            return FetchResult(False, error=str(exc) or exc.__class__.__name__)


__all__ = ["FetchResult", "HttpFetcher", "cache_busted", "utc_ticks"]
