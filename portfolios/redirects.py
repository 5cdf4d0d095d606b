"""Outbound links: plain URLs and the resume, whose URL is itself fetched."""

from __future__ import annotations

import webbrowser
from typing import Callable, Optional

from portfolios.core.logging_utils import get_module_logger
from portfolios.data.fetch import HttpFetcher
from portfolios.terminal.commands import RESUME_URL_ENDPOINT


class Redirects:

    def __init__(
        self,
        fetcher: HttpFetcher,
        opener: Callable[[str], object] = webbrowser.open,
        resume_endpoint: str = RESUME_URL_ENDPOINT,
    ):
        self.logger = get_module_logger("Redirects")
        self.fetcher = fetcher
        self.opener = opener
        self.resume_endpoint = resume_endpoint

    def open_url(self, url: str) -> None:
        self.logger.info("Opening URL: %s", url)
        self.opener(url)

    async def open_resume(self) -> Optional[str]:
        """Fetch the current resume link and open it; returns the URL opened."""
        result = await self.fetcher.fetch_text(self.resume_endpoint, cache_bust=True)
        if not result.success:
            self.logger.error("Failed to fetch resume URL: %s", result.error)
            return None

        url = result.text.strip()
        if not url:
            self.logger.error("Resume URL is empty")
            return None

        self.open_url(url)
        return url


__all__ = ["Redirects"]
