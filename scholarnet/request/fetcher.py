"""
page fetchers - return raw page text for a url.

the crawl core only needs fetch(url) -> text and treats every transport
failure as NetworkError. retries, if configured, happen here.
"""

import httpx
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ..core.config import FetcherConfig
from ..core.errors import NetworkError
from ..core.resilience import retry_with_backoff

logger = logging.getLogger("scholarnet.request")

# statuses the search engine uses to serve its anti-automation page;
# the body is handed back so blocked-page detection can see it
INTERSTITIAL_STATUSES = (429, 503)


class PageFetcher(ABC):
    """source of raw response text."""

    @abstractmethod
    def fetch(self, url: str) -> str:
        """return the response body for url, or raise NetworkError."""
        pass


class HttpFetcher(PageFetcher):
    """
    httpx-based fetcher with a browser-like user agent.
    """

    def __init__(self, config: Optional[FetcherConfig] = None):
        self.config = config or FetcherConfig()
        self._session = None  # lazy init
        self._call_count = 0
        self._fetch = retry_with_backoff(self.config.retry)(self._fetch_once)

    @property
    def session(self) -> httpx.Client:
        """lazy session initialization with proper cleanup."""
        if self._session is None or self._session.is_closed:
            self._session = httpx.Client(
                timeout=self.config.timeout,
                follow_redirects=self.config.follow_redirects,
                headers={"User-Agent": self.config.user_agent}
            )
        return self._session

    def close(self):
        """close the http session."""
        if self._session and not self._session.is_closed:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def fetch(self, url: str) -> str:
        if self.config.verbose:
            logger.info(f"[fetch] GET {url}")
        else:
            logger.debug(f"[fetch] GET {url}")
        return self._fetch(url)

    def _fetch_once(self, url: str) -> str:
        self._call_count += 1
        try:
            resp = self.session.get(url)
        except httpx.HTTPError as e:
            raise NetworkError(f"request failed: {e}", url=url) from e

        if resp.status_code < 400:
            return resp.text
        if resp.status_code in INTERSTITIAL_STATUSES:
            logger.warning(f"[fetch] {resp.status_code} for {url}, possibly blocked")
            return resp.text

        raise NetworkError(f"http status {resp.status_code}", url=url, status=resp.status_code)

    def stats(self) -> dict:
        return {"fetcher": "http", "api_calls": self._call_count}


def read_html_file(path: Union[str, Path]) -> str:
    """load a saved result page from disk."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()
