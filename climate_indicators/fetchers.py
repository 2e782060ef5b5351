"""
HTTP Fetcher
============

Downloads the raw source files. One requests.Session is shared across
sources; any transport failure or non-success status becomes a
FetchError naming the URL.
"""

import logging
from typing import Optional

import requests

from .exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60
DEFAULT_USER_AGENT = "climate-indicators/0.2"


class HttpFetcher:
    """
    Fetch raw bytes for a URL.

    Usable as a context manager; the session is closed on exit.
    """

    def __init__(self,
                 timeout: float = DEFAULT_TIMEOUT,
                 user_agent: str = DEFAULT_USER_AGENT,
                 session: Optional[requests.Session] = None):
        """
        Initialize fetcher.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent with every request
            session: Existing session to reuse (a new one is created if None)
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def fetch(self, url: str) -> bytes:
        """
        GET a URL and return the response body.

        Raises:
            FetchError: On network errors or non-2xx responses
        """
        logger.info(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Fetch failed for {url}: {e}")
            raise FetchError(f"Could not download {url}: {e}") from e

        logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
