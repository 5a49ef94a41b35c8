"""HTTP utilities for fetching the seed feed.

Provides:
- SessionManager: a pooled ``requests.Session`` with a context-manager API
- fetch_json: a single GET that returns decoded JSON or raises

Requests are never retried; a failed fetch is reported to the caller as-is.
"""

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class SessionManager:
    """Manages an HTTP session with connection pooling."""

    def __init__(self, pool_connections: int = 4, pool_maxsize: int = 8,
                 user_agent: Optional[str] = None):
        """Initialize session manager.

        Args:
            pool_connections: Number of connection pools to cache
            pool_maxsize: Maximum number of connections per pool
            user_agent: Optional User-Agent header for every request
        """
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize
        self.user_agent = user_agent
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the HTTP session.

        Returns:
            requests.Session object
        """
        if self._session is None:
            self._session = requests.Session()
            adapter = HTTPAdapter(
                max_retries=0,
                pool_connections=self.pool_connections,
                pool_maxsize=self.pool_maxsize,
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
            if self.user_agent:
                self._session.headers["User-Agent"] = self.user_agent
        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def fetch_json(session: requests.Session, url: str,
               timeout: float = DEFAULT_TIMEOUT) -> Any:
    """GET *url* and return the decoded JSON body.

    Raises:
        requests.RequestException: On connection errors, timeouts and
            non-2xx responses.
        ValueError: If the body is not valid JSON.
    """
    logger.info("Fetching %s", url)
    response = session.get(url, timeout=timeout)
    response.raise_for_status()
    return response.json()
