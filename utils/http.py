"""HTTP session utilities for the Trip Planner client.

Provides a SessionManager that lazily builds a pooled requests.Session with
JSON default headers.  Requests are never retried automatically: the
dashboard only re-issues a call when the user asks for it.
"""

from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter

DEFAULT_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class SessionManager:
    """Manages an HTTP session with connection pooling and no retries."""

    def __init__(self, pool_connections: int = 10, pool_maxsize: int = 20,
                 headers: Optional[Dict[str, str]] = None):
        """Initialize session manager.

        Args:
            pool_connections: Number of connection pools to cache
            pool_maxsize: Maximum number of connections per pool
            headers: Extra default headers merged over DEFAULT_HEADERS
        """
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the HTTP session.

        Returns:
            requests.Session object
        """
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(self.headers)

            adapter = HTTPAdapter(
                max_retries=0,
                pool_connections=self.pool_connections,
                pool_maxsize=self.pool_maxsize,
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)

        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
