"""
Abstract base class for registry collectors.

Handles aiohttp session ownership and the headers every request shares.
"""

from abc import ABC, abstractmethod
from typing import Any

import aiohttp

from pckgi import __version__

DEFAULT_USER_AGENT = f"pckgi/{__version__}"


class Collector(ABC):
    """Abstract base class for registry collectors.

    A collector either borrows a session from the caller or lazily creates
    its own, and only closes the session it created.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize the collector.

        Args:
            session: Optional aiohttp session. If not provided, one will
                     be created when needed.
            user_agent: Value sent in the User-Agent header.
        """
        self._session = session
        self._owns_session = session is None
        self.user_agent = user_agent

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "Collector":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    @abstractmethod
    async def get(self, url: str, **kwargs: Any) -> Any:
        """Fetch a resource.

        Raises:
            FetchError: If the fetch fails.
        """

    def _build_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Build request headers, letting ``extra`` override the defaults."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers
