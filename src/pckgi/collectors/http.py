"""
HTTP client with per-attempt timeout and bounded exponential-backoff retry.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, NamedTuple, Optional

import aiohttp

from pckgi.collectors.base import DEFAULT_USER_AGENT, Collector
from pckgi.core.exceptions import FetchError, FetchTimeoutError, HttpStatusError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0  # seconds
DEFAULT_RETRIES = 2
BACKOFF_BASE = 0.1  # seconds


class FetchResponse(NamedTuple):
    """Parsed JSON body and HTTP status of a successful request."""

    data: Any
    status: int


class HttpClient(Collector):
    """Async JSON client for the registry APIs.

    Each GET is attempted up to ``retries + 1`` times. Non-2xx responses,
    network errors and undecodable bodies are retried after
    ``2**attempt * 0.1`` seconds; a timed-out attempt is not retried.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        user_agent: str = DEFAULT_USER_AGENT,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the HTTP client.

        Args:
            session: Optional aiohttp session.
            timeout: Timeout in seconds for each attempt.
            retries: Retries after the first attempt.
            user_agent: Value sent in the User-Agent header.
            sleep: Coroutine function used to wait between attempts.
        """
        super().__init__(session, user_agent=user_agent)
        self.timeout = timeout
        self.retries = retries
        self._sleep = sleep

    @staticmethod
    def backoff_delay(attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt`` (0-based)."""
        return (2 ** attempt) * BACKOFF_BASE

    async def get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> FetchResponse:
        """GET a JSON resource.

        Args:
            url: Absolute URL.
            params: Optional query parameters.
            headers: Extra headers merged over the defaults.

        Returns:
            FetchResponse with the decoded body and status code.

        Raises:
            FetchTimeoutError: If an attempt times out.
            HttpStatusError: If the last attempt got a non-2xx status.
            FetchError: If the last attempt failed otherwise.
        """
        request_headers = self._build_headers(headers)
        last_error: Optional[FetchError] = None

        for attempt in range(self.retries + 1):
            try:
                return await self._attempt(url, params, request_headers)
            except FetchTimeoutError:
                logger.debug("GET %s timed out after %ss, giving up", url, self.timeout)
                raise
            except FetchError as e:
                last_error = e
                if attempt == self.retries:
                    break
                delay = self.backoff_delay(attempt)
                logger.debug(
                    "GET %s failed on attempt %d/%d (%s), retrying in %.1fs",
                    url,
                    attempt + 1,
                    self.retries + 1,
                    e,
                    delay,
                )
                await self._sleep(delay)

        logger.debug("GET %s failed after %d attempts", url, self.retries + 1)
        assert last_error is not None
        raise last_error

    async def _attempt(
        self,
        url: str,
        params: Optional[dict[str, Any]],
        headers: dict[str, str],
    ) -> FetchResponse:
        """Issue a single request under its own timeout."""
        try:
            async with self.session.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise HttpStatusError(url, resp.status, resp.reason or "")
                data = await resp.json(content_type=None)
                return FetchResponse(data=data, status=resp.status)

        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(url, self.timeout) from e
        except aiohttp.ClientError as e:
            raise FetchError(url, details=str(e) or type(e).__name__) from e
        except ValueError as e:
            raise FetchError(url, details=f"invalid JSON body: {e}") from e
