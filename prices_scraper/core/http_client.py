"""
Async HTTP client with retries and explicit session cookies.

Built on httpx with:
- Browser-like default headers (user agent, accept-language, referer)
- Exponential backoff retry on transport errors and non-success status
- Optional cookie priming against the site's home page
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
import structlog

from .retry import SleepFn, build_retrying

logger = structlog.get_logger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ar,en-US;q=0.9,en;q=0.8",
}

# Worth another attempt: network/timeout failures and 4xx/5xx responses
RETRYABLE_ERRORS = (httpx.TransportError, httpx.HTTPStatusError)


class FetchError(Exception):
    """All attempts to fetch a URL failed."""

    def __init__(self, url: str, attempts: int, reason: str = ""):
        self.url = url
        self.attempts = attempts
        self.reason = reason
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s): {reason}")


@dataclass
class FetchSession:
    """
    Cookies captured for one run.

    Created by the caller and handed to the client, so its lifetime is
    scoped to a single scraping run. While the client is open the jar is
    the client's own, so cookies are only sent back to the domain that
    set them.
    """
    cookies: httpx.Cookies = field(default_factory=httpx.Cookies)
    primed: bool = False


class HttpClient:
    """
    Async HTTP client with retries and session cookies.

    Usage:
        async with HttpClient(session=FetchSession()) as client:
            await client.prime_session("https://example.com/")
            html = await client.get_text("https://example.com/prices")
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_attempts: int = 3,
        initial_backoff: float = 2.0,
        headers: Optional[dict] = None,
        session: Optional[FetchSession] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Per-attempt timeout in seconds
            max_attempts: Maximum attempts per URL
            initial_backoff: Wait after the first failure, doubled each retry
            headers: Extra headers merged over DEFAULT_HEADERS
            session: Cookie session shared across requests of one run
            transport: Optional httpx transport (tests)
            sleep: Awaitable used for backoff waits
        """
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.initial_backoff = initial_backoff
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self.session = session or FetchSession()

        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers=self.headers,
            cookies=self.session.cookies,
            transport=self._transport,
        )
        # Share one jar: responses update the session directly
        self.session.cookies = self._client.cookies
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def prime_session(self, url: str) -> bool:
        """
        Request the home page once to collect session cookies.

        Failure is not fatal: later requests simply go out without cookies.

        Args:
            url: Home page URL

        Returns:
            True if the request succeeded
        """
        try:
            await self._do_request(url)
        except httpx.HTTPError as e:
            logger.warning("session_priming_failed", url=url, error=str(e))
            return False

        self.session.primed = True
        logger.info("session_primed", url=url, cookies=len(self.session.cookies))
        return True

    async def _do_request(self, url: str, **kwargs) -> httpx.Response:
        """Execute a single GET attempt."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        response = await self._client.get(url, **kwargs)
        response.raise_for_status()

        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        GET request with bounded retries.

        Empty bodies are returned as-is; only transport errors and
        non-success status codes are retried.

        Args:
            url: URL to fetch
            **kwargs: Additional httpx arguments

        Returns:
            httpx.Response object

        Raises:
            FetchError: When every attempt failed
        """
        retrying = build_retrying(
            max_attempts=self.max_attempts,
            initial_backoff=self.initial_backoff,
            retry_on=RETRYABLE_ERRORS,
            sleep=self._sleep,
        )

        logger.debug("http_get", url=url)

        attempts = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempts += 1
                    response = await self._do_request(url, **dict(kwargs))
        except RETRYABLE_ERRORS as e:
            logger.error("fetch_failed", url=url, attempts=attempts, error=str(e))
            raise FetchError(url, attempts, str(e)) from e

        return response

    async def get_text(self, url: str, **kwargs) -> str:
        """GET request returning text content."""
        response = await self.get(url, **kwargs)
        return response.text

    async def get_json(self, url: str, **kwargs) -> Any:
        """GET request returning decoded JSON."""
        response = await self.get(url, **kwargs)
        return response.json()
