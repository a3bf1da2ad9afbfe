"""
Headless browser fetcher for JavaScript-rendered pages.

One Chromium instance is launched per run and shared sequentially by all
page visits. It is released in ``__aexit__`` on every exit path.
"""

import asyncio
from http.cookiejar import Cookie
from typing import Callable, Iterable, Optional

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .http_client import DEFAULT_HEADERS, FetchError
from .retry import SleepFn, build_retrying

logger = structlog.get_logger(__name__)


LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]


class BrowserLaunchError(RuntimeError):
    """The headless browser could not be started."""


class PageStatusError(Exception):
    """Navigation finished with a non-success HTTP status."""

    def __init__(self, url: str, status: int):
        self.url = url
        self.status = status
        super().__init__(f"HTTP {status} for {url}")


RETRYABLE_ERRORS = (PlaywrightError, asyncio.TimeoutError, PageStatusError)


class BrowserFetcher:
    """
    Fetch rendered markup through a headless Chromium.

    Usage:
        async with BrowserFetcher(settle_delay=3) as browser:
            html = await browser.get_text("https://example.com/gold")
    """

    def __init__(
        self,
        timeout: float = 60.0,
        settle_delay: float = 3.0,
        wait_until: str = "networkidle",
        max_attempts: int = 3,
        initial_backoff: float = 2.0,
        headers: Optional[dict] = None,
        locale: str = "ar-SY",
        playwright_factory: Callable = async_playwright,
        sleep: Callable = asyncio.sleep,
    ):
        """
        Initialize browser fetcher.

        Args:
            timeout: Navigation timeout in seconds
            settle_delay: Extra wait after network idle, in seconds
            wait_until: Playwright load state to wait for
            max_attempts: Maximum navigation attempts per URL
            initial_backoff: Wait after the first failure, doubled each retry
            headers: Extra headers merged over DEFAULT_HEADERS
            locale: Browser context locale
            playwright_factory: Returns a Playwright context manager (tests)
            sleep: Awaitable used for settle and backoff waits
        """
        self.timeout = timeout
        self.settle_delay = settle_delay
        self.wait_until = wait_until
        self.max_attempts = max_attempts
        self.initial_backoff = initial_backoff
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self.locale = locale

        self._playwright_factory = playwright_factory
        self._sleep: SleepFn = sleep
        self._manager = None
        self._playwright = None
        self._browser = None
        self._context = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "BrowserFetcher":
        """Launch the browser; failure here is fatal for the run."""
        self._manager = self._playwright_factory()
        try:
            self._playwright = await self._manager.start()
            self._browser = await self._playwright.chromium.launch(
                headless=True,
                args=LAUNCH_ARGS,
            )
            user_agent = self.headers.get("User-Agent")
            extra_headers = {k: v for k, v in self.headers.items() if k != "User-Agent"}
            self._context = await self._browser.new_context(
                user_agent=user_agent,
                locale=self.locale,
                extra_http_headers=extra_headers,
            )
        except Exception as e:
            logger.error("browser_launch_failed", error=str(e))
            await self._shutdown()
            raise BrowserLaunchError(f"Could not launch headless browser: {e}") from e

        logger.info("browser_launched")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the browser exactly once."""
        await self._shutdown()

    async def _shutdown(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        self._context = None

        if browser is not None:
            try:
                await browser.close()
                logger.info("browser_closed")
            except PlaywrightError as e:
                logger.warning("browser_close_failed", error=str(e))
        if playwright is not None:
            await playwright.stop()

    async def add_cookies(self, cookies: Iterable[Cookie]) -> int:
        """
        Copy cookies (e.g. a primed httpx jar) into the browser context.

        Args:
            cookies: http.cookiejar cookies, such as ``httpx.Cookies.jar``

        Returns:
            Number of cookies added
        """
        if self._context is None:
            raise RuntimeError("Browser not launched. Use 'async with' context.")

        entries = [
            {
                "name": cookie.name,
                "value": cookie.value or "",
                "domain": cookie.domain,
                "path": cookie.path or "/",
                "secure": bool(cookie.secure),
            }
            for cookie in cookies
        ]
        if entries:
            await self._context.add_cookies(entries)
        logger.debug("browser_cookies_added", count=len(entries))
        return len(entries)

    async def _render(self, url: str) -> str:
        """Single navigation attempt returning rendered markup."""
        page = await self._context.new_page()
        try:
            response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout * 1000)
            # None for same-document navigations
            if response is not None and not response.ok:
                raise PageStatusError(url, response.status)
            await self._sleep(self.settle_delay)
            return await page.content()
        finally:
            await page.close()

    async def get_text(self, url: str) -> str:
        """
        Navigate to URL and return the rendered markup.

        Page visits are serialized: the browser is shared by every
        category of the run.

        Raises:
            FetchError: When every attempt failed
        """
        if self._context is None:
            raise RuntimeError("Browser not launched. Use 'async with' context.")

        retrying = build_retrying(
            max_attempts=self.max_attempts,
            initial_backoff=self.initial_backoff,
            retry_on=RETRYABLE_ERRORS,
            sleep=self._sleep,
        )

        attempts = 0
        async with self._lock:
            logger.debug("browser_get", url=url)
            try:
                async for attempt in retrying:
                    with attempt:
                        attempts += 1
                        html = await self._render(url)
            except RETRYABLE_ERRORS as e:
                logger.error("fetch_failed", url=url, attempts=attempts, error=str(e))
                raise FetchError(url, attempts, str(e)) from e

        return html
