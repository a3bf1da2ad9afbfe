"""
Orchestrator for the price scraping pipeline.

Coordinates:
- Session cookie priming
- Fetching (plain HTTP or headless browser) per category
- Strategy fallback chains
- Assembly and persistence of one document per category

The three categories run concurrently and fail independently.
"""

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx
import structlog

from .assembler import assemble
from .config.loader import ScraperConfig
from .core.browser import BrowserFetcher
from .core.http_client import FetchSession, HttpClient
from .core.models import Category, FetchResult
from .sources.crypto_api import CryptoApiSource
from .storage import result_path, save_result
from .strategies.registry import build_chain

logger = structlog.get_logger(__name__)


@dataclass
class CategoryOutcome:
    """What happened to one category during a run."""

    category: Category
    result: Optional[FetchResult] = None
    error: Optional[str] = None
    path: Optional[Path] = None  # file written, if any

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def records(self) -> int:
        return len(self.result.records) if self.result else 0


class PriceScraper:
    """
    Orchestrator for one scraping run.

    Usage:
        scraper = PriceScraper(load_config())
        outcomes = await scraper.run()
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        playwright_factory: Optional[Callable] = None,
        sleep: Callable = asyncio.sleep,
    ):
        """
        Initialize scraper.

        Args:
            config: Run settings (defaults when not provided)
            transport: Optional httpx transport (tests)
            playwright_factory: Optional Playwright factory (tests)
            sleep: Awaitable used for backoff and settle waits
        """
        self.config = config or ScraperConfig()
        self._transport = transport
        self._playwright_factory = playwright_factory
        self._sleep = sleep

        self.http_client: Optional[HttpClient] = None
        self.browser: Optional[BrowserFetcher] = None

        # Statistics
        self.stats = {
            "categories_processed": 0,
            "categories_failed": 0,
            "records_extracted": 0,
            "files_written": 0,
        }

    async def run(
        self,
        categories: Optional[list[Category]] = None,
        dry_run: bool = False,
    ) -> list[CategoryOutcome]:
        """
        Run the pipeline.

        Per-category failures are logged and reported in the outcome;
        only resource acquisition failures (browser launch) propagate.

        Args:
            categories: Categories to process (None = all)
            dry_run: Extract without writing files

        Returns:
            One CategoryOutcome per category, in request order
        """
        categories = list(categories or Category)

        logger.info(
            "starting_scrape",
            categories=[c.value for c in categories],
            browser=self.config.browser.enabled,
            crypto_api=self.config.crypto_api.enabled,
            dry_run=dry_run,
        )

        needs_markup = any(not self._uses_api(c) for c in categories)

        async with AsyncExitStack() as stack:
            self.http_client = await stack.enter_async_context(self._make_http_client())

            if needs_markup and self.config.fetch.prime_cookies:
                await self.http_client.prime_session(self.config.home_url)

            if needs_markup and self.config.browser.enabled:
                self.browser = await stack.enter_async_context(self._make_browser())
                if self.http_client.session.primed:
                    await self.browser.add_cookies(self.http_client.session.cookies.jar)

            outcomes = await asyncio.gather(
                *(self._process_category(c, dry_run) for c in categories)
            )

        self.http_client = None
        self.browser = None

        logger.info("scrape_complete", **self.stats)
        return list(outcomes)

    def _make_http_client(self) -> HttpClient:
        fetch = self.config.fetch
        return HttpClient(
            timeout=fetch.timeout,
            max_attempts=fetch.max_attempts,
            initial_backoff=fetch.initial_backoff,
            headers=fetch.headers,
            session=FetchSession(),
            transport=self._transport,
            sleep=self._sleep,
        )

    def _make_browser(self) -> BrowserFetcher:
        settings = self.config.browser
        kwargs = {}
        if self._playwright_factory is not None:
            kwargs["playwright_factory"] = self._playwright_factory
        return BrowserFetcher(
            timeout=settings.timeout,
            settle_delay=settings.settle_delay,
            wait_until=settings.wait_until,
            max_attempts=self.config.fetch.max_attempts,
            initial_backoff=self.config.fetch.initial_backoff,
            headers=self.config.fetch.headers,
            sleep=self._sleep,
            **kwargs,
        )

    def _uses_api(self, category: Category) -> bool:
        return category is Category.CRYPTO and self.config.crypto_api.enabled

    async def _process_category(self, category: Category, dry_run: bool) -> CategoryOutcome:
        """Fetch, extract and persist one category; never raises."""
        outcome = CategoryOutcome(category=category)

        try:
            outcome.result = await self._fetch_category(category)
            if not dry_run:
                outcome.path = self._persist(outcome.result)
        except Exception as e:
            logger.error("category_failed", category=category.value, error=str(e))
            outcome.error = str(e)
            self.stats["categories_failed"] += 1
            return outcome

        self.stats["categories_processed"] += 1
        self.stats["records_extracted"] += outcome.records
        return outcome

    async def _fetch_category(self, category: Category) -> FetchResult:
        """
        Produce the FetchResult for one category.

        Raises:
            FetchError: When the page (or API) could not be fetched
        """
        if self._uses_api(category):
            settings = self.config.crypto_api
            source = CryptoApiSource(
                self.http_client,
                url=settings.url,
                coins=settings.coins or None,
                options=self.config.extraction,
            )
            records = await source.fetch()
            return assemble(category, records, settings.url, strategy=source.get_source_name())

        url = self.config.url_for(category)
        fetcher = self.browser or self.http_client

        logger.info("fetching_category", category=category.value, url=url)
        markup = await fetcher.get_text(url)

        chain = build_chain(category, self.config.extraction)
        chain_result = chain.run(markup)

        logger.info(
            "category_extracted",
            category=category.value,
            strategy=chain_result.strategy,
            records=len(chain_result.records),
        )
        return assemble(category, chain_result.records, url, strategy=chain_result.strategy)

    def _persist(self, result: FetchResult) -> Optional[Path]:
        """
        Write the result unless it would replace data with nothing.

        An empty result never overwrites an existing document; when no
        document exists yet, the empty one is written so consumers show
        "no data".
        """
        path = result_path(result.category, self.config.data_dir)

        if not result.records and path.exists():
            logger.warning(
                "keeping_existing_data",
                category=result.category.value,
                path=str(path),
            )
            return None

        written = save_result(result, self.config.data_dir)
        self.stats["files_written"] += 1
        return written


async def run_scraper(
    config: Optional[ScraperConfig] = None,
    categories: Optional[list[Category]] = None,
    dry_run: bool = False,
) -> list[CategoryOutcome]:
    """
    Convenience function to run the scraper.

    Args:
        config: Run settings
        categories: Categories to process (None = all)
        dry_run: Extract without writing files

    Returns:
        One CategoryOutcome per category
    """
    scraper = PriceScraper(config)
    return await scraper.run(categories=categories, dry_run=dry_run)
