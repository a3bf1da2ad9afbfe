"""
CLI entry point for prices-scraper.

Usage:
    python -m prices_scraper
    python -m prices_scraper --categories currencies,gold
    python -m prices_scraper --browser --dry-run
"""

import argparse
import asyncio
import logging
import sys

import structlog

from .config.loader import ConfigError, load_config
from .core.browser import BrowserLaunchError
from .core.models import Category

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
        timestamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_categories(value: str) -> list[Category]:
    """Parse a comma-separated category list."""
    try:
        return [Category.parse(v) for v in value.split(",") if v.strip()]
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Currency, gold and crypto price scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape every category
  python -m prices_scraper

  # Scrape specific categories
  python -m prices_scraper --categories currencies,gold

  # Render pages in a headless browser
  python -m prices_scraper --browser

  # Crypto quotes from the public price API
  python -m prices_scraper --categories crypto --crypto-api

  # Extract and log without writing files
  python -m prices_scraper --dry-run
        """,
    )

    parser.add_argument(
        "--categories",
        type=parse_categories,
        help="Comma-separated categories: currencies,gold,crypto (default: all)",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to settings YAML file",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        help="Output directory for JSON files (overrides config)",
    )

    parser.add_argument(
        "--browser",
        action="store_true",
        help="Fetch pages through a headless browser",
    )

    parser.add_argument(
        "--crypto-api",
        action="store_true",
        help="Fetch crypto prices from the public price API",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Extract only - don't write files",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def build_config(args):
    """Load settings and apply CLI overrides."""
    config = load_config(args.config)

    if args.data_dir:
        config.data_dir = args.data_dir
    if args.browser:
        config.browser.enabled = True
    if args.crypto_api:
        config.crypto_api.enabled = True

    return config


async def main_async(args):
    """Async main function."""
    from .orchestrator import PriceScraper

    logger = structlog.get_logger(__name__)

    config = build_config(args)

    scraper = PriceScraper(config)
    outcomes = await scraper.run(categories=args.categories, dry_run=args.dry_run)

    for outcome in outcomes:
        if outcome.ok:
            logger.info(
                "category_done",
                category=outcome.category.value,
                records=outcome.records,
                strategy=outcome.result.strategy,
                path=str(outcome.path) if outcome.path else None,
            )
        else:
            logger.warning(
                "category_skipped",
                category=outcome.category.value,
                error=outcome.error,
            )

    return outcomes


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"prices-scraper {__version__}")
        sys.exit(0)

    # Setup logging
    setup_logging(args.log_level, args.json_logs)

    # Partial category failures keep the exit status at 0
    try:
        asyncio.run(main_async(args))
        sys.exit(0)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except (BrowserLaunchError, ConfigError) as e:
        logger = structlog.get_logger(__name__)
        logger.error("fatal_error", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
