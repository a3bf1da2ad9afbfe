"""
Core layer - stable foundation for the price scraper.

Components:
- models: Category, CurrencyRate, GoldPrice, CryptoPrice, FetchResult
- http_client: Retrying HTTP client with an explicit cookie session
- browser: Headless-browser fetcher for script-rendered pages
- selectors: BeautifulSoup helpers shared by strategies
- normalizer: Number, carat and currency-code normalization
"""

from .models import (
    Category,
    CryptoPrice,
    CurrencyRate,
    FetchResult,
    GoldPrice,
    PriceRecord,
)
from .normalizer import (
    detect_currency_code,
    normalize_name,
    normalize_number,
    parse_carat,
    to_western_digits,
)
from .http_client import FetchError, FetchSession, HttpClient

__all__ = [
    "Category",
    "CryptoPrice",
    "CurrencyRate",
    "FetchResult",
    "GoldPrice",
    "PriceRecord",
    "detect_currency_code",
    "normalize_name",
    "normalize_number",
    "parse_carat",
    "to_western_digits",
    "FetchError",
    "FetchSession",
    "HttpClient",
]
