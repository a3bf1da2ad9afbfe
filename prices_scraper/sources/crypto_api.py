"""
Public crypto price API source.

Fetches USD quotes from CoinGecko's ``simple/price`` endpoint and maps
them straight into CryptoPrice records, bypassing the extraction
strategies for the crypto category.
"""

from typing import Optional

import structlog

from prices_scraper.core.http_client import HttpClient
from prices_scraper.core.models import CryptoPrice
from prices_scraper.strategies.base import ExtractionOptions
from prices_scraper.strategies.builders import build_crypto

logger = structlog.get_logger(__name__)


DEFAULT_API_URL = "https://api.coingecko.com/api/v3/simple/price"

# CoinGecko id -> (display name, symbol)
DEFAULT_COINS = {
    "bitcoin": ("Bitcoin", "BTC"),
    "ethereum": ("Ethereum", "ETH"),
    "tether": ("Tether", "USDT"),
    "binancecoin": ("BNB", "BNB"),
    "ripple": ("XRP", "XRP"),
    "cardano": ("Cardano", "ADA"),
    "solana": ("Solana", "SOL"),
    "dogecoin": ("Dogecoin", "DOGE"),
}


def parse_simple_price(
    payload: dict,
    coins: dict,
    options: Optional[ExtractionOptions] = None,
) -> list[CryptoPrice]:
    """
    Map a ``simple/price`` response into records.

    Records keep the order of ``coins``; coins missing from the payload
    or without a positive USD quote are skipped.

    Args:
        payload: Decoded JSON, e.g. {"bitcoin": {"usd": 65000}}
        coins: CoinGecko id -> (name, symbol)
        options: Validation options (price_syp policy)

    Returns:
        List of CryptoPrice
    """
    options = options or ExtractionOptions()
    records = []

    if not isinstance(payload, dict):
        return records

    for coin_id, (name, symbol) in coins.items():
        quote = payload.get(coin_id)
        if not isinstance(quote, dict):
            continue
        record = build_crypto(name, symbol, quote.get("usd"), options)
        if record is not None:
            records.append(record)

    return records


class CryptoApiSource:
    """
    Crypto prices from a JSON price API.

    Usage:
        async with HttpClient() as client:
            source = CryptoApiSource(client)
            records = await source.fetch()
    """

    def __init__(
        self,
        http_client: HttpClient,
        url: str = DEFAULT_API_URL,
        coins: Optional[dict] = None,
        options: Optional[ExtractionOptions] = None,
    ):
        self.http_client = http_client
        self.url = url
        self.coins = coins or DEFAULT_COINS
        self.options = options or ExtractionOptions()

    def get_source_name(self) -> str:
        return self.__class__.__name__

    async def fetch(self) -> list[CryptoPrice]:
        """
        Fetch current quotes.

        Raises:
            FetchError: When every attempt failed
        """
        params = {"ids": ",".join(self.coins), "vs_currencies": "usd"}
        payload = await self.http_client.get_json(
            self.url,
            params=params,
            headers={"Accept": "application/json"},
        )

        records = parse_simple_price(payload, self.coins, self.options)
        logger.info("crypto_api_fetched", url=self.url, records=len(records))
        return records
