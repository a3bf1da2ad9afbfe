"""
Card/container extraction strategies.

Locates repeating containers by class-name or attribute hints, then
reads the first matching sub-element for each field.
"""

from abc import abstractmethod
from typing import Optional

from bs4 import Tag

from prices_scraper.core.models import Category, PriceRecord
from prices_scraper.core.selectors import first_text, parse_markup, select_containers

from .base import ExtractionStrategy
from .builders import build_crypto, build_currency, build_gold


NAME_SELECTORS = [".name", ".title", ".currency-name", "h3", "h4"]
PRICE_SELECTORS = [".price", ".value", ".amount"]


class CardStrategy(ExtractionStrategy):
    """Base for card strategies; subclasses map a container to a record."""

    container_selectors: list[str] = []

    def extract(self, markup: str) -> list[PriceRecord]:
        soup = parse_markup(markup)
        containers = select_containers(soup, self.container_selectors)

        records = []
        for container in containers:
            record = self.build_card(container)
            if record is not None:
                records.append(record)

        self.logger.debug("cards_scanned", containers=len(containers), records=len(records))
        return records

    @abstractmethod
    def build_card(self, container: Tag) -> Optional[PriceRecord]:
        """Build a record from one container element, or None."""
        pass


class CurrencyCardStrategy(CardStrategy):
    category = Category.CURRENCY
    container_selectors = [
        ".currency-item",
        ".currency-card",
        ".currency-row",
        ".rate-item",
        "[data-currency]",
    ]

    buy_selectors = [".buy", ".buy-price", ".purchase", "[data-buy]"]
    sell_selectors = [".sell", ".sell-price", ".sale", "[data-sell]"]

    def build_card(self, container):
        name = first_text(container, NAME_SELECTORS)
        buy = first_text(container, self.buy_selectors) or container.get("data-buy")
        sell = first_text(container, self.sell_selectors) or container.get("data-sell")
        code = container.get("data-currency")
        return build_currency(name, buy, sell, code=code.upper() if code else None)


class GoldCardStrategy(CardStrategy):
    category = Category.GOLD
    container_selectors = [".price-item", ".gold-price", ".gold-item", ".currency-row"]

    def build_card(self, container):
        name = first_text(container, NAME_SELECTORS)
        price = first_text(container, PRICE_SELECTORS)
        return build_gold(name, price, self.options)


class CryptoCardStrategy(CardStrategy):
    category = Category.CRYPTO
    container_selectors = [".crypto-row", ".crypto-item", ".currency-item", ".price-row"]

    symbol_selectors = [".symbol", ".code"]
    syp_selectors = [".syp-price", ".syrian-price"]

    def build_card(self, container):
        name = first_text(container, NAME_SELECTORS)
        symbol = first_text(container, self.symbol_selectors)
        price = first_text(container, PRICE_SELECTORS)
        price_syp = first_text(container, self.syp_selectors)
        return build_crypto(name, symbol, price, self.options, price_syp=price_syp)
