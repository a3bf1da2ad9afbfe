"""
Tabular extraction strategies.

Reads <table> rows cell by cell. Rows with too few cells or with a
required numeric cell that fails normalization are discarded.
"""

from abc import abstractmethod
from typing import Optional

from prices_scraper.core.models import Category, PriceRecord
from prices_scraper.core.selectors import parse_markup, table_rows

from .base import ExtractionStrategy
from .builders import build_crypto, build_currency, build_gold


class TableStrategy(ExtractionStrategy):
    """Base for table strategies; subclasses map a row to a record."""

    min_cells: int = 2

    def extract(self, markup: str) -> list[PriceRecord]:
        soup = parse_markup(markup)
        records = []
        skipped = 0

        for cells in table_rows(soup):
            if len(cells) < self.min_cells:
                skipped += 1
                continue
            record = self.build_row(cells)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        self.logger.debug("table_scanned", records=len(records), skipped=skipped)
        return records

    @abstractmethod
    def build_row(self, cells: list[str]) -> Optional[PriceRecord]:
        """Build a record from the cell texts of one row, or None."""
        pass


class CurrencyTableStrategy(TableStrategy):
    """name | buy | sell"""

    category = Category.CURRENCY
    min_cells = 3

    def build_row(self, cells):
        return build_currency(cells[0], cells[1], cells[2])


class GoldTableStrategy(TableStrategy):
    """name | price [| second quote]"""

    category = Category.GOLD
    min_cells = 2

    def build_row(self, cells):
        sell = cells[2] if len(cells) > 2 else None
        return build_gold(cells[0], cells[1], self.options, sell=sell)


class CryptoTableStrategy(TableStrategy):
    """name | symbol | price (USD) [| price (SYP)]"""

    category = Category.CRYPTO
    min_cells = 3

    def build_row(self, cells):
        price_syp = cells[3] if len(cells) > 3 else None
        return build_crypto(cells[0], cells[1], cells[2], self.options, price_syp=price_syp)
