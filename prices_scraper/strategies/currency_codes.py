"""
Code-aware currency extraction.

Finds rates in unstructured page text anchored on ISO currency codes
from a fixed allow-list. A code may follow the name in parentheses
("يورو (EUR) 13,000 13,100") or stand as a bare word
("EUR يورو 13,000 13,100"). The first two numbers after the code are
read as buy and sell.
"""

import re
from typing import Optional

from prices_scraper.core.models import Category, CurrencyRate
from prices_scraper.core.normalizer import (
    CURRENCY_CODES,
    find_number_tokens,
    normalize_name,
    to_western_digits,
)
from prices_scraper.core.selectors import block_texts, parse_markup

from .base import ExtractionStrategy
from .builders import build_currency


CODE_PATTERN = re.compile(r"\(\s*([A-Z]{3})\s*\)|(?<![A-Za-z])([A-Z]{3})(?![A-Za-z])")


def parse_code_block(text: str) -> Optional[CurrencyRate]:
    """
    Read one rate from a block of text.

    Args:
        text: Text of a single block element

    Returns:
        CurrencyRate or None when the block holds no allow-listed code
        followed by two valid numbers
    """
    text = to_western_digits(text)

    for match in CODE_PATTERN.finditer(text):
        code = match.group(1) or match.group(2)
        if code not in CURRENCY_CODES:
            continue

        numbers = find_number_tokens(text[match.end():])
        if len(numbers) < 2:
            return None

        before = normalize_name(text[:match.start()])
        if not before:
            # Bare code first: the name sits between the code and the numbers
            after = text[match.end():]
            before = normalize_name(after[:after.find(numbers[0])])

        return build_currency(before or code, numbers[0], numbers[1], code=code)

    return None


class CurrencyCodeStrategy(ExtractionStrategy):
    category = Category.CURRENCY

    def extract(self, markup):
        soup = parse_markup(markup)

        records = []
        seen = set()
        for text in block_texts(soup):
            record = parse_code_block(text)
            if record is None or record.code in seen:
                continue
            seen.add(record.code)
            records.append(record)

        self.logger.debug("code_blocks_scanned", records=len(records))
        return records
