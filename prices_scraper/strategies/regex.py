"""
Regex-over-raw-markup extraction strategies.

Last resort when structural methods find nothing. The markup is only
flattened (tags removed), never parsed. Patterns are tried in order and
the first pattern producing any valid record wins.
"""

import re
from abc import abstractmethod

from prices_scraper.core.models import Category, PriceRecord
from prices_scraper.core.normalizer import (
    CARAT_PATTERNS,
    NUMBER_TOKEN,
    VALID_CARATS,
    find_number_tokens,
    in_range,
    normalize_number,
    strip_tags,
    to_western_digits,
)

from .base import ExtractionStrategy
from .builders import build_crypto, build_currency, build_gold


NUM = rf"(?:{NUMBER_TOKEN.pattern})"
SEP = r"[\s:|]+"

# One to four Arabic words on a single line
ARABIC_NAME = r"(?<![ء-ي])[ء-ي]+(?: [ء-ي]+){0,3}"
LATIN_NAME = r"[A-Z][A-Za-z]+(?: [A-Z][A-Za-z]+)?"

GOLD_WINDOW = 300

# Dates, times and bare years never count as gold prices
DATE_OR_TIME = re.compile(
    r"(?<![\d,])(?:\d{1,4}[/.-]\d{1,2}[/.-]\d{1,4}|\d{1,2}:\d{2}(?::\d{2})?)(?![\d,])"
)
YEAR = re.compile(r"(?:19|20)\d{2}")


class RegexStrategy(ExtractionStrategy):
    """Base for regex strategies over flattened markup."""

    patterns: list[re.Pattern] = []

    def extract(self, markup: str) -> list[PriceRecord]:
        text = to_western_digits(strip_tags(markup))

        for index, pattern in enumerate(self.patterns):
            records = self.scan(pattern, text)
            if records:
                self.logger.debug("regex_matched", pattern=index, records=len(records))
                return records
        return []

    @abstractmethod
    def scan(self, pattern: re.Pattern, text: str) -> list[PriceRecord]:
        """Return the valid records one pattern finds in flattened text."""
        pass


class CurrencyRegexStrategy(RegexStrategy):
    """name, optional 3-letter code, buy, sell"""

    category = Category.CURRENCY
    patterns = [
        re.compile(
            rf"(?P<name>{ARABIC_NAME})\s*\(\s*(?P<code>[A-Z]{{3}})\s*\){SEP}"
            rf"(?P<buy>{NUM}){SEP}(?P<sell>{NUM})"
        ),
        re.compile(
            rf"(?P<name>{ARABIC_NAME}){SEP}(?:(?P<code>[A-Z]{{3}}){SEP})?"
            rf"(?P<buy>{NUM}){SEP}(?P<sell>{NUM})"
        ),
    ]

    def scan(self, pattern, text):
        records = []
        seen = set()
        for match in pattern.finditer(text):
            record = build_currency(
                match.group("name"),
                match.group("buy"),
                match.group("sell"),
                code=match.group("code"),
            )
            if record is None or record.name in seen:
                continue
            seen.add(record.name)
            records.append(record)
        return records


class GoldRegexStrategy(RegexStrategy):
    """
    Carat-anchored scan.

    After each carat mention ("عيار 21", "21 عيار", "21k") the following
    text, up to the next mention, is searched for numbers inside the
    gold plausibility band. The first becomes the price, a second one
    the sell quote. Dates, times and bare years are skipped.
    """

    category = Category.GOLD
    patterns = CARAT_PATTERNS

    def scan(self, pattern, text):
        matches = [m for m in pattern.finditer(text) if int(m.group(1)) in VALID_CARATS]

        records = []
        seen = set()
        for i, match in enumerate(matches):
            carat = int(match.group(1))
            if carat in seen:
                continue

            end = match.end() + GOLD_WINDOW
            if i + 1 < len(matches):
                end = min(end, matches[i + 1].start())
            window = DATE_OR_TIME.sub(" ", text[match.end():end])
            tokens = [t for t in find_number_tokens(window) if not YEAR.fullmatch(t)]

            values = [
                v for v in (normalize_number(t) for t in tokens)
                if in_range(v, self.options.gold_min, self.options.gold_max)
            ]
            if not values:
                continue

            record = build_gold(
                f"ذهب عيار {carat}",
                values[0],
                self.options,
                sell=values[1] if len(values) > 1 else None,
                carat=carat,
            )
            if record is not None:
                seen.add(carat)
                records.append(record)
        return records


class CryptoRegexStrategy(RegexStrategy):
    """name/symbol pairs followed by a USD price and an optional SYP price"""

    category = Category.CRYPTO
    patterns = [
        re.compile(
            rf"(?P<name>{LATIN_NAME})\s*\(\s*(?P<symbol>[A-Z0-9]{{2,6}})\s*\)[\s:|]*\$?\s*"
            rf"(?P<price>{NUM})(?:{SEP}(?P<syp>{NUM}))?"
        ),
        re.compile(
            rf"(?P<symbol>[A-Z]{{2,6}})[\s:|/-]+(?P<name>{LATIN_NAME})[\s:|]+\$?\s*"
            rf"(?P<price>{NUM})"
        ),
        re.compile(
            rf"(?P<name>{ARABIC_NAME})\s*\(?\s*(?P<symbol>[A-Z]{{2,6}})\s*\)?[\s:|]+\$?\s*"
            rf"(?P<price>{NUM})"
        ),
    ]

    def scan(self, pattern, text):
        records = []
        seen = set()
        for match in pattern.finditer(text):
            groups = match.groupdict()
            record = build_crypto(
                groups["name"],
                groups["symbol"],
                groups["price"],
                self.options,
                price_syp=groups.get("syp"),
            )
            if record is None or record.symbol in seen:
                continue
            seen.add(record.symbol)
            records.append(record)
        return records
