"""
Embedded-script JSON extraction strategies.

Scans inline <script> blocks for assignments whose right-hand side is a
JSON object or array (``var data = {...}``, ``window.__STATE__ = [...]``)
and for script bodies that are plain JSON. The first list of records
found under a known key is mapped into the category's record shape.
"""

import json
import re
from abc import abstractmethod
from typing import Any, Optional

from prices_scraper.core.models import Category, PriceRecord
from prices_scraper.core.selectors import parse_markup, script_bodies

from .base import ExtractionStrategy
from .builders import build_crypto, build_currency, build_gold


ASSIGNMENT_PATTERN = re.compile(
    r"(?:\b(?:var|let|const)\s+[\w$]+|\b[\w$]+(?:\.[\w$]+)*)\s*=\s*(?=[\[{])"
)

# Keys that plausibly hold a list of records, in priority order
RECORD_LIST_KEYS = ("rates", "prices", "currencies", "gold", "data")

MAX_DEPTH = 4

NAME_KEYS = ("name", "title", "label", "currency", "name_ar")
BUY_KEYS = ("buy", "bid", "buy_price", "purchase")
SELL_KEYS = ("sell", "ask", "sell_price", "sale")
PRICE_KEYS = ("price", "value", "price_usd", "usd", "rate")
SYMBOL_KEYS = ("symbol", "ticker", "code")
SYP_KEYS = ("price_syp", "syp", "price_sy")
CODE_KEYS = ("code", "iso", "symbol")


def _pick(item: dict, keys: tuple) -> Any:
    """Return the first present, non-empty value for keys."""
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def _is_flat_object(value: Any) -> bool:
    return isinstance(value, dict) and any(
        not isinstance(v, (dict, list)) for v in value.values()
    )


def _as_record_list(value: Any) -> Optional[list[dict]]:
    """
    Interpret a JSON value as a list of record dicts.

    Accepts a list of objects, or a mapping of objects keyed by code
    (the key becomes ``code``, and ``name`` when no name is present).
    """
    if isinstance(value, list):
        items = [v for v in value if isinstance(v, dict)]
        return items or None

    if isinstance(value, dict) and value and all(_is_flat_object(v) for v in value.values()):
        items = []
        for key, item in value.items():
            item = dict(item)
            item.setdefault("code", key)
            item.setdefault("name", key)
            items.append(item)
        return items

    return None


def find_record_list(obj: Any, depth: int = 0) -> Optional[list[dict]]:
    """
    Search a decoded JSON value for the first list of records.

    Known keys are checked first at each level, then nested objects.
    """
    if depth > MAX_DEPTH:
        return None

    if isinstance(obj, list):
        return _as_record_list(obj)

    if not isinstance(obj, dict):
        return None

    for key in RECORD_LIST_KEYS:
        if key in obj:
            items = _as_record_list(obj[key])
            if items:
                return items
            nested = find_record_list(obj[key], depth + 1)
            if nested:
                return nested

    for value in obj.values():
        if isinstance(value, dict):
            nested = find_record_list(value, depth + 1)
            if nested:
                return nested

    return None


def iter_script_json(body: str):
    """Yield every JSON value found in a script body."""
    decoder = json.JSONDecoder()
    stripped = body.strip()

    if stripped[:1] in ("{", "["):
        try:
            yield json.loads(stripped)
            return
        except json.JSONDecodeError:
            pass

    for match in ASSIGNMENT_PATTERN.finditer(body):
        try:
            value, _ = decoder.raw_decode(body, match.end())
        except json.JSONDecodeError:
            continue
        yield value


class ScriptJsonStrategy(ExtractionStrategy):
    """Base for script JSON strategies; subclasses map one item."""

    def extract(self, markup: str) -> list[PriceRecord]:
        soup = parse_markup(markup)

        for body in script_bodies(soup):
            for value in iter_script_json(body):
                items = find_record_list(value)
                if not items:
                    continue

                records = [r for r in (self.build_item(i) for i in items) if r is not None]
                if records:
                    self.logger.debug("script_json_matched", items=len(items), records=len(records))
                    return records

        return []

    @abstractmethod
    def build_item(self, item: dict) -> Optional[PriceRecord]:
        pass


class CurrencyScriptJsonStrategy(ScriptJsonStrategy):
    category = Category.CURRENCY

    def build_item(self, item):
        code = _pick(item, CODE_KEYS)
        return build_currency(
            _pick(item, NAME_KEYS),
            _pick(item, BUY_KEYS),
            _pick(item, SELL_KEYS),
            code=str(code).upper() if code and len(str(code)) == 3 else None,
        )


class GoldScriptJsonStrategy(ScriptJsonStrategy):
    category = Category.GOLD

    def build_item(self, item):
        price = _pick(item, PRICE_KEYS)
        sell = _pick(item, SELL_KEYS)
        if price is None:
            price = _pick(item, BUY_KEYS)
        return build_gold(_pick(item, NAME_KEYS), price, self.options, sell=sell)


class CryptoScriptJsonStrategy(ScriptJsonStrategy):
    category = Category.CRYPTO

    def build_item(self, item):
        return build_crypto(
            _pick(item, NAME_KEYS),
            _pick(item, SYMBOL_KEYS),
            _pick(item, PRICE_KEYS),
            self.options,
            price_syp=_pick(item, SYP_KEYS),
        )
