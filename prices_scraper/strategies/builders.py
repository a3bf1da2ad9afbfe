"""
Record builders shared by every strategy.

Builders own validation: numeric normalization, positivity, the gold
plausibility band and the price_syp policy. A builder returns None when
the candidate is malformed; the caller skips it and keeps going.
"""

from typing import Optional

from prices_scraper.core.models import CryptoPrice, CurrencyRate, GoldPrice
from prices_scraper.core.normalizer import (
    detect_currency_code,
    in_range,
    is_positive,
    normalize_name,
    normalize_number,
    parse_carat,
)

from .base import ExtractionOptions


def build_currency(
    name: Optional[str],
    buy,
    sell,
    code: Optional[str] = None,
) -> Optional[CurrencyRate]:
    """
    Build a CurrencyRate from raw fields.

    No ordering is enforced between buy and sell.
    """
    name = normalize_name(name)
    buy_value = normalize_number(buy)
    sell_value = normalize_number(sell)

    if not name or not is_positive(buy_value) or not is_positive(sell_value):
        return None

    return CurrencyRate(
        name=name,
        buy=buy_value,
        sell=sell_value,
        code=code or detect_currency_code(name),
    )


def build_gold(
    name: Optional[str],
    price,
    options: ExtractionOptions,
    sell=None,
    carat: Optional[int] = None,
) -> Optional[GoldPrice]:
    """
    Build a GoldPrice from raw fields.

    With a second number the record keeps both quotes: ``buy`` is the
    first and also the headline ``price``.
    """
    name = normalize_name(name)
    price_value = normalize_number(price)

    if not name or not in_range(price_value, options.gold_min, options.gold_max):
        return None

    sell_value = normalize_number(sell) if sell is not None else None
    if sell_value is not None and not in_range(sell_value, options.gold_min, options.gold_max):
        sell_value = None

    return GoldPrice(
        name=name,
        price=price_value,
        carat=carat if carat is not None else parse_carat(name),
        buy=price_value if sell_value is not None else None,
        sell=sell_value,
    )


def build_crypto(
    name: Optional[str],
    symbol: Optional[str],
    price,
    options: ExtractionOptions,
    price_syp=None,
) -> Optional[CryptoPrice]:
    """
    Build a CryptoPrice from raw fields.

    price_syp comes from the source when it holds a positive number,
    otherwise it is derived as ``price * syp_per_usd``; it stays None
    only when no conversion rate is configured.
    """
    name = normalize_name(name)
    symbol = normalize_name(symbol).upper()
    price_value = normalize_number(price)

    if not name or not is_positive(price_value):
        return None

    syp_value = normalize_number(price_syp)
    if not is_positive(syp_value):
        syp_value = None
        if options.syp_per_usd is not None:
            syp_value = round(price_value * options.syp_per_usd, 2)

    return CryptoPrice(
        name=name,
        symbol=symbol,
        price=price_value,
        price_syp=syp_value,
    )
