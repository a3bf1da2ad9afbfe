"""
Fixed per-category strategy order.

The order is a manual reliability ranking: the most structured and most
reliable strategy first, raw regex last.
"""

from typing import Optional

from prices_scraper.core.models import Category

from .base import ExtractionOptions, ExtractionStrategy
from .cards import CryptoCardStrategy, CurrencyCardStrategy, GoldCardStrategy
from .chain import StrategyChain
from .currency_codes import CurrencyCodeStrategy
from .regex import CryptoRegexStrategy, CurrencyRegexStrategy, GoldRegexStrategy
from .script_json import (
    CryptoScriptJsonStrategy,
    CurrencyScriptJsonStrategy,
    GoldScriptJsonStrategy,
)
from .table import CryptoTableStrategy, CurrencyTableStrategy, GoldTableStrategy


# Strategy registry
STRATEGIES: dict[Category, tuple[type[ExtractionStrategy], ...]] = {
    Category.CURRENCY: (
        CurrencyTableStrategy,
        CurrencyCardStrategy,
        CurrencyCodeStrategy,
        CurrencyScriptJsonStrategy,
        CurrencyRegexStrategy,
    ),
    Category.GOLD: (
        GoldTableStrategy,
        GoldCardStrategy,
        GoldScriptJsonStrategy,
        GoldRegexStrategy,
    ),
    Category.CRYPTO: (
        CryptoTableStrategy,
        CryptoCardStrategy,
        CryptoScriptJsonStrategy,
        CryptoRegexStrategy,
    ),
}


def build_chain(
    category: Category,
    options: Optional[ExtractionOptions] = None,
) -> StrategyChain:
    """
    Build the fallback chain for a category.

    Args:
        category: Category to extract
        options: Validation options shared by every strategy

    Returns:
        StrategyChain in fixed priority order
    """
    options = options or ExtractionOptions()
    return StrategyChain([cls(options) for cls in STRATEGIES[category]])
