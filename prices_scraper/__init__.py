"""
Prices Scraper - currency, gold and crypto price collection.

Architecture:
- core/: Stable foundation (models, HTTP client, browser, normalizer)
- strategies/: Extraction strategies (table, cards, script JSON, regex)
- sources/: Alternative sources that bypass extraction (crypto price API)
- config/: YAML-driven settings
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
