"""
Extraction strategies for price pages.

Strategies handle the extraction phase - converting fetched markup
into validated price records.

Strategies:
- Table*Strategy: Read <table> rows cell by cell
- CurrencyCodeStrategy: Anchor on ISO currency codes in page text
- *CardStrategy: Read repeating card/container elements
- *ScriptJsonStrategy: Decode JSON assigned in inline scripts
- *RegexStrategy: Regular expressions over flattened markup
"""

from .base import ExtractionOptions, ExtractionStrategy
from .chain import ChainResult, StrategyChain
from .registry import STRATEGIES, build_chain

__all__ = [
    "ExtractionOptions",
    "ExtractionStrategy",
    "ChainResult",
    "StrategyChain",
    "STRATEGIES",
    "build_chain",
]
