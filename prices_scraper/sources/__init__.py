"""
Sources that bypass markup extraction.

- CryptoApiSource: CoinGecko simple/price quotes
"""

from .crypto_api import CryptoApiSource, parse_simple_price

__all__ = ["CryptoApiSource", "parse_simple_price"]
