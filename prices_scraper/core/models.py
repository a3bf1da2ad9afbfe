"""
Data models for the prices scraper.

Three record shapes (one per category) plus the persisted FetchResult.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Category(str, Enum):
    """Independent unit of fetch/extract/persist work."""
    CURRENCY = "currencies"
    GOLD = "gold"
    CRYPTO = "crypto"

    @property
    def path(self) -> str:
        """Default site path for the category."""
        return f"/{self.value}"

    @property
    def records_key(self) -> str:
        """Key holding the records in the persisted document."""
        return "rates" if self is Category.CURRENCY else "prices"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"

    @classmethod
    def parse(cls, value: str) -> "Category":
        """Resolve a category from its value or a loose alias."""
        aliases = {
            "currency": cls.CURRENCY,
            "currencies": cls.CURRENCY,
            "rates": cls.CURRENCY,
            "gold": cls.GOLD,
            "crypto": cls.CRYPTO,
            "cryptos": cls.CRYPTO,
        }
        key = value.strip().lower()
        if key not in aliases:
            raise ValueError(f"Unknown category: {value}")
        return aliases[key]


@dataclass(frozen=True)
class CurrencyRate:
    """Exchange rate against the Syrian pound."""
    name: str
    buy: float
    sell: float
    code: Optional[str] = None  # ISO code when detected

    @property
    def average(self) -> float:
        return (self.buy + self.sell) / 2

    @property
    def spread(self) -> float:
        return self.sell - self.buy

    @property
    def spread_percent(self) -> float:
        return self.spread / self.buy * 100

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "code": self.code,
            "buy": self.buy,
            "sell": self.sell,
            "average": round(self.average, 4),
            "spread": round(self.spread, 4),
            "spread_percent": round(self.spread_percent, 4),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CurrencyRate":
        return cls(
            name=data["name"],
            buy=float(data["buy"]),
            sell=float(data["sell"]),
            code=data.get("code"),
        )


@dataclass(frozen=True)
class GoldPrice:
    """Gold price, usually per gram of a given carat."""
    name: str
    price: float
    carat: Optional[int] = None
    buy: Optional[float] = None
    sell: Optional[float] = None

    def to_dict(self) -> dict:
        data = {"name": self.name, "price": self.price}
        if self.carat is not None:
            data["carat"] = self.carat
        if self.buy is not None:
            data["buy"] = self.buy
        if self.sell is not None:
            data["sell"] = self.sell
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "GoldPrice":
        return cls(
            name=data["name"],
            price=float(data["price"]),
            carat=data.get("carat"),
            buy=data.get("buy"),
            sell=data.get("sell"),
        )


@dataclass(frozen=True)
class CryptoPrice:
    """Crypto asset price in USD with an optional SYP equivalent."""
    name: str
    symbol: str
    price: float
    price_syp: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "price": self.price,
            "price_syp": self.price_syp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CryptoPrice":
        price_syp = data.get("price_syp")
        return cls(
            name=data["name"],
            symbol=data.get("symbol") or "",
            price=float(data["price"]),
            price_syp=float(price_syp) if price_syp is not None else None,
        )


PriceRecord = Union[CurrencyRate, GoldPrice, CryptoPrice]

RECORD_TYPES = {
    Category.CURRENCY: CurrencyRate,
    Category.GOLD: GoldPrice,
    Category.CRYPTO: CryptoPrice,
}


@dataclass
class FetchResult:
    """
    Persisted artifact for one category.

    Created fresh on every successful fetch cycle.
    """

    category: Category
    source: str
    last_update: int  # epoch millis
    records: list = field(default_factory=list)
    fetched_at: Optional[str] = None  # ISO-8601
    strategy: Optional[str] = None  # not persisted

    def to_dict(self) -> dict:
        data = {
            "lastUpdate": self.last_update,
            "source": self.source,
        }
        if self.fetched_at:
            data["fetched_at"] = self.fetched_at
        data[self.category.records_key] = [r.to_dict() for r in self.records]
        return data

    @classmethod
    def from_dict(cls, category: Category, data: dict) -> "FetchResult":
        """Rebuild from a persisted document; raises on schema mismatch."""
        record_type = RECORD_TYPES[category]
        raw_records = data[category.records_key]
        if not isinstance(raw_records, list):
            raise ValueError(f"'{category.records_key}' must be a list")

        return cls(
            category=category,
            source=data["source"],
            last_update=int(data["lastUpdate"]),
            records=[record_type.from_dict(r) for r in raw_records],
            fetched_at=data.get("fetched_at"),
        )
