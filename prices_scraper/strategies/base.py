"""
Base class for extraction strategies.

A strategy turns raw markup into zero or more price records for one
category. Strategies are stateless and never share mutable state.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import structlog

from prices_scraper.core.models import Category, PriceRecord

logger = structlog.get_logger(__name__)


DEFAULT_SYP_PER_USD = 12500.0


@dataclass(frozen=True)
class ExtractionOptions:
    """Validation knobs shared by the record builders."""

    # Used to derive price_syp when the source has no SYP column; None disables
    syp_per_usd: Optional[float] = DEFAULT_SYP_PER_USD

    # Plausibility band for gold prices (exclusive)
    gold_min: float = 100.0
    gold_max: float = 10_000_000.0


class ExtractionStrategy(ABC):
    """
    Abstract base class for extraction strategies.

    Each strategy scans the full markup with a different structural
    assumption:
    - table rows
    - card/container elements
    - JSON assigned inside inline scripts
    - regular expressions over the raw markup
    """

    category: Category

    def __init__(self, options: Optional[ExtractionOptions] = None):
        """
        Initialize strategy.

        Args:
            options: Validation options (defaults when not provided)
        """
        self.options = options or ExtractionOptions()
        self.logger = logger.bind(
            strategy=self.__class__.__name__,
            category=self.category.value,
        )

    @abstractmethod
    def extract(self, markup: str) -> list[PriceRecord]:
        """
        Extract records from markup.

        Args:
            markup: Full page markup

        Returns:
            Valid records in page order (possibly empty)
        """
        pass

    def get_strategy_name(self) -> str:
        """Return human-readable strategy name."""
        return self.__class__.__name__
