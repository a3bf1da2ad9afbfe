"""
Strategy selector / fallback coordinator.

Runs strategies in a fixed priority order and returns the output of the
first one that yields at least one record. When every strategy comes up
empty the result is empty too; it is never an error.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from prices_scraper.core.models import PriceRecord

from .base import ExtractionStrategy

logger = structlog.get_logger(__name__)


@dataclass
class ChainResult:
    """Records and the name of the strategy that produced them."""

    records: list[PriceRecord] = field(default_factory=list)
    strategy: Optional[str] = None
    attempted: list[str] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return bool(self.records)


class StrategyChain:
    """
    Ordered fallback over extraction strategies.

    Strategies run strictly one after another; later strategies are
    never invoked once an earlier one returns records.
    """

    def __init__(self, strategies: list[ExtractionStrategy]):
        self.strategies = list(strategies)

    def run(self, markup: str) -> ChainResult:
        """
        Run strategies against markup until one yields records.

        Args:
            markup: Full page markup

        Returns:
            ChainResult (empty records when nothing matched)
        """
        result = ChainResult()

        for strategy in self.strategies:
            name = strategy.get_strategy_name()
            result.attempted.append(name)

            records = strategy.extract(markup)
            if records:
                result.records = records
                result.strategy = name
                logger.info(
                    "strategy_matched",
                    strategy=name,
                    category=strategy.category.value,
                    records=len(records),
                )
                return result

            logger.debug("strategy_empty", strategy=name, category=strategy.category.value)

        logger.warning("no_strategy_matched", attempted=result.attempted)
        return result
