import logging
from collections.abc import Collection, Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from src.modules.aggregator.schemas import PriceStats, ScrapedItem, ScrapeRun

logger = logging.getLogger(__name__)

# Outlier bounds: [Q1 - 2.0*IQR, Q3 + 2.0*IQR]
OUTLIER_IQR_MULTIPLIER = Decimal("2.0")
MIN_ITEMS_FOR_IQR = 4


def _priced(items: Iterable[ScrapedItem]) -> list[ScrapedItem]:
    return [item for item in items if item.price is not None and item.price > 0]


def _summarize(prices: Sequence[Decimal]) -> PriceStats:
    if not prices:
        return PriceStats()
    low, high = min(prices), max(prices)
    mean = sum(prices, Decimal(0)) / len(prices)
    # rounding must not push the average past a fractional min or max
    rounded = mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return PriceStats(
        min_price=low,
        avg_price=min(max(rounded, low), high),
        max_price=high,
        count=len(prices),
    )


class AggregatorService:
    """Price statistics and outlier flags over scraped items."""

    def aggregate(self, items: Iterable[ScrapedItem]) -> ScrapeRun:
        priced = _priced(items)
        stats = _summarize([item.price for item in priced])
        flagged = self.detect_outliers(priced)

        logger.info(
            "Aggregated %d priced items (min=%s avg=%s max=%s, %d outliers)",
            stats.count, stats.min_price, stats.avg_price, stats.max_price, len(flagged),
        )
        return ScrapeRun(
            items=priced,
            min_price=stats.min_price,
            avg_price=stats.avg_price,
            max_price=stats.max_price,
            total_items=stats.count,
            outliers=[item.link for item in priced if item.link in flagged],
        )

    def detect_outliers(self, items: Iterable[ScrapedItem]) -> set[str]:
        """Links of items whose price falls outside ``[Q1 - 2*IQR, Q3 + 2*IQR]``.

        Quartiles are picked positionally from the sorted prices (no
        interpolation). Fewer than four priced items never yield outliers.
        """
        priced = _priced(items)
        n = len(priced)
        if n < MIN_ITEMS_FOR_IQR:
            return set()

        prices = sorted(item.price for item in priced)
        q1 = prices[n // 4]
        q3 = prices[(3 * n) // 4]
        iqr = q3 - q1
        lower = q1 - OUTLIER_IQR_MULTIPLIER * iqr
        upper = q3 + OUTLIER_IQR_MULTIPLIER * iqr

        return {item.link for item in priced if item.price < lower or item.price > upper}

    def price_stats(
        self, items: Iterable[ScrapedItem], excluded: Collection[str] = ()
    ) -> PriceStats:
        """Recompute min/avg/max over the items whose link is not in ``excluded``."""
        kept = [item for item in _priced(items) if item.link not in excluded]
        return _summarize([item.price for item in kept])

    @staticmethod
    def attribute_keys(items: Iterable[ScrapedItem]) -> list[str]:
        keys: set[str] = set()
        for item in items:
            keys.update(item.attributes)
        return sorted(keys)


aggregator_service = AggregatorService()
