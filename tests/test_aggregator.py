from decimal import Decimal

import pytest

from src.modules.aggregator.schemas import ScrapedItem
from src.modules.aggregator.service import AggregatorService


def item(n, price, **attributes) -> ScrapedItem:
    return ScrapedItem(
        link=f"https://jo.opensooq.com/en/search/{n}",
        title=f"Listing {n}",
        price=price,
        price_text="" if price is None else f"{price} JOD",
        attributes=attributes,
    )


@pytest.fixture
def aggregator() -> AggregatorService:
    return AggregatorService()


def test_aggregate_empty(aggregator):
    run = aggregator.aggregate([])

    assert run.items == []
    assert run.total_items == 0
    assert run.min_price is None
    assert run.avg_price is None
    assert run.max_price is None
    assert run.outliers == []


def test_aggregate_basic_stats(aggregator):
    run = aggregator.aggregate([item(1, 10), item(2, 20), item(3, 30)])

    assert run.total_items == 3
    assert (run.min_price, run.avg_price, run.max_price) == (10, 20, 30)


def test_aggregate_drops_unpriced_items(aggregator):
    run = aggregator.aggregate([item(1, None), item(2, 0), item(3, -5), item(4, 100)])

    assert [i.link for i in run.items] == ["https://jo.opensooq.com/en/search/4"]
    assert run.total_items == 1
    assert run.min_price == run.avg_price == run.max_price == 100


def test_average_rounds_half_up(aggregator):
    assert aggregator.aggregate([item(1, 1), item(2, 2)]).avg_price == Decimal("2")
    assert aggregator.aggregate([item(1, 10), item(2, 11), item(3, 11)]).avg_price == Decimal("11")
    assert aggregator.aggregate([item(1, Decimal("10.2")), item(2, 10)]).avg_price == Decimal("10")


def test_average_stays_within_fractional_range(aggregator):
    run = aggregator.aggregate([item(1, Decimal("12500.50"))])

    assert run.min_price <= run.avg_price <= run.max_price
    assert run.avg_price == Decimal("12500.50")

    run = aggregator.aggregate([item(1, Decimal("10.4")), item(2, Decimal("10.45"))])
    assert run.min_price <= run.avg_price <= run.max_price
    assert run.avg_price == Decimal("10.4")

    stats = aggregator.price_stats([item(1, Decimal("0.6")), item(2, Decimal("0.7"))])
    assert stats.avg_price == Decimal("0.7")


def test_outliers_need_four_items(aggregator):
    items = [item(1, 10), item(2, 11), item(3, 100000)]

    assert aggregator.detect_outliers(items) == set()


def test_single_extreme_value_is_flagged(aggregator):
    items = [item(n, price) for n, price in enumerate([1000, 1100, 1200, 1300, 1250, 120000])]
    flagged = aggregator.detect_outliers(items)

    assert flagged == {"https://jo.opensooq.com/en/search/5"}
    run = aggregator.aggregate(items)
    assert run.outliers == ["https://jo.opensooq.com/en/search/5"]
    # flagged items stay in the run
    assert run.total_items == 6


def test_low_outlier_and_unpriced_ignored(aggregator):
    items = [item(0, 5)] + [item(n, 1000 + n) for n in range(1, 8)] + [item(9, None)]

    assert aggregator.detect_outliers(items) == {"https://jo.opensooq.com/en/search/0"}


def test_tight_cluster_has_no_outliers(aggregator):
    items = [item(n, 100 + n) for n in range(10)]

    assert aggregator.detect_outliers(items) == set()


def test_price_stats_with_exclusions(aggregator):
    items = [item(1, 10), item(2, 20), item(3, 30), item(4, None)]
    stats = aggregator.price_stats(items, excluded={"https://jo.opensooq.com/en/search/3"})

    assert stats.count == 2
    assert (stats.min_price, stats.avg_price, stats.max_price) == (10, 15, 20)
    assert aggregator.price_stats(items, excluded={i.link for i in items}).min_price is None


def test_attribute_keys_union(aggregator):
    items = [
        item(1, 10, Make="Kia", Year="2019"),
        item(2, 20, Make="Honda", **{"Interior Options": ["Leather", "Sunroof"]}),
    ]

    assert aggregator.attribute_keys(items) == ["Interior Options", "Make", "Year"]
