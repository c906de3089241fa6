from __future__ import annotations

import pytest

from virtually.api.types import ListRange
from virtually.windowing.averager import ItemSizeAverager


def test_default_estimate_before_any_sample() -> None:
    averager = ItemSizeAverager(default_item_size=50.0)
    assert averager.get_average_item_size() == 50.0
    assert averager.sample_weight == 0


def test_samples_are_weighted_by_item_count() -> None:
    averager = ItemSizeAverager()
    averager.add_sample(ListRange(0, 10), 1000.0)
    averager.add_sample(ListRange(10, 40), 600.0)

    assert averager.sample_weight == 40
    assert averager.get_average_item_size() == pytest.approx(1600.0 / 40)


def test_empty_range_is_ignored() -> None:
    averager = ItemSizeAverager(default_item_size=30.0)
    averager.add_sample(ListRange(5, 5), 400.0)
    assert averager.get_average_item_size() == 30.0
    assert averager.sample_weight == 0


def test_zero_size_sample_still_counts_toward_the_mean() -> None:
    averager = ItemSizeAverager(default_item_size=30.0)
    averager.add_sample(ListRange(0, 4), 0.0)
    assert averager.sample_weight == 4
    assert averager.get_average_item_size() == 1.0

    averager.add_sample(ListRange(4, 8), 400.0)
    assert averager.sample_weight == 8
    assert averager.get_average_item_size() == pytest.approx(50.0)


def test_average_never_drops_below_one_pixel() -> None:
    averager = ItemSizeAverager()
    averager.add_sample(ListRange(0, 1000), 10.0)
    assert averager.get_average_item_size() == 1.0


def test_reset_returns_to_default_estimate() -> None:
    averager = ItemSizeAverager(default_item_size=40.0)
    averager.add_sample(ListRange(0, 2), 300.0)
    averager.reset()
    assert averager.get_average_item_size() == 40.0
    assert averager.sample_weight == 0


def test_non_positive_default_is_rejected() -> None:
    with pytest.raises(ValueError):
        ItemSizeAverager(default_item_size=0.0)
