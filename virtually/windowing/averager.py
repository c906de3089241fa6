"""Running estimate of the average rendered item size."""

from __future__ import annotations

from virtually.api.types import ListRange

MIN_ITEM_SIZE = 1.0


class ItemSizeAverager:
    """Weighted running mean of item size over every observed sample.

    All history contributes equally; there is no decay.
    """

    def __init__(self, default_item_size: float = 50.0) -> None:
        if default_item_size <= 0:
            raise ValueError("default_item_size must be > 0")
        self._default_item_size = max(MIN_ITEM_SIZE, float(default_item_size))
        self._total_items = 0
        self._total_size = 0.0

    @property
    def sample_weight(self) -> int:
        """Number of items observed across all samples."""
        return self._total_items

    def add_sample(self, range: ListRange, measured_size: float) -> None:
        count = len(range)
        if count <= 0:
            return
        self._total_items += count
        self._total_size += max(0.0, float(measured_size))

    def get_average_item_size(self) -> float:
        if self._total_items == 0:
            return self._default_item_size
        return max(MIN_ITEM_SIZE, self._total_size / self._total_items)

    def reset(self) -> None:
        self._total_items = 0
        self._total_size = 0.0
