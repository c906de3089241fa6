"""Pure range arithmetic over a bounded logical sequence."""

from __future__ import annotations

import math
from dataclasses import dataclass

from virtually.api.types import ListRange


@dataclass(frozen=True, slots=True)
class WindowBounds:
    """Logical sequence bounds ``[start_index, end_index)``."""

    start_index: int
    end_index: int

    def __post_init__(self) -> None:
        if self.start_index > self.end_index:
            raise ValueError(
                f"start_index {self.start_index} is past end_index {self.end_index}"
            )

    @property
    def length(self) -> int:
        return self.end_index - self.start_index

    def clamp(self, index: int) -> int:
        return max(self.start_index, min(self.end_index, index))

    def accepts_jump(self, index: int) -> bool:
        return self.start_index <= index <= self.end_index


def expand_range(range: ListRange, expand_start: int, expand_end: int, bounds: WindowBounds) -> ListRange:
    """Grow ``range`` on either side, clamped to ``bounds``."""
    start = max(bounds.start_index, range.start - expand_start)
    end = min(bounds.end_index, range.end + expand_end)
    return ListRange(min(start, end), end)


def visible_range_for_index(
    first_index: int,
    viewport_size: float,
    item_size: float,
    bounds: WindowBounds,
) -> ListRange:
    """Return the range that fills the viewport starting at ``first_index``.

    When the tail would run past the end of the sequence the start is pulled
    back so the viewport stays filled.
    """
    start = bounds.clamp(first_index)
    end = start + math.ceil(max(0.0, viewport_size) / item_size)
    extra = end - bounds.end_index
    if extra > 0:
        start = max(bounds.start_index, start - extra)
        end = bounds.end_index
    return ListRange(start, end)


def range_for_offset(
    scroll_offset: float,
    viewport_size: float,
    item_size: float,
    buffer_px: float,
    bounds: WindowBounds,
) -> ListRange:
    """Estimate the buffered range to render for an absolute scroll offset."""
    first_visible = bounds.clamp(bounds.start_index + math.floor(max(0.0, scroll_offset) / item_size))
    buffer_items = math.ceil(buffer_px / item_size)
    visible = visible_range_for_index(first_visible, viewport_size, item_size, bounds)
    return expand_range(visible, buffer_items, buffer_items, bounds)


def offset_for_range(range: ListRange, item_size: float, bounds: WindowBounds) -> float:
    """Estimated top offset of ``range`` in the scroll track."""
    return item_size * (range.start - bounds.start_index)
