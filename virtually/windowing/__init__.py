"""Windowing and size-estimation core."""

from virtually.windowing.averager import ItemSizeAverager
from virtually.windowing.engine import WindowingEngine
from virtually.windowing.jump import (
    aligned_scroll_offset,
    converge_on_index,
    estimate_scroll_offset,
)
from virtually.windowing.ranges import (
    WindowBounds,
    expand_range,
    offset_for_range,
    range_for_offset,
    visible_range_for_index,
)
from virtually.windowing.transitions import (
    ScrollAction,
    ScrollMetrics,
    ScrollPlan,
    drift_correction,
    flip_to_top,
    plan_scroll,
    reanchor,
    reconcile_total_size,
)

__all__ = [
    "ItemSizeAverager",
    "ScrollAction",
    "ScrollMetrics",
    "ScrollPlan",
    "WindowBounds",
    "WindowingEngine",
    "aligned_scroll_offset",
    "converge_on_index",
    "drift_correction",
    "estimate_scroll_offset",
    "expand_range",
    "flip_to_top",
    "offset_for_range",
    "plan_scroll",
    "range_for_offset",
    "reanchor",
    "reconcile_total_size",
    "visible_range_for_index",
]
