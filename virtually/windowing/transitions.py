"""Pure render-state transitions.

Every function here maps an input state plus observations to a new state.
Nothing is mutated and the adapter is only reached through the ``measure``
callable handed to ``plan_scroll``.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from virtually.api.types import ListRange, OffsetType, RenderState
from virtually.windowing.ranges import (
    WindowBounds,
    expand_range,
    offset_for_range,
    range_for_offset,
)

MeasureRange = Callable[[ListRange], float]


class ScrollAction(Enum):
    ABSORBED = "absorbed"
    CORRECTED = "corrected"
    REANCHOR = "reanchor"
    INCREMENTAL = "incremental"


@dataclass(frozen=True, slots=True)
class ScrollMetrics:
    """Observations taken at the moment a scroll event is handled."""

    scroll_offset: float
    last_scroll_offset: float
    viewport_size: float
    rendered_content_size: float
    average_item_size: float


@dataclass(frozen=True, slots=True)
class ScrollPlan:
    action: ScrollAction
    state: RenderState
    removal_failures: int
    offset_correction: float = 0.0
    added_items: int = 0
    removed_items: int = 0
    removed_px: float = 0.0
    overscan_px: float = 0.0
    removal_rejected: bool = False


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def drift_correction(
    state: RenderState,
    scroll_offset: float,
    scroll_magnitude: float,
    item_size: float,
    bounds: WindowBounds,
) -> float:
    """Share of the top-edge estimation error to eliminate on an upward scroll.

    The share grows as the viewport approaches the top and reaches the whole
    error at offset zero.
    """
    predicted = offset_for_range(state.range, item_size, bounds)
    difference = predicted - state.offset
    if difference == 0 or scroll_magnitude <= 0:
        return 0.0
    denominator = scroll_offset + scroll_magnitude
    fraction = 1.0 if denominator <= 0 else max(0.0, min(1.0, scroll_magnitude / denominator))
    if fraction >= 1.0:
        return difference
    return _round_half_up(difference * fraction)


def reanchor(
    state: RenderState,
    scroll_offset: float,
    viewport_size: float,
    item_size: float,
    buffer_px: float,
    bounds: WindowBounds,
) -> RenderState:
    """Recompute range and offset from scratch for ``scroll_offset``."""
    range = range_for_offset(scroll_offset, viewport_size, item_size, buffer_px, bounds)
    return RenderState(
        range=range,
        offset=offset_for_range(range, item_size, bounds),
        offset_type=OffsetType.FROM_TOP,
        total_content_size=state.total_content_size,
    )


def plan_scroll(
    state: RenderState,
    metrics: ScrollMetrics,
    bounds: WindowBounds,
    *,
    min_buffer_px: float,
    max_buffer_px: float,
    removal_failures: int,
    measure: MeasureRange,
) -> ScrollPlan:
    """Decide how the rendered block reacts to one scroll event."""
    item_size = metrics.average_item_size
    rendered = state.range
    last_offset = state.offset
    last_content_size = metrics.rendered_content_size

    scroll_delta = metrics.scroll_offset - metrics.last_scroll_offset
    scroll_magnitude = abs(scroll_delta)

    offset_correction = 0.0
    if scroll_delta < 0:
        offset_correction = drift_correction(
            state, metrics.scroll_offset, scroll_magnitude, item_size, bounds
        )
        # React to the delta net of correction so the error shrinks as we go.
        scroll_delta -= offset_correction
        scroll_magnitude = abs(scroll_delta)

    scrolling_up = scroll_delta < 0
    start_buffer = metrics.last_scroll_offset - last_offset
    end_buffer = (last_offset + last_content_size) - (
        metrics.last_scroll_offset + metrics.viewport_size
    )
    underscan = scroll_magnitude + min_buffer_px - (start_buffer if scrolling_up else end_buffer)

    if underscan <= 0:
        if offset_correction:
            corrected = replace(
                state, offset=last_offset + offset_correction, offset_type=OffsetType.FROM_TOP
            )
            return ScrollPlan(
                action=ScrollAction.CORRECTED,
                state=corrected,
                removal_failures=removal_failures,
                offset_correction=offset_correction,
            )
        return ScrollPlan(
            action=ScrollAction.ABSORBED, state=state, removal_failures=removal_failures
        )

    if scroll_magnitude >= metrics.viewport_size:
        return ScrollPlan(
            action=ScrollAction.REANCHOR,
            state=reanchor(
                state,
                metrics.scroll_offset,
                metrics.viewport_size,
                item_size,
                max_buffer_px,
                bounds,
            ),
            removal_failures=0,
            offset_correction=offset_correction,
        )

    # Refill to a full max buffer rather than just the deficit.
    add_items = max(0, math.ceil((underscan - min_buffer_px + max_buffer_px) / item_size))
    overscan = (end_buffer if scrolling_up else start_buffer) - min_buffer_px + scroll_magnitude
    unbounded_remove = math.floor(overscan / item_size / (removal_failures + 1))
    remove_items = max(0, min(len(rendered) - 1, unbounded_remove))

    grown = expand_range(
        rendered,
        add_items if scrolling_up else 0,
        0 if scrolling_up else add_items,
        bounds,
    )

    if scrolling_up:
        new_end = min(grown.end, max(grown.start + 1, grown.end - remove_items))
        removed_range = ListRange(min(new_end, rendered.end), rendered.end)
    else:
        new_start = max(grown.start, min(grown.end - 1, grown.start + remove_items))
        removed_range = ListRange(rendered.start, max(new_start, rendered.start))

    measured_removed = measure(removed_range) if len(removed_range) else 0.0
    removed_size = 0.0
    failures = removal_failures
    rejected = False
    if len(removed_range) == 0:
        range = grown
    elif measured_removed <= overscan:
        if scrolling_up:
            range = ListRange(grown.start, removed_range.start)
        else:
            range = ListRange(removed_range.end, grown.end)
        removed_size = measured_removed
        failures = 0
    else:
        # Dropping these items would eat into the buffer we still need.
        range = grown
        failures += 1
        rejected = True

    if scrolling_up:
        # The new head is not measured yet, so anchor on the block's bottom edge.
        content_offset = last_offset + last_content_size - removed_size
        offset_type = OffsetType.FROM_BOTTOM
    else:
        content_offset = last_offset + removed_size
        offset_type = OffsetType.FROM_TOP

    return ScrollPlan(
        action=ScrollAction.INCREMENTAL,
        state=RenderState(
            range=range,
            offset=content_offset + offset_correction,
            offset_type=offset_type,
            total_content_size=state.total_content_size,
        ),
        removal_failures=failures,
        offset_correction=offset_correction,
        added_items=len(grown) - len(rendered),
        removed_items=0 if rejected else len(removed_range),
        removed_px=measured_removed,
        overscan_px=overscan,
        removal_rejected=rejected,
    )


def flip_to_top(state: RenderState, measured_size: float) -> RenderState:
    """Convert a bottom-anchored offset into the equivalent top offset."""
    if state.offset_type is OffsetType.FROM_TOP:
        return state
    return replace(state, offset=state.offset - measured_size, offset_type=OffsetType.FROM_TOP)


def reconcile_total_size(
    state: RenderState,
    measured_size: float,
    item_size: float,
    bounds: WindowBounds,
) -> float:
    """Scroll-track extent after a render of ``state`` measured ``measured_size``.

    Exact at the end edge, pure estimate for the unrendered remainder otherwise.
    """
    rendered = state.range
    if rendered.end == bounds.end_index:
        if rendered.start == bounds.start_index:
            return float(measured_size)
        return state.offset + measured_size
    return measured_size + (bounds.length - len(rendered)) * item_size
