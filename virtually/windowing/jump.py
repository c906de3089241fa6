"""Bounded iterative convergence onto a target item."""

from __future__ import annotations

import logging
from typing import Protocol

from virtually.api.types import ItemIndex, JumpOutcome, ListRange, OffsetType, RenderState
from virtually.runtime.errors import RangeNotRenderedError, log_recoverable
from virtually.windowing.ranges import WindowBounds

_LOG = logging.getLogger("virtually.jump")


class JumpDriver(Protocol):
    """Engine operations a jump needs between attempts."""

    @property
    def bounds(self) -> WindowBounds: ...

    @property
    def state(self) -> RenderState: ...

    def scroll_programmatically(self, offset: float) -> float: ...

    def reanchor_at_scroll_offset(self) -> RenderState: ...

    def measure_range_size(self, range: ListRange) -> float: ...

    def viewport_size(self) -> float: ...

    def scroll_offset(self) -> float: ...


def estimate_scroll_offset(index: int, bounds: WindowBounds, total_content_size: float) -> float:
    """Proportional guess of where ``index`` sits in the scroll track."""
    if bounds.length <= 0:
        return 0.0
    return (index - bounds.start_index) / bounds.length * total_content_size


def target_in_range(index: int, range: ListRange) -> bool:
    # ``end`` itself counts: its top edge is the bottom of the rendered block.
    return range.start <= index <= range.end


def aligned_scroll_offset(
    target: ItemIndex,
    state: RenderState,
    offset_to_target: float,
    viewport_size: float,
) -> float:
    """Scroll offset that puts the target item at its requested position.

    ``offset_to_target`` is the measured distance from the rendered block's top
    to the target item's top edge.
    """
    item_top = state.offset + offset_to_target
    if target.offset_type is OffsetType.FROM_BOTTOM:
        return item_top + target.position_offset - viewport_size
    return item_top - target.position_offset


def converge_on_index(target: ItemIndex, driver: JumpDriver, *, max_attempts: int) -> JumpOutcome:
    """Jump to ``target``, refining the size estimate between attempts.

    Gives up quietly after ``max_attempts``; strongly non-uniform content can
    keep the proportional estimate from ever landing.
    """
    if not driver.bounds.accepts_jump(target.index):
        return JumpOutcome(landed=False, attempts=0, scroll_offset=driver.scroll_offset())

    for attempt in range(1, max_attempts + 1):
        estimated = estimate_scroll_offset(
            target.index, driver.bounds, driver.state.total_content_size
        )
        driver.scroll_programmatically(estimated)
        try:
            state = driver.reanchor_at_scroll_offset()
            if not target_in_range(target.index, state.range):
                _LOG.debug(
                    "jump attempt %d missed index=%d range=[%d, %d)",
                    attempt,
                    target.index,
                    state.range.start,
                    state.range.end,
                )
                continue
            offset_to_target = driver.measure_range_size(ListRange(state.range.start, target.index))
        except RangeNotRenderedError:
            log_recoverable(_LOG, f"jump attempt {attempt} aborted", level=logging.WARNING)
            continue
        landed = driver.scroll_programmatically(
            aligned_scroll_offset(target, state, offset_to_target, driver.viewport_size())
        )
        return JumpOutcome(landed=True, attempts=attempt, scroll_offset=landed)

    _LOG.info("jump to index %d abandoned after %d attempts", target.index, max_attempts)
    return JumpOutcome(landed=False, attempts=max_attempts, scroll_offset=driver.scroll_offset())
