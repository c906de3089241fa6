"""Windowing engine: owns the render state and drives the adapter."""

from __future__ import annotations

import logging
import operator
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, SupportsIndex

from virtually.api.types import ItemIndex, JumpOutcome, ListRange, OffsetType, RenderState
from virtually.api.viewport import ViewportAdapter
from virtually.diagnostics.trace import WindowTrace
from virtually.runtime.config import WindowingConfig, get_windowing_config
from virtually.runtime.errors import RangeNotRenderedError, WindowingError, log_recoverable
from virtually.windowing.averager import ItemSizeAverager
from virtually.windowing.jump import converge_on_index
from virtually.windowing.ranges import WindowBounds
from virtually.windowing.transitions import (
    ScrollAction,
    ScrollMetrics,
    ScrollPlan,
    flip_to_top,
    plan_scroll,
    reanchor,
    reconcile_total_size,
)

_LOG = logging.getLogger("virtually.windowing")


class WindowingEngine:
    """Computes which slice of a long sequence to render and where to put it.

    The host calls ``on_mount`` once, then forwards scroll notifications to
    ``on_scroll``. Every committed state is pushed to the adapter, measured and
    reconciled before the entry point returns.
    """

    def __init__(
        self,
        adapter: ViewportAdapter,
        *,
        start_index: int,
        end_index: int,
        config: WindowingConfig | None = None,
        trace: WindowTrace | None = None,
    ) -> None:
        self._adapter = adapter
        self._bounds = WindowBounds(int(start_index), int(end_index))
        self._config = config or get_windowing_config()
        if self._config.default_item_size <= 0:
            raise ValueError("default_item_size must be > 0")
        self._averager = ItemSizeAverager(self._config.default_item_size)
        self._trace = trace
        self._state: RenderState | None = None
        self._measured_state: RenderState | None = None
        self._last_scroll_offset = 0.0
        self._removal_failures = 0
        self._ignore_next_scroll = False
        self._busy = False
        self._pending_scroll: float | None = None

    @property
    def state(self) -> RenderState | None:
        return self._state

    @property
    def config(self) -> WindowingConfig:
        return self._config

    @property
    def bounds(self) -> WindowBounds:
        return self._bounds

    @property
    def start_index(self) -> int:
        return self._bounds.start_index

    @property
    def end_index(self) -> int:
        return self._bounds.end_index

    @property
    def average_item_size(self) -> float:
        return self._averager.get_average_item_size()

    @property
    def removal_failures(self) -> int:
        return self._removal_failures

    @property
    def last_scroll_offset(self) -> float:
        return self._last_scroll_offset

    def compute_range_for_offset(self, scroll_offset: float) -> RenderState:
        """Return the from-scratch state for ``scroll_offset`` without committing it."""
        item_size = self.average_item_size
        base = self._state or RenderState(
            range=ListRange(self._bounds.start_index, self._bounds.start_index),
            offset=0.0,
            offset_type=OffsetType.FROM_TOP,
            total_content_size=item_size * self._bounds.length,
        )
        return reanchor(
            base,
            scroll_offset,
            self._adapter.get_viewport_size(),
            item_size,
            self._config.max_buffer_px,
            self._bounds,
        )

    def on_mount(self) -> RenderState:
        """Build and render the initial state for the adapter's scroll offset."""
        scroll_offset = self._adapter.get_scroll_offset()
        self._state = None
        state = self.compute_range_for_offset(scroll_offset)
        self._last_scroll_offset = scroll_offset
        self._removal_failures = 0
        self._measured_state = None
        self._record("mount", state)
        with self._exclusive():
            self._commit(state)
        return self._require_state()

    def on_scroll(self, scroll_offset: float) -> RenderState | None:
        """React to one scroll notification from the adapter."""
        if self._ignore_next_scroll:
            self._ignore_next_scroll = False
            return self._state
        if self._state is None:
            _LOG.debug("scroll before mount ignored offset=%s", scroll_offset)
            return None
        if self._busy:
            self._pending_scroll = float(scroll_offset)
            return self._state
        with self._exclusive():
            self._handle_scroll(float(scroll_offset))
        return self._state

    def on_post_render(self, measured_size: float) -> RenderState:
        """Fold a fresh measurement of the rendered block into the state."""
        state = self._require_state()
        previous = self._measured_state
        range_changed = previous is None or previous.range != state.range

        if state.offset_type is OffsetType.FROM_BOTTOM:
            state = flip_to_top(state, measured_size)
            _LOG.debug("anchor flip offset=%s measured=%s", state.offset, measured_size)
            self._record("anchor.flip", state, measured_px=measured_size)

        if range_changed:
            self._averager.add_sample(state.range, measured_size)
            total = reconcile_total_size(
                state, measured_size, self.average_item_size, self._bounds
            )
            if total != state.total_content_size:
                state = replace(state, total_content_size=total)
                self._record("total.resized", state, total_px=total)

        self._measured_state = state
        if state != self._state:
            self._state = state
            self._adapter.apply_render_state(state)
        return state

    def jump_to_index(self, target: ItemIndex | SupportsIndex) -> JumpOutcome:
        """Bring ``target`` under the viewport's reference edge."""
        if not isinstance(target, ItemIndex):
            target = ItemIndex(index=operator.index(target))
        state = self._require_state()
        if not self._bounds.accepts_jump(target.index):
            self._record("jump.ignored", state, index=target.index)
            return JumpOutcome(landed=False, attempts=0, scroll_offset=self._adapter.get_scroll_offset())

        with self._exclusive():
            outcome = converge_on_index(
                target, _EngineJumpDriver(self), max_attempts=self._config.max_jump_attempts
            )
            self._settle_after_jump()
        self._record(
            "jump.landed" if outcome.landed else "jump.abandoned",
            self._require_state(),
            index=target.index,
            attempts=outcome.attempts,
        )
        return outcome

    def on_bounds_changed(self, start_index: int, end_index: int) -> RenderState:
        """Install new sequence bounds and keep the first visible item in place."""
        bounds = WindowBounds(int(start_index), int(end_index))
        state = self._require_state()
        if bounds == self._bounds:
            return state

        anchor: ItemIndex | None
        try:
            anchor = self.first_index_in_view(OffsetType.FROM_TOP)
        except RangeNotRenderedError:
            log_recoverable(_LOG, "could not capture first visible item", level=logging.WARNING)
            anchor = None

        self._bounds = bounds
        if bounds.length == 0:
            self._averager.reset()
        self._record("bounds.changed", state, start_index=bounds.start_index, end_index=bounds.end_index)

        with self._exclusive():
            # Force a total-size reconciliation even if the range survives.
            self._measured_state = None
            self._reanchor_at_scroll_offset()
            if anchor is not None and bounds.accepts_jump(anchor.index) and bounds.length > 0:
                converge_on_index(
                    anchor, _EngineJumpDriver(self), max_attempts=self._config.max_jump_attempts
                )
                self._settle_after_jump()
        return self._require_state()

    def first_index_in_view(self, anchor: OffsetType = OffsetType.FROM_TOP) -> ItemIndex:
        """Locate the item at the viewport's top or bottom edge."""
        state = self._require_state()
        rendered = state.range
        scroll_offset = self._adapter.get_scroll_offset()

        if anchor is OffsetType.FROM_TOP:
            delta = scroll_offset - state.offset
            accumulated = 0.0
            for index in range(rendered.start, rendered.end):
                if accumulated >= delta:
                    return ItemIndex(index, accumulated - delta, anchor)
                accumulated += self._adapter.measure_range_size(ListRange(index, index + 1))
            return ItemIndex(rendered.start, 0.0, anchor)

        accumulated = self._adapter.get_rendered_content_size()
        delta = scroll_offset + self._adapter.get_viewport_size() - state.offset
        for index in range(rendered.end - 1, rendered.start - 1, -1):
            accumulated -= self._adapter.measure_range_size(ListRange(index, index + 1))
            if accumulated <= delta:
                return ItemIndex(index, delta - accumulated, anchor)
        return ItemIndex(rendered.end, 0.0, anchor)

    def _handle_scroll(self, scroll_offset: float) -> None:
        state = self._require_state()
        if state.offset_type is OffsetType.FROM_BOTTOM:
            state = self.on_post_render(self._adapter.get_rendered_content_size())

        metrics = ScrollMetrics(
            scroll_offset=scroll_offset,
            last_scroll_offset=self._last_scroll_offset,
            viewport_size=self._adapter.get_viewport_size(),
            rendered_content_size=self._adapter.get_rendered_content_size(),
            average_item_size=self.average_item_size,
        )
        try:
            plan = plan_scroll(
                state,
                metrics,
                self._bounds,
                min_buffer_px=self._config.min_buffer_px,
                max_buffer_px=self._config.max_buffer_px,
                removal_failures=self._removal_failures,
                measure=self._adapter.measure_range_size,
            )
        except RangeNotRenderedError:
            log_recoverable(_LOG, "scroll update aborted", level=logging.WARNING)
            self._record("operation.aborted", state, operation="scroll", scroll_offset=scroll_offset)
            return

        self._removal_failures = plan.removal_failures
        if plan.action is ScrollAction.REANCHOR:
            _LOG.debug(
                "reanchor offset=%s range=[%d, %d)",
                scroll_offset,
                plan.state.range.start,
                plan.state.range.end,
            )
            self._record("reanchor", plan.state, scroll_offset=scroll_offset)
        elif plan.action is ScrollAction.CORRECTED:
            self._record("scroll.corrected", plan.state, correction_px=plan.offset_correction)
        elif plan.action is ScrollAction.ABSORBED:
            self._record("scroll.absorbed", plan.state, scroll_offset=scroll_offset)
        else:
            self._record_incremental(plan.state, plan)

        if plan.state != state:
            self._commit(plan.state)
        self._last_scroll_offset = scroll_offset
        if scroll_offset <= 0:
            self._settle_top_edge()

    def _record_incremental(self, state: RenderState, plan: ScrollPlan) -> None:
        if plan.added_items:
            self._record("range.grow", state, added_items=plan.added_items)
        if plan.removal_rejected:
            _LOG.debug(
                "removal rejected removed_px=%s overscan_px=%s failures=%d",
                plan.removed_px,
                plan.overscan_px,
                plan.removal_failures,
            )
            self._record(
                "removal.rejected",
                state,
                removed_px=plan.removed_px,
                overscan_px=plan.overscan_px,
                failures=plan.removal_failures,
            )
        elif plan.removed_items:
            self._record(
                "removal.committed",
                state,
                removed_items=plan.removed_items,
                removed_px=plan.removed_px,
                overscan_px=plan.overscan_px,
            )

    def _reanchor_at_scroll_offset(self) -> RenderState:
        scroll_offset = self._adapter.get_scroll_offset()
        self._require_state()
        state = self.compute_range_for_offset(scroll_offset)
        self._last_scroll_offset = scroll_offset
        self._removal_failures = 0
        self._record("reanchor", state, scroll_offset=scroll_offset)
        return self._commit(state)

    def _settle_after_jump(self) -> None:
        # The final alignment scroll is suppressed, so run its update here.
        landed = self._adapter.get_scroll_offset()
        if landed != self._last_scroll_offset:
            self._handle_scroll(landed)
            self._last_scroll_offset = landed

    def _settle_top_edge(self) -> None:
        # At the top of the track the block must start at the first item, flush.
        state = self._require_state()
        if state.range.start != self._bounds.start_index:
            self._reanchor_at_scroll_offset()
            return
        if state.offset != 0.0 or state.offset_type is not OffsetType.FROM_TOP:
            corrected = replace(state, offset=0.0, offset_type=OffsetType.FROM_TOP)
            self._record("scroll.corrected", corrected, correction_px=-state.offset, edge="top")
            self._commit(corrected)

    def _scroll_programmatically(self, offset: float) -> float:
        before = self._adapter.get_scroll_offset()
        already_ignoring = self._ignore_next_scroll
        self._ignore_next_scroll = True
        self._adapter.set_scroll_offset(offset)
        after = self._adapter.get_scroll_offset()
        if after == before:
            # The track did not move, so no notification will arrive to swallow.
            self._ignore_next_scroll = already_ignoring
        return after

    def _commit(self, state: RenderState) -> RenderState:
        self._state = state
        self._adapter.apply_render_state(state)
        return self.on_post_render(self._adapter.get_rendered_content_size())

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        nested = self._busy
        self._busy = True
        try:
            yield
        finally:
            if not nested:
                self._busy = False
        if not nested:
            self._drain_pending_scroll()

    def _drain_pending_scroll(self) -> None:
        while self._pending_scroll is not None:
            pending = self._pending_scroll
            self._pending_scroll = None
            self._busy = True
            try:
                self._handle_scroll(pending)
            finally:
                self._busy = False

    def _require_state(self) -> RenderState:
        if self._state is None:
            raise WindowingError("engine is not mounted")
        return self._state

    def _record(self, name: str, state: RenderState, **metadata: Any) -> None:
        if self._trace is not None:
            self._trace.record(name, state, **metadata)


class _EngineJumpDriver:
    """Exposes the engine's jump steps through ``JumpDriver``."""

    def __init__(self, engine: WindowingEngine) -> None:
        self._engine = engine

    @property
    def bounds(self) -> WindowBounds:
        return self._engine.bounds

    @property
    def state(self) -> RenderState:
        return self._engine._require_state()

    def scroll_programmatically(self, offset: float) -> float:
        return self._engine._scroll_programmatically(offset)

    def reanchor_at_scroll_offset(self) -> RenderState:
        return self._engine._reanchor_at_scroll_offset()

    def measure_range_size(self, range: ListRange) -> float:
        return self._engine._adapter.measure_range_size(range)

    def viewport_size(self) -> float:
        return self._engine._adapter.get_viewport_size()

    def scroll_offset(self) -> float:
        return self._engine._adapter.get_scroll_offset()


__all__ = ["WindowingEngine"]
