"""In-memory viewport adapter backed by a table of item sizes."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from virtually.api.types import ListRange, OffsetType, RenderState
from virtually.api.viewport import ScrollListener
from virtually.runtime.errors import RangeNotRenderedError

_LOG = logging.getLogger("virtually.headless")


class SimulatedViewport:
    """Headless stand-in for a scroll container.

    Items are addressed by absolute index into ``item_sizes``. Range sizes come
    from a cumulative-sum table, so measurement is exact and constant time.
    """

    def __init__(
        self,
        item_sizes: Sequence[float] | np.ndarray,
        viewport_size: float,
        *,
        scroll_offset: float = 0.0,
        deliver_inline: bool = True,
    ) -> None:
        self._viewport_size = float(viewport_size)
        self._scroll_offset = max(0.0, float(scroll_offset))
        self._listeners: list[ScrollListener] = []
        self._deliver_inline = bool(deliver_inline)
        self._queued: list[float] = []
        self._state: RenderState | None = None
        self.applied_states: list[RenderState] = []
        self.set_item_sizes(item_sizes)

    @classmethod
    def uniform(cls, count: int, size: float, viewport_size: float) -> SimulatedViewport:
        return cls(np.full(int(count), float(size)), viewport_size)

    @property
    def item_count(self) -> int:
        return int(self._sizes.shape[0])

    @property
    def render_state(self) -> RenderState | None:
        return self._state

    def set_item_sizes(self, item_sizes: Sequence[float] | np.ndarray) -> None:
        sizes = np.asarray(item_sizes, dtype=np.float64)
        if sizes.ndim != 1:
            raise ValueError("item_sizes must be one-dimensional")
        if np.any(sizes < 0):
            raise ValueError("item sizes must be >= 0")
        self._sizes = sizes
        self._prefix = np.concatenate(([0.0], np.cumsum(sizes)))

    def get_scroll_offset(self) -> float:
        return self._scroll_offset

    def get_viewport_size(self) -> float:
        return self._viewport_size

    def get_rendered_content_size(self) -> float:
        if self._state is None:
            return 0.0
        return self._span(self._state.range)

    def measure_range_size(self, range: ListRange) -> float:
        rendered = None if self._state is None else self._state.range
        if len(range) == 0:
            return 0.0
        if rendered is None or not rendered.contains(range):
            raise RangeNotRenderedError(range, rendered)
        return self._span(range)

    def set_scroll_offset(self, offset: float) -> None:
        self._move_to(offset, programmatic=True)

    def user_scroll(self, offset: float) -> float:
        """Scroll as a user would, returning the clamped position."""
        self._move_to(offset)
        return self._scroll_offset

    def user_scroll_by(self, delta: float) -> float:
        return self.user_scroll(self._scroll_offset + delta)

    def apply_render_state(self, state: RenderState) -> None:
        if state.range.end > self.item_count:
            raise ValueError(
                f"render range end {state.range.end} exceeds item count {self.item_count}"
            )
        self._state = state
        self.applied_states.append(state)
        if self._scroll_offset > self.max_scroll_offset():
            # The track shrank under the viewport; the container clamps and reports it.
            self._move_to(self._scroll_offset)

    def add_scroll_listener(self, listener: ScrollListener) -> None:
        self._listeners.append(listener)

    def remove_scroll_listener(self, listener: ScrollListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def max_scroll_offset(self) -> float:
        total = 0.0 if self._state is None else self._state.total_content_size
        return max(0.0, total - self._viewport_size)

    def block_top(self) -> float:
        """Track position of the rendered block's top edge."""
        state = self._require_state()
        if state.offset_type is OffsetType.FROM_BOTTOM:
            return state.offset - self.get_rendered_content_size()
        return state.offset

    def item_top(self, index: int) -> float:
        """Track position of the top edge of a rendered item (or of ``range.end``)."""
        state = self._require_state()
        if not state.range.start <= index <= state.range.end:
            raise RangeNotRenderedError(ListRange(index, index), state.range)
        return self.block_top() + self._span(ListRange(state.range.start, index))

    def visible_overlap(self) -> float:
        """Pixels of the viewport covered by rendered content."""
        if self._state is None:
            return 0.0
        top = self.block_top()
        bottom = top + self.get_rendered_content_size()
        view_top = self._scroll_offset
        view_bottom = view_top + self._viewport_size
        return max(0.0, min(bottom, view_bottom) - max(top, view_top))

    def _span(self, range: ListRange) -> float:
        return float(self._prefix[range.end] - self._prefix[range.start])

    def flush_notifications(self) -> int:
        """Deliver queued programmatic scroll notifications; returns how many."""
        delivered = 0
        while self._queued:
            offset = self._queued.pop(0)
            self._notify(offset)
            delivered += 1
        return delivered

    def _move_to(self, offset: float, *, programmatic: bool = False) -> None:
        clamped = max(0.0, min(float(offset), self.max_scroll_offset()))
        if clamped == self._scroll_offset:
            return
        self._scroll_offset = clamped
        _LOG.debug("scroll offset=%s", clamped)
        if programmatic and not self._deliver_inline:
            self._queued.append(clamped)
            return
        self._notify(clamped)

    def _notify(self, offset: float) -> None:
        for listener in tuple(self._listeners):
            listener(offset)

    def _require_state(self) -> RenderState:
        if self._state is None:
            raise RuntimeError("nothing has been rendered yet")
        return self._state
