"""Viewport adapter contract consumed by the windowing engine."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from virtually.api.types import ListRange, RenderState

ScrollListener = Callable[[float], None]


@runtime_checkable
class ViewportAdapter(Protocol):
    """Measurement and side-effect boundary between the engine and a UI toolkit.

    All calls are synchronous. ``measure_range_size`` must raise
    ``RangeNotRenderedError`` when asked about items outside the range of the
    last applied render state.
    """

    def get_scroll_offset(self) -> float:
        """Return the current scroll position of the track."""

    def get_viewport_size(self) -> float:
        """Return the visible extent of the viewport."""

    def get_rendered_content_size(self) -> float:
        """Return the summed extent of all mounted items."""

    def measure_range_size(self, range: ListRange) -> float:
        """Return the summed extent of a sub-range of the mounted items."""

    def set_scroll_offset(self, offset: float) -> None:
        """Move the scroll position programmatically."""

    def apply_render_state(self, state: RenderState) -> None:
        """Mount exactly ``state.range``, position it and size the track."""

    def add_scroll_listener(self, listener: ScrollListener) -> None:
        """Register a callback invoked with the new offset on every scroll."""

    def remove_scroll_listener(self, listener: ScrollListener) -> None:
        """Detach a previously registered scroll callback."""
