"""Host shell binding a viewport adapter to a windowing engine."""

from __future__ import annotations

import logging
from collections.abc import Callable

from virtually.api.types import ItemIndex, JumpOutcome, RenderState
from virtually.api.viewport import ViewportAdapter
from virtually.diagnostics.trace import WindowTrace
from virtually.runtime.config import WindowingConfig
from virtually.runtime.debug_config import load_debug_config
from virtually.windowing.engine import WindowingEngine

_LOG = logging.getLogger("virtually.runtime")


class VirtualListHost:
    """Lifecycle shell for one windowed list."""

    def __init__(
        self,
        adapter: ViewportAdapter,
        *,
        start_index: int,
        end_index: int,
        config: WindowingConfig | None = None,
        trace: WindowTrace | None = None,
        jump_to_index: int | None = None,
        on_user_scrolled: Callable[[float], None] | None = None,
    ) -> None:
        if trace is None:
            debug_cfg = load_debug_config()
            if debug_cfg.trace_enabled:
                trace = WindowTrace(capacity=debug_cfg.trace_capacity)
        self._adapter = adapter
        self._trace = trace
        self._engine = WindowingEngine(
            adapter,
            start_index=start_index,
            end_index=end_index,
            config=config,
            trace=trace,
        )
        self._initial_jump = jump_to_index
        self._requested_jump: int | None = None
        self._on_user_scrolled = on_user_scrolled
        self._mounted = False

    @property
    def engine(self) -> WindowingEngine:
        return self._engine

    @property
    def trace(self) -> WindowTrace | None:
        return self._trace

    @property
    def state(self) -> RenderState | None:
        return self._engine.state

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> RenderState:
        if self._mounted:
            raise RuntimeError("list host is already mounted")
        state = self._engine.on_mount()
        self._adapter.add_scroll_listener(self._handle_scroll)
        self._mounted = True
        _LOG.debug(
            "mounted bounds=[%d, %d) range=[%d, %d)",
            self._engine.start_index,
            self._engine.end_index,
            state.range.start,
            state.range.end,
        )
        if self._initial_jump is not None:
            self.request_jump(self._initial_jump)
        return self._engine.state or state

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._adapter.remove_scroll_listener(self._handle_scroll)
        self._mounted = False

    def request_jump(self, index: int) -> JumpOutcome | None:
        """Jump when ``index`` differs from the previously requested one."""
        if index == self._requested_jump:
            return None
        self._requested_jump = index
        return self._engine.jump_to_index(ItemIndex(index=index))

    def set_bounds(self, start_index: int, end_index: int) -> RenderState:
        """Apply new sequence bounds; unchanged bounds leave the state as is."""
        return self._engine.on_bounds_changed(start_index, end_index)

    def _handle_scroll(self, offset: float) -> None:
        if self._on_user_scrolled is not None:
            self._on_user_scrolled(offset)
        self._engine.on_scroll(offset)
