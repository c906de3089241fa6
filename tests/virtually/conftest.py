from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from virtually.api.types import ListRange, OffsetType, RenderState
from virtually.diagnostics import WindowTrace
from virtually.headless import SimulatedViewport
from virtually.runtime.config import WindowingConfig
from virtually.runtime.errors import RangeNotRenderedError
from virtually.windowing.ranges import WindowBounds

DEFAULT_CONFIG = WindowingConfig(
    min_buffer_px=200.0,
    max_buffer_px=400.0,
    default_item_size=50.0,
    max_jump_attempts=10,
)


def make_state(
    start: int,
    end: int,
    offset: float = 0.0,
    *,
    offset_type: OffsetType = OffsetType.FROM_TOP,
    total: float = 500_000.0,
) -> RenderState:
    return RenderState(
        range=ListRange(start, end),
        offset=offset,
        offset_type=offset_type,
        total_content_size=total,
    )


class FailingMeasureViewport(SimulatedViewport):
    """Simulated viewport whose measurements can be switched off."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fail_measure = False

    def measure_range_size(self, range: ListRange) -> float:
        if self.fail_measure and len(range) > 0:
            raise RangeNotRenderedError(range, None)
        return super().measure_range_size(range)


class ReentrantViewport(SimulatedViewport):
    """Delivers queued user scrolls from inside ``apply_render_state``."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.scrolls_during_render: list[float] = []

    def apply_render_state(self, state: RenderState) -> None:
        super().apply_render_state(state)
        while self.scrolls_during_render:
            self.user_scroll(self.scrolls_during_render.pop(0))


@dataclass
class FakeJumpDriver:
    """Jump driver whose re-anchor never reaches the requested item."""

    bounds: WindowBounds
    state: RenderState
    offset: float = 0.0
    scrolled_to: list[float] = field(default_factory=list)
    reanchors: int = 0

    def scroll_programmatically(self, offset: float) -> float:
        self.scrolled_to.append(offset)
        self.offset = offset
        return offset

    def reanchor_at_scroll_offset(self) -> RenderState:
        self.reanchors += 1
        return self.state

    def measure_range_size(self, range: ListRange) -> float:
        return 50.0 * len(range)

    def viewport_size(self) -> float:
        return 800.0

    def scroll_offset(self) -> float:
        return self.offset


@pytest.fixture
def windowing_config() -> WindowingConfig:
    return DEFAULT_CONFIG


@pytest.fixture
def viewport() -> SimulatedViewport:
    return SimulatedViewport.uniform(10_000, 50.0, 800.0)


@pytest.fixture
def trace() -> WindowTrace:
    return WindowTrace(capacity=10_000)
