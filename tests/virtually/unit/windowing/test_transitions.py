from __future__ import annotations

import pytest

from tests.virtually.conftest import make_state
from virtually.api.types import ListRange, OffsetType
from virtually.windowing.ranges import WindowBounds
from virtually.windowing.transitions import (
    ScrollAction,
    ScrollMetrics,
    drift_correction,
    flip_to_top,
    plan_scroll,
    reanchor,
    reconcile_total_size,
)

BOUNDS = WindowBounds(0, 10_000)


def _uniform_measure(range: ListRange) -> float:
    return 50.0 * len(range)


def _metrics(scroll: float, last: float, rendered: float, *, viewport: float = 800.0) -> ScrollMetrics:
    return ScrollMetrics(
        scroll_offset=scroll,
        last_scroll_offset=last,
        viewport_size=viewport,
        rendered_content_size=rendered,
        average_item_size=50.0,
    )


def _plan(state, metrics, *, failures: int = 0, measure=_uniform_measure):
    return plan_scroll(
        state,
        metrics,
        BOUNDS,
        min_buffer_px=200.0,
        max_buffer_px=400.0,
        removal_failures=failures,
        measure=measure,
    )


def test_small_scroll_inside_buffer_is_absorbed() -> None:
    state = make_state(0, 24)
    plan = _plan(state, _metrics(100.0, 0.0, 1200.0))
    assert plan.action is ScrollAction.ABSORBED
    assert plan.state is state


def test_scroll_past_viewport_reanchors() -> None:
    plan = _plan(make_state(0, 24), _metrics(5_000.0, 0.0, 1200.0))
    assert plan.action is ScrollAction.REANCHOR
    assert plan.state.range == ListRange(92, 124)
    assert plan.state.offset == 4_600.0
    assert plan.state.offset_type is OffsetType.FROM_TOP
    assert plan.removal_failures == 0


def test_downward_scroll_grows_end_and_drops_head() -> None:
    plan = _plan(make_state(0, 24), _metrics(300.0, 100.0, 1200.0))
    assert plan.action is ScrollAction.INCREMENTAL
    assert plan.state.range == ListRange(2, 30)
    assert plan.state.offset == 100.0
    assert plan.state.offset_type is OffsetType.FROM_TOP
    assert plan.added_items == 6
    assert plan.removed_items == 2
    assert plan.removed_px == 100.0
    assert plan.overscan_px == 100.0
    assert plan.removal_rejected is False


def test_upward_scroll_anchors_on_block_bottom() -> None:
    plan = _plan(make_state(2, 30, 100.0), _metrics(250.0, 300.0, 1400.0))
    assert plan.action is ScrollAction.INCREMENTAL
    assert plan.state.range == ListRange(0, 25)
    assert plan.state.offset_type is OffsetType.FROM_BOTTOM
    assert plan.state.offset == 1_250.0
    assert plan.removed_items == 5


def test_removal_larger_than_overscan_is_rejected() -> None:
    plan = _plan(make_state(0, 24), _metrics(300.0, 100.0, 1200.0), measure=lambda _range: 500.0)
    assert plan.state.range == ListRange(0, 30)
    assert plan.state.offset == 0.0
    assert plan.removal_rejected is True
    assert plan.removed_items == 0
    assert plan.removed_px == 500.0
    assert plan.removal_failures == 1


def test_failures_shrink_the_next_removal() -> None:
    plan = _plan(make_state(0, 24), _metrics(300.0, 100.0, 1200.0), failures=1)
    assert plan.removed_items == 1
    assert plan.state.range == ListRange(1, 30)
    assert plan.removal_failures == 0


def test_empty_removal_keeps_failure_count() -> None:
    # Two items of overscan split across three failures round down to nothing.
    plan = _plan(make_state(0, 24), _metrics(300.0, 100.0, 1200.0), failures=2)
    assert plan.removed_items == 0
    assert plan.state.range == ListRange(0, 30)
    assert plan.removal_failures == 2


def test_upward_scroll_corrects_part_of_the_drift() -> None:
    state = make_state(10, 34, 400.0)
    plan = _plan(state, _metrics(950.0, 1_000.0, 1200.0))
    assert plan.action is ScrollAction.CORRECTED
    assert plan.offset_correction == 5.0
    assert plan.state.offset == 405.0
    assert plan.state.range == state.range


def test_drift_correction_is_complete_at_the_top() -> None:
    state = make_state(10, 34, 400.0)
    assert drift_correction(state, 0.0, 50.0, 50.0, BOUNDS) == 100.0


def test_drift_correction_is_zero_without_error_or_motion() -> None:
    assert drift_correction(make_state(10, 34, 500.0), 900.0, 50.0, 50.0, BOUNDS) == 0.0
    assert drift_correction(make_state(10, 34, 400.0), 900.0, 0.0, 50.0, BOUNDS) == 0.0


def test_reanchor_keeps_total_size() -> None:
    state = reanchor(make_state(0, 24, total=123.0), 5_000.0, 800.0, 50.0, 400.0, BOUNDS)
    assert state.range == ListRange(92, 124)
    assert state.total_content_size == 123.0


def test_flip_to_top_subtracts_measured_block() -> None:
    flipped = flip_to_top(make_state(0, 25, 1_250.0, offset_type=OffsetType.FROM_BOTTOM), 1_250.0)
    assert flipped.offset == 0.0
    assert flipped.offset_type is OffsetType.FROM_TOP
    top = make_state(0, 25, 10.0)
    assert flip_to_top(top, 999.0) is top


@pytest.mark.parametrize(
    ("start", "end", "offset", "expected"),
    [
        (0, 10_000, 0.0, 480_000.0),
        (9_976, 10_000, 498_800.0, 498_800.0 + 480_000.0),
        (92, 124, 4_600.0, 480_000.0 + 9_968 * 50.0),
    ],
)
def test_reconcile_total_size(start: int, end: int, offset: float, expected: float) -> None:
    state = make_state(start, end, offset)
    assert reconcile_total_size(state, 480_000.0, 50.0, BOUNDS) == expected
