"""Drive a headless windowed list from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

import numpy as np

from virtually.api.types import RenderState
from virtually.diagnostics import WindowTrace
from virtually.headless import SimulatedViewport
from virtually.runtime.config import WindowingConfig, load_windowing_config
from virtually.runtime.host import VirtualListHost
from virtually.runtime.logging import setup_logging, shutdown_logging

_LOG = logging.getLogger("virtually.tools")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m virtually.tools.simulate",
        description="Scroll and jump through a simulated windowed list.",
    )
    parser.add_argument("--items", type=int, default=10_000, help="number of items")
    parser.add_argument("--item-size", type=float, default=50.0, help="mean item size in px")
    parser.add_argument(
        "--jitter", type=float, default=0.0, help="max random size deviation in px"
    )
    parser.add_argument("--seed", type=int, default=0, help="rng seed for --jitter")
    parser.add_argument("--viewport", type=float, default=800.0, help="viewport size in px")
    parser.add_argument(
        "--scroll",
        type=float,
        action="append",
        default=[],
        help="scroll to this offset (repeatable)",
    )
    parser.add_argument("--step", type=float, default=120.0, help="scroll increment in px")
    parser.add_argument(
        "--jump", type=int, action="append", default=[], help="jump to this index (repeatable)"
    )
    parser.add_argument("--min-buffer", type=float, default=None)
    parser.add_argument("--max-buffer", type=float, default=None)
    parser.add_argument("--format", choices=("text", "json"), default="text")
    parser.add_argument("--trace", action="store_true", help="dump the transition trace")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    parser.add_argument("--log-format", choices=("text", "json"), default="json")
    return parser


def _item_sizes(args: argparse.Namespace) -> np.ndarray:
    sizes = np.full(args.items, args.item_size, dtype=np.float64)
    if args.jitter > 0:
        rng = np.random.default_rng(args.seed)
        sizes = sizes + rng.integers(-int(args.jitter), int(args.jitter) + 1, size=args.items)
    return np.maximum(sizes, 1.0)


def _config(args: argparse.Namespace) -> WindowingConfig:
    base = load_windowing_config()
    min_buffer = base.min_buffer_px if args.min_buffer is None else max(0.0, args.min_buffer)
    max_buffer = base.max_buffer_px if args.max_buffer is None else max(0.0, args.max_buffer)
    return WindowingConfig(
        min_buffer_px=min_buffer,
        max_buffer_px=max(min_buffer, max_buffer),
        default_item_size=base.default_item_size,
        max_jump_attempts=base.max_jump_attempts,
    )


def _row(label: str, state: RenderState, viewport: SimulatedViewport) -> dict[str, Any]:
    return {
        "op": label,
        "scroll": viewport.get_scroll_offset(),
        "range": [state.range.start, state.range.end],
        "offset": state.offset,
        "offset_type": state.offset_type.value,
        "total": state.total_content_size,
    }


def _emit(row: dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(row))
        return
    print(
        f"{row['op']:<14} scroll={row['scroll']:>10.1f} "
        f"range=[{row['range'][0]}, {row['range'][1]}) "
        f"offset={row['offset']:.1f} total={row['total']:.1f}"
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.items < 0:
        parser.error("--items must be >= 0")
    if args.item_size <= 0 or args.viewport <= 0 or args.step <= 0:
        parser.error("--item-size, --viewport and --step must be > 0")

    setup_logging(file_path=args.log_file, file_format=args.log_format)
    try:
        return _run(args)
    finally:
        shutdown_logging()


def _run(args: argparse.Namespace) -> int:
    viewport = SimulatedViewport(_item_sizes(args), args.viewport)
    trace = WindowTrace(capacity=10_000) if args.trace else None
    host = VirtualListHost(
        viewport,
        start_index=0,
        end_index=args.items,
        config=_config(args),
        trace=trace,
    )
    state = host.mount()
    _emit(_row("mount", state, viewport), args.format)

    for target in args.scroll:
        while viewport.get_scroll_offset() != target:
            current = viewport.get_scroll_offset()
            step = min(args.step, abs(target - current))
            moved = viewport.user_scroll(current + step if target > current else current - step)
            if moved == current:
                break
        _emit(_row(f"scroll:{target:g}", host.state or state, viewport), args.format)

    for index in args.jump:
        outcome = host.engine.jump_to_index(index)
        row = _row(f"jump:{index}", host.state or state, viewport)
        row["landed"] = outcome.landed
        row["attempts"] = outcome.attempts
        _emit(row, args.format)

    if trace is not None:
        for event in trace.snapshot():
            print(json.dumps(event.to_dict()))
    host.unmount()
    state = host.state or state
    _LOG.info(
        "simulation finished scrolls=%d jumps=%d",
        len(args.scroll),
        len(args.jump),
        extra={
            "range": [state.range.start, state.range.end],
            "scroll": viewport.get_scroll_offset(),
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
