"""Windowed rendering engine for long scrollable sequences."""

from virtually.api import ItemIndex, JumpOutcome, ListRange, OffsetType, RenderState, ViewportAdapter
from virtually.runtime.config import WindowingConfig
from virtually.runtime.host import VirtualListHost
from virtually.windowing import ItemSizeAverager, WindowingEngine

__all__ = [
    "ItemIndex",
    "ItemSizeAverager",
    "JumpOutcome",
    "ListRange",
    "OffsetType",
    "RenderState",
    "ViewportAdapter",
    "VirtualListHost",
    "WindowingConfig",
    "WindowingEngine",
]
