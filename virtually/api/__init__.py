"""Public API boundary for virtually."""

from virtually.api.logging import LoggingConfig
from virtually.api.types import ItemIndex, JumpOutcome, ListRange, OffsetType, RenderState
from virtually.api.viewport import ScrollListener, ViewportAdapter

__all__ = [
    "ItemIndex",
    "JumpOutcome",
    "ListRange",
    "LoggingConfig",
    "OffsetType",
    "RenderState",
    "ScrollListener",
    "ViewportAdapter",
]
