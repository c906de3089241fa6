"""Public value types for windowed list rendering."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OffsetType(Enum):
    """Edge the rendered block offset is measured from."""

    FROM_TOP = "from_top"
    FROM_BOTTOM = "from_bottom"


@dataclass(frozen=True, slots=True)
class ListRange:
    """Contiguous index range, start inclusive and end exclusive."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"range start {self.start} is past end {self.end}")

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, other: ListRange) -> bool:
        """Return whether ``other`` lies fully inside this range."""
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True, slots=True)
class RenderState:
    """Render snapshot consumed by the host on every cycle."""

    range: ListRange
    offset: float
    offset_type: OffsetType
    total_content_size: float


@dataclass(frozen=True, slots=True)
class ItemIndex:
    """Item plus a pixel offset anchored at one viewport edge."""

    index: int
    position_offset: float = 0.0
    offset_type: OffsetType = OffsetType.FROM_TOP


@dataclass(frozen=True, slots=True)
class JumpOutcome:
    """Result of one jump-to-index request."""

    landed: bool
    attempts: int
    scroll_offset: float
