"""Structured windowing trace event."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from virtually.api.types import ListRange, OffsetType


@dataclass(frozen=True, slots=True)
class WindowEvent:
    """One recorded engine transition."""

    seq: int
    name: str
    range: ListRange
    offset: float
    offset_type: OffsetType
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "name": self.name,
            "range": [self.range.start, self.range.end],
            "offset": self.offset,
            "offset_type": self.offset_type.value,
            "metadata": dict(self.metadata),
        }
