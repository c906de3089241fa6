"""Windowing exception types and recoverable-error policy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from virtually.api.types import ListRange


class WindowingError(RuntimeError):
    """Base class for windowing engine failures."""


class RangeNotRenderedError(WindowingError, LookupError):
    """Raised by adapters asked to measure items that are not mounted."""

    def __init__(self, requested: ListRange, rendered: ListRange | None) -> None:
        self.requested = requested
        self.rendered = rendered
        super().__init__(
            f"attempted to measure range [{requested.start}, {requested.end}) "
            f"outside rendered range {_describe(rendered)}"
        )


def _describe(rendered: ListRange | None) -> str:
    if rendered is None:
        return "<nothing rendered>"
    return f"[{rendered.start}, {rendered.end})"


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.DEBUG,
) -> None:
    """Log a tolerated exception together with its traceback."""
    logger.log(level, message, exc_info=True)
