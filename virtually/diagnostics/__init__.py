"""Windowing diagnostics package."""

from virtually.diagnostics.event import WindowEvent
from virtually.diagnostics.trace import WindowTrace

__all__ = ["WindowEvent", "WindowTrace"]
