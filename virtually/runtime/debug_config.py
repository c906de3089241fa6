"""Debug configuration sourced from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class DebugConfig:
    """Immutable debug configuration."""

    trace_enabled: bool
    trace_capacity: int
    log_level: str


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve log level with package-prefixed override."""
    value = os.getenv("VIRTUALLY_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper()


def load_debug_config() -> DebugConfig:
    """Load immutable debug configuration from env vars."""
    return DebugConfig(
        trace_enabled=_flag("VIRTUALLY_DEBUG_TRACE", False),
        trace_capacity=max(1, _int("VIRTUALLY_DEBUG_TRACE_CAPACITY", 1000)),
        log_level=resolve_log_level_name(),
    )
