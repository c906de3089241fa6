"""Centralized windowing configuration ownership."""

from __future__ import annotations

import os
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True, slots=True)
class WindowingConfig:
    min_buffer_px: float = 200.0
    max_buffer_px: float = 400.0
    default_item_size: float = 50.0
    max_jump_attempts: int = 10


_WINDOWING_CONFIG: ContextVar[WindowingConfig | None] = ContextVar(
    "virtually_windowing_config", default=None
)


def _raw(name: str, *, env: Mapping[str, str] | None = None) -> str | None:
    value = os.getenv(name) if env is None else env.get(name)
    return None if value is None else str(value)


def _int(
    name: str,
    default: int,
    *,
    minimum: int | None = None,
    env: Mapping[str, str] | None = None,
) -> int:
    raw = _raw(name, env=env)
    if raw is None:
        value = int(default)
    else:
        try:
            value = int(raw.strip())
        except ValueError:
            value = int(default)
    if minimum is None:
        return value
    return max(int(minimum), value)


def _float(
    name: str,
    default: float,
    *,
    minimum: float | None = None,
    env: Mapping[str, str] | None = None,
) -> float:
    raw = _raw(name, env=env)
    if raw is None:
        value = float(default)
    else:
        try:
            value = float(raw.strip())
        except ValueError:
            value = float(default)
    if minimum is None:
        return value
    return max(float(minimum), value)


def load_windowing_config(*, env: Mapping[str, str] | None = None) -> WindowingConfig:
    defaults = WindowingConfig()
    min_buffer_px = _float(
        "VIRTUALLY_MIN_BUFFER_PX", defaults.min_buffer_px, minimum=0.0, env=env
    )
    max_buffer_px = _float(
        "VIRTUALLY_MAX_BUFFER_PX", defaults.max_buffer_px, minimum=0.0, env=env
    )
    return WindowingConfig(
        min_buffer_px=min_buffer_px,
        max_buffer_px=max(min_buffer_px, max_buffer_px),
        default_item_size=_float(
            "VIRTUALLY_DEFAULT_ITEM_SIZE", defaults.default_item_size, minimum=1.0, env=env
        ),
        max_jump_attempts=_int(
            "VIRTUALLY_MAX_JUMP_ATTEMPTS", defaults.max_jump_attempts, minimum=1, env=env
        ),
    )


def initialize_windowing_config(*, env: Mapping[str, str] | None = None) -> WindowingConfig:
    config = load_windowing_config(env=env)
    _WINDOWING_CONFIG.set(config)
    return config


def set_windowing_config(config: WindowingConfig) -> WindowingConfig:
    _WINDOWING_CONFIG.set(config)
    return config


def get_windowing_config() -> WindowingConfig:
    config = _WINDOWING_CONFIG.get()
    if config is not None:
        return config
    return initialize_windowing_config()


__all__ = [
    "WindowingConfig",
    "get_windowing_config",
    "initialize_windowing_config",
    "load_windowing_config",
    "set_windowing_config",
]
