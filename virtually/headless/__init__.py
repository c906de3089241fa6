"""Headless adapters for simulation and tests."""

from virtually.headless.viewport import SimulatedViewport

__all__ = ["SimulatedViewport"]
