"""Domain port definitions for adapters."""

from __future__ import annotations

from .clock import Clock, Deadline, SystemClock
from .control_plane import ControlPlane

__all__ = ["Clock", "ControlPlane", "Deadline", "SystemClock"]
