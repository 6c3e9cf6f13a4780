"""Interaction state for one tracker session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tracker.workout.model import Coordinates

Phase = Literal["idle", "awaiting_input"]


@dataclass
class SessionState:
    phase: Phase = "idle"
    pending_location: Coordinates | None = None
    position: Coordinates | None = None
    map_ready: bool = False
