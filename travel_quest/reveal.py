"""Typewriter text reveal, shutter blades and camera flash."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .config import TimelineConfig
from .easing import interpolate
from .timeline import Phase, PhaseState

DEFAULT_DESTINATION = "Destination"
MISSING_DATE = "—"


@dataclass(frozen=True)
class RevealCounts:
    destination_text: str
    destination_chars: int
    date_text: str
    date_chars: int

    @property
    def destination_visible(self) -> str:
        return self.destination_text[: self.destination_chars]

    @property
    def date_visible(self) -> str:
        return self.date_text[: self.date_chars]

    @property
    def typing(self) -> bool:
        """True while the destination name still shows a cursor."""
        return self.destination_chars < len(self.destination_text)


@dataclass(frozen=True)
class ShutterState:
    mode: str  # "close" | "open"
    progress: float
    blade_height: float


def visible_chars(text: str, elapsed: float, span: int) -> int:
    """Characters of ``text`` typed after ``elapsed`` frames of a ``span``-frame window."""
    count = math.floor(interpolate(elapsed, [0, span], [0, len(text) + 1]))
    return min(len(text), count)


def typewriter_frame(arrival_frame: int, config: TimelineConfig) -> int:
    return max(0, arrival_frame - config.transform_in_frames)


def reveal_counts(state: PhaseState, location: str, date: str, config: TimelineConfig) -> RevealCounts:
    destination = location or DEFAULT_DESTINATION
    if not state.phase.is_arrival:
        return RevealCounts(destination, 0, date, 0)
    typed = typewriter_frame(state.arrival_frame, config)
    date_typed = typed - config.date_reveal_delay
    return RevealCounts(
        destination_text=destination,
        destination_chars=visible_chars(destination, typed, config.destination_reveal_frames),
        date_text=date,
        date_chars=visible_chars(date, date_typed, config.date_reveal_frames) if date else 0,
    )


def shutter_state(state: PhaseState, config: TimelineConfig) -> Optional[ShutterState]:
    """Blade position while the shutter closes (transform-in) or opens (transform-out)."""
    half = config.video_height / 2.0
    if state.phase is Phase.TRANSFORM_IN:
        progress = interpolate(state.arrival_frame, [0, config.shutter_close_frames], [0.0, 1.0])
        return ShutterState("close", progress, progress * half)
    if state.phase is Phase.TRANSFORM_OUT:
        opened_at = config.transform_in_frames + config.photo_frames
        progress = interpolate(state.arrival_frame - opened_at, [0, config.shutter_open_frames], [1.0, 0.0])
        return ShutterState("open", progress, progress * half)
    return None


def flash_opacity(state: PhaseState, config: TimelineConfig) -> float:
    """White flash fading out from the instant the shutter finishes closing."""
    if not state.phase.is_arrival:
        return 0.0
    t = state.arrival_frame - config.transform_in_frames
    if t < 0:
        return 0.0
    return interpolate(t, [0, config.flash_frames], [1.0, 0.0])
