"""Phase resolution for the intro / segments / quest-complete timeline.

Every function here is a pure function of the absolute frame index, the
number of segments and the configuration. Nothing is accumulated between
frames, so any frame can be queried in any order.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .config import TimelineConfig


class Phase(str, Enum):
    INTRO = "intro"
    TRAVEL = "travel"
    TRANSFORM_IN = "arrival-transform-in"
    PHOTO_HOLD = "photo-hold"
    TRANSFORM_OUT = "arrival-transform-out"
    TERMINAL = "terminal"
    INSUFFICIENT = "insufficient-stops"

    @property
    def is_arrival(self) -> bool:
        return self in (Phase.TRANSFORM_IN, Phase.PHOTO_HOLD, Phase.TRANSFORM_OUT)


@dataclass(frozen=True)
class PhaseState:
    """Active phase plus the offsets needed to animate it.

    ``local_frame`` is relative to the start of the intro, the segment or the
    terminal window. ``arrival_frame`` is relative to the end of the travel
    sub-phase and stays 0 outside the arrival phases.
    """

    phase: Phase
    segment_index: int
    local_frame: int
    arrival_frame: int = 0


def total_duration(segment_count: int, config: TimelineConfig) -> int:
    segments = max(0, segment_count)
    return config.intro_frames + segments * config.segment_frames + config.terminal_frames


def terminal_start_frame(segment_count: int, config: TimelineConfig) -> int:
    return config.intro_frames + max(0, segment_count) * config.segment_frames


def segment_start_frame(segment_index: int, config: TimelineConfig) -> int:
    return config.intro_frames + segment_index * config.segment_frames


def arrival_start_frame(segment_index: int, config: TimelineConfig) -> int:
    return segment_start_frame(segment_index, config) + config.travel_frames


def resolve_phase(frame: int, segment_count: int, config: TimelineConfig) -> PhaseState:
    """Return the single phase active at ``frame``.

    Frames at or past the terminal start repeat the terminal phase, which
    always reports the final segment.
    """
    if frame < config.intro_frames:
        return PhaseState(Phase.INTRO, 0, frame)

    terminal_start = terminal_start_frame(segment_count, config)
    if frame >= terminal_start:
        return PhaseState(Phase.TERMINAL, segment_count - 1, frame - terminal_start)

    journey_frame = frame - config.intro_frames
    segment_index, local_frame = divmod(journey_frame, config.segment_frames)
    if local_frame < config.travel_frames:
        return PhaseState(Phase.TRAVEL, segment_index, local_frame)

    arrival = local_frame - config.travel_frames
    if arrival < config.transform_in_frames:
        phase = Phase.TRANSFORM_IN
    elif arrival < config.transform_in_frames + config.photo_frames:
        phase = Phase.PHOTO_HOLD
    else:
        phase = Phase.TRANSFORM_OUT
    return PhaseState(phase, segment_index, local_frame, arrival)
