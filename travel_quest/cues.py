"""One-shot audio/visual cues, computed from the absolute frame index."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, List, Optional, Tuple

from .config import TimelineConfig
from .timeline import Phase, PhaseState, arrival_start_frame

CAMERA_CLICK = "camera-click"


@dataclass(frozen=True)
class Cue:
    kind: str
    segment_index: int
    start_frame: int
    duration_frames: int

    @property
    def end_frame(self) -> int:
        return self.start_frame + self.duration_frames

    def contains(self, frame: int) -> bool:
        return self.start_frame <= frame < self.end_frame


@dataclass(frozen=True)
class EventFlags:
    click_fires: bool = False
    click_playing: bool = False
    shutter_closing: bool = False
    shutter_opening: bool = False
    flash_visible: bool = False
    photo_visible: bool = False


def click_frame(segment_index: int, config: TimelineConfig) -> int:
    """Absolute frame at which the shutter has fully closed for a segment."""
    return arrival_start_frame(segment_index, config) + config.transform_in_frames


def click_cue(segment_index: int, config: TimelineConfig) -> Cue:
    return Cue(CAMERA_CLICK, segment_index, click_frame(segment_index, config), config.click_cue_frames)


def schedule_cues(
    segment_count: int,
    config: TimelineConfig,
    *,
    suppressed: Collection[int] = (),
) -> Tuple[Cue, ...]:
    """Every one-shot cue of the composition, in frame order.

    Segments listed in ``suppressed`` arrive back at the starting point and
    get no click.
    """
    return tuple(
        click_cue(index, config) for index in range(max(0, segment_count)) if index not in suppressed
    )


def active_cues(
    frame: int, segment_count: int, config: TimelineConfig, *, suppressed: Collection[int] = ()
) -> List[Cue]:
    return [cue for cue in schedule_cues(segment_count, config, suppressed=suppressed) if cue.contains(frame)]


def cue_starting_at(
    frame: int, segment_count: int, config: TimelineConfig, *, suppressed: Collection[int] = ()
) -> Optional[Cue]:
    for cue in schedule_cues(segment_count, config, suppressed=suppressed):
        if cue.start_frame == frame:
            return cue
    return None


def event_flags(
    frame: int,
    state: PhaseState,
    segment_count: int,
    config: TimelineConfig,
    *,
    suppressed: Collection[int] = (),
) -> EventFlags:
    """Which one-shot and windowed effects are live on ``frame``.

    ``suppressed`` holds the segments that arrive back at the starting
    point. They have no arrival effects and their click never plays.
    """
    if state.phase in (Phase.INTRO, Phase.INSUFFICIENT):
        return EventFlags()
    # The clip keeps playing into the next phases, including the terminal one.
    playing = bool(active_cues(frame, segment_count, config, suppressed=suppressed))
    if state.phase is Phase.TERMINAL or state.segment_index in suppressed:
        return EventFlags(click_playing=playing)
    after_close = state.arrival_frame - config.transform_in_frames
    return EventFlags(
        click_fires=cue_starting_at(frame, segment_count, config, suppressed=suppressed) is not None,
        click_playing=playing,
        shutter_closing=state.phase is Phase.TRANSFORM_IN,
        shutter_opening=state.phase is Phase.TRANSFORM_OUT,
        flash_visible=state.phase.is_arrival and 0 <= after_close < config.flash_frames,
        photo_visible=state.phase in (Phase.PHOTO_HOLD, Phase.TRANSFORM_OUT),
    )
