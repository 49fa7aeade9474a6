"""Frame query entry point: ``render_state(frame, stops, config)``.

The host asks once per displayed frame. The stop list is filtered into a
:class:`ResolvedStopSequence` here, once, and every component indexes into
that sequence. No state survives between calls, so frames may be computed
out of order or in parallel workers.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Tuple, Union

from .camera import CameraTransform, Point, compose_camera, travel_point, travel_progress
from .config import TimelineConfig
from .cues import Cue, EventFlags, event_flags, schedule_cues
from .geo import bearing, hero_heading
from .quest_stats import QuestSummary, summarize
from .reveal import RevealCounts, ShutterState, flash_opacity, reveal_counts, shutter_state
from .stops import ResolvedStopSequence, Stop, Transport
from .timeline import Phase, PhaseState, resolve_phase, total_duration

MIN_RESOLVED_STOPS = 3
INSUFFICIENT_STOPS_MESSAGE = "Add a Starting Point and two Destinations with locations to see the journey."
DEFAULT_SCENERY = "default-scenery.png"

StopsArg = Union[ResolvedStopSequence, Iterable[Stop]]


@dataclass(frozen=True)
class HeroState:
    """Transport icon riding the route line."""

    transport: Transport
    position: Point
    rotation_deg: float
    scale_x: float
    bob: float
    visible: bool


@dataclass(frozen=True)
class RouteState:
    start: Point
    end: Point
    drawn_to: Point


@dataclass(frozen=True)
class RenderState:
    phase: Phase
    segment_index: int
    local_frame: int
    camera: CameraTransform
    reveal: Optional[RevealCounts] = None
    events: EventFlags = field(default_factory=EventFlags)
    arrival_frame: int = 0
    route: Optional[RouteState] = None
    hero: Optional[HeroState] = None
    shutter: Optional[ShutterState] = None
    flash_opacity: float = 0.0
    photo: Optional[str] = None
    character_bob: float = 0.0
    summary: Optional[QuestSummary] = None
    message: Optional[str] = None

    @property
    def camera_center(self) -> Point:
        return self.camera.center

    @property
    def camera_scale(self) -> float:
        return self.camera.scale

    @property
    def is_placeholder(self) -> bool:
        return self.phase is Phase.INSUFFICIENT

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def resolve_stops(stops: StopsArg) -> ResolvedStopSequence:
    if isinstance(stops, ResolvedStopSequence):
        return stops
    return ResolvedStopSequence(stops)


def placeholder_state(config: TimelineConfig) -> RenderState:
    camera = CameraTransform((config.plane_width / 2.0, config.plane_height / 2.0), 1.0, config.view_center)
    return RenderState(
        phase=Phase.INSUFFICIENT,
        segment_index=0,
        local_frame=0,
        camera=camera,
        message=INSUFFICIENT_STOPS_MESSAGE,
    )


def timeline_duration(stops: StopsArg, config: TimelineConfig) -> int:
    """``intro + segments * segment + terminal`` for the resolved stops."""
    return total_duration(resolve_stops(stops).segment_count, config)


def composition_duration(stops: StopsArg, config: TimelineConfig) -> int:
    """Frame count the host should play.

    With fewer than two resolved stops there is no journey at all and the
    placeholder runs for a fixed length.
    """
    resolved = resolve_stops(stops)
    if len(resolved) < 2:
        return config.placeholder_frames
    return total_duration(resolved.segment_count, config)


def cue_sheet(stops: StopsArg, config: TimelineConfig) -> Tuple[Cue, ...]:
    """Cues the host should schedule, matching what ``render_state`` fires."""
    resolved = resolve_stops(stops)
    if len(resolved) < MIN_RESOLVED_STOPS:
        return ()
    return schedule_cues(resolved.segment_count, config, suppressed=resolved.loop_segments)


def _segment_state(
    frame: int,
    state: PhaseState,
    resolved: ResolvedStopSequence,
    camera: CameraTransform,
    config: TimelineConfig,
) -> RenderState:
    from_stop, to_stop = resolved.segment(state.segment_index)
    start = resolved.projected(state.segment_index, config.plane_width, config.plane_height)
    end = resolved.projected(state.segment_index + 1, config.plane_width, config.plane_height)
    progress = travel_progress(state.local_frame, config) if state.phase is Phase.TRAVEL else 1.0
    drawn_to = travel_point(start, end, progress)

    rotation, scale_x = hero_heading(bearing(start[0], start[1], end[0], end[1]))
    hero = HeroState(
        transport=to_stop.transport,
        position=drawn_to,
        rotation_deg=rotation,
        scale_x=scale_x,
        bob=5.0 * math.sin(frame * 0.2),
        # Keep the icon for two frames into the zoom so it does not pop.
        visible=state.phase is Phase.TRAVEL or (state.phase is Phase.TRANSFORM_IN and state.arrival_frame < 2),
    )

    # A looping itinerary that lists the starting stop again has no arrival.
    arriving_at_start = resolved.arrives_at_start(state.segment_index)
    events = event_flags(frame, state, resolved.segment_count, config, suppressed=resolved.loop_segments)
    return RenderState(
        phase=state.phase,
        segment_index=state.segment_index,
        local_frame=state.local_frame,
        camera=camera,
        reveal=reveal_counts(state, to_stop.location, to_stop.date, config),
        events=events,
        arrival_frame=state.arrival_frame,
        route=RouteState(start=start, end=end, drawn_to=drawn_to),
        hero=hero,
        shutter=None if arriving_at_start else shutter_state(state, config),
        flash_opacity=0.0 if arriving_at_start else flash_opacity(state, config),
        photo=(to_stop.image or DEFAULT_SCENERY) if events.photo_visible else None,
    )


def render_state(frame: int, stops: StopsArg, config: Optional[TimelineConfig] = None) -> RenderState:
    """Everything the host needs to draw ``frame``.

    ``frame`` is expected in ``[0, duration)``; later frames repeat the
    terminal state and negative frames are not supported.
    """
    config = config or TimelineConfig()
    resolved = resolve_stops(stops)
    if len(resolved) < MIN_RESOLVED_STOPS:
        return placeholder_state(config)

    state = resolve_phase(frame, resolved.segment_count, config)
    camera = compose_camera(state, resolved, config)

    if state.phase is Phase.INTRO:
        return RenderState(
            phase=state.phase,
            segment_index=state.segment_index,
            local_frame=state.local_frame,
            camera=camera,
            character_bob=4.0 * math.sin(frame * 0.25),
        )

    if state.phase is Phase.TERMINAL:
        return RenderState(
            phase=state.phase,
            segment_index=state.segment_index,
            local_frame=state.local_frame,
            camera=camera,
            events=event_flags(frame, state, resolved.segment_count, config, suppressed=resolved.loop_segments),
            character_bob=4.0 * math.sin(state.local_frame * 0.2),
            summary=summarize(resolved),
        )

    return _segment_state(frame, state, resolved, camera, config)


def render_states(frames: Iterable[int], stops: StopsArg, config: Optional[TimelineConfig] = None) -> Tuple[RenderState, ...]:
    resolved = resolve_stops(stops)
    return tuple(render_state(frame, resolved, config) for frame in frames)
