"""Camera-follow transform over the projection plane."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .config import TimelineConfig
from .easing import clamp, damped_spring_value, interpolate, lerp
from .stops import ResolvedStopSequence
from .timeline import Phase, PhaseState

Point = Tuple[float, float]
Matrix = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]


@dataclass(frozen=True)
class CameraTransform:
    """``translate(view_center) . scale(zoom) . translate(-center)``.

    ``center`` is the plane point kept under ``view_center`` on screen.
    """

    center: Point
    scale: float
    view_center: Point

    def apply(self, x: float, y: float) -> Point:
        return (
            self.view_center[0] + self.scale * (x - self.center[0]),
            self.view_center[1] + self.scale * (y - self.center[1]),
        )

    def invert(self, sx: float, sy: float) -> Point:
        return (
            self.center[0] + (sx - self.view_center[0]) / self.scale,
            self.center[1] + (sy - self.view_center[1]) / self.scale,
        )

    def matrix(self) -> Matrix:
        tx = self.view_center[0] - self.scale * self.center[0]
        ty = self.view_center[1] - self.scale * self.center[1]
        return ((self.scale, 0.0, tx), (0.0, self.scale, ty), (0.0, 0.0, 1.0))

    def css(self) -> str:
        vx, vy = self.view_center
        cx, cy = self.center
        return f"translate({vx}px, {vy}px) scale({self.scale}) translate({-cx}px, {-cy}px)"


def travel_progress(local_frame: int, config: TimelineConfig) -> float:
    if config.travel_frames == 0:
        return 1.0
    return clamp(local_frame / config.travel_frames)


def travel_zoom(local_frame: int, config: TimelineConfig) -> float:
    if config.travel_zoom_mode == "constant":
        return config.travel_zoom
    eased = damped_spring_value(
        local_frame,
        config.fps,
        stiffness=config.spring_stiffness,
        mass=config.spring_mass,
        damping=config.spring_damping,
    )
    return lerp(1.0, config.travel_zoom, eased)


def travel_point(start: Point, end: Point, progress: float) -> Point:
    return lerp(start[0], end[0], progress), lerp(start[1], end[1], progress)


def compose_camera(state: PhaseState, stops: ResolvedStopSequence, config: TimelineConfig) -> CameraTransform:
    view = config.view_center
    if state.phase is Phase.INTRO or state.phase is Phase.INSUFFICIENT or stops.segment_count == 0:
        return CameraTransform((config.plane_width / 2.0, config.plane_height / 2.0), 1.0, view)

    start = stops.projected(state.segment_index, config.plane_width, config.plane_height)
    end = stops.projected(state.segment_index + 1, config.plane_width, config.plane_height)

    if state.phase is Phase.TRAVEL:
        center = travel_point(start, end, travel_progress(state.local_frame, config))
        return CameraTransform(center, travel_zoom(state.local_frame, config), view)

    if state.phase is Phase.TRANSFORM_IN:
        # Travel has finished, so the pan starts at the travel end point.
        from_center = travel_point(start, end, travel_progress(config.travel_frames, config))
        from_scale = travel_zoom(config.travel_frames, config)
        span = [0, config.transform_in_frames]
        t = state.arrival_frame
        center = (
            interpolate(t, span, [from_center[0], end[0]]),
            interpolate(t, span, [from_center[1], end[1]]),
        )
        return CameraTransform(center, interpolate(t, span, [from_scale, config.arrival_zoom]), view)

    return CameraTransform(end, config.arrival_zoom, view)
