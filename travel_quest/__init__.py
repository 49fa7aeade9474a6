"""Frame-driven timeline engine for travel quest videos."""
from .config import ConfigError, TimelineConfig
from .engine import RenderState, composition_duration, cue_sheet, render_state, timeline_duration
from .stops import Coordinates, ResolvedStopSequence, Stop, StopDataError, Transport
from .timeline import Phase, PhaseState, resolve_phase, total_duration

__all__ = [
    "ConfigError",
    "Coordinates",
    "Phase",
    "PhaseState",
    "RenderState",
    "ResolvedStopSequence",
    "Stop",
    "StopDataError",
    "TimelineConfig",
    "Transport",
    "composition_duration",
    "cue_sheet",
    "render_state",
    "resolve_phase",
    "timeline_duration",
    "total_duration",
]
