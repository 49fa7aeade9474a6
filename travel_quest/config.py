"""Timing and layout constants for the travel quest composition."""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Tuple

TRAVEL_ZOOM_MODES = ("constant", "spring")


class ConfigError(ValueError):
    """Raised when a timeline configuration is inconsistent."""


@dataclass(frozen=True)
class TimelineConfig:
    fps: int = 30
    intro_frames: int = 45
    travel_frames: int = 50
    transform_in_frames: int = 15
    photo_frames: int = 60
    transform_out_frames: int = 10
    terminal_frames: int = 90
    placeholder_frames: int = 150

    # Equirectangular plane the camera moves over.
    plane_width: float = 800.0
    plane_height: float = 400.0
    view_center: Tuple[float, float] = (400.0, 320.0)

    travel_zoom: float = 2.0
    arrival_zoom: float = 2.0
    travel_zoom_mode: str = "constant"
    spring_stiffness: float = 100.0
    spring_mass: float = 1.0
    spring_damping: Optional[float] = None

    destination_reveal_frames: int = 35
    date_reveal_delay: int = 35
    date_reveal_frames: int = 20

    shutter_close_frames: int = 15
    shutter_open_frames: int = 10
    flash_frames: int = 10
    click_cue_frames: int = 60

    video_width: int = 1080
    video_height: int = 1080

    def __post_init__(self) -> None:
        if self.fps <= 0:
            raise ConfigError(f"fps must be positive, got {self.fps}")
        for name in (
            "intro_frames",
            "travel_frames",
            "transform_in_frames",
            "photo_frames",
            "transform_out_frames",
            "terminal_frames",
            "destination_reveal_frames",
            "date_reveal_delay",
            "date_reveal_frames",
            "shutter_close_frames",
            "shutter_open_frames",
            "flash_frames",
            "click_cue_frames",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if self.segment_frames <= 0:
            raise ConfigError("a segment must last at least one frame")
        if self.plane_width <= 0 or self.plane_height <= 0:
            raise ConfigError("plane dimensions must be positive")
        if self.travel_zoom_mode not in TRAVEL_ZOOM_MODES:
            choices = ", ".join(TRAVEL_ZOOM_MODES)
            raise ConfigError(f"travel_zoom_mode must be one of: {choices}")
        if self.travel_zoom <= 0 or self.arrival_zoom <= 0:
            raise ConfigError("zoom levels must be positive")
        if self.spring_stiffness <= 0 or self.spring_mass <= 0:
            raise ConfigError("spring_stiffness and spring_mass must be positive")
        if self.spring_damping is not None and self.spring_damping < 0:
            raise ConfigError("spring_damping must not be negative")
        # JSON overrides deliver lists.
        try:
            x, y = self.view_center
            center = (float(x), float(y))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"view_center must be a pair of numbers, got {self.view_center!r}") from exc
        object.__setattr__(self, "view_center", center)

    @property
    def arrival_frames(self) -> int:
        return self.transform_in_frames + self.photo_frames + self.transform_out_frames

    @property
    def segment_frames(self) -> int:
        return self.travel_frames + self.arrival_frames

    @classmethod
    def from_mapping(cls, overrides: Optional[Mapping[str, Any]]) -> "TimelineConfig":
        """Build a config from a mapping of field overrides, rejecting unknown keys."""
        if not overrides:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(overrides).difference(known)
        if unknown:
            raise ConfigError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        return cls(**dict(overrides))
