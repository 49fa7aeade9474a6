"""Stop records, the resolved stop sequence and loaders for stop files."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .geo import project

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"location", "latitude", "longitude"}
OPTIONAL_COLUMNS = ["id", "date", "transport", "image"]


class StopDataError(ValueError):
    """Raised when persisted stop data cannot be read."""


class Transport(str, Enum):
    PLANE = "plane"
    CAR = "car"
    TRAIN = "train"
    SHIP = "ship"
    BUS = "bus"

    @classmethod
    def parse(cls, value: Any) -> "Transport":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return cls.PLANE
        try:
            return cls(text)
        except ValueError:
            logger.warning("Unknown transport %r; using plane", value)
            return cls.PLANE


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lng)


@dataclass(frozen=True)
class Stop:
    id: str
    location: str = ""
    date: str = ""
    transport: Transport = Transport.PLANE
    coordinates: Optional[Coordinates] = None
    image: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.coordinates is not None and self.coordinates.is_finite

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "location": self.location,
            "date": self.date,
            "transport": self.transport.value,
            "coordinates": (
                None if self.coordinates is None else {"lat": self.coordinates.lat, "lng": self.coordinates.lng}
            ),
        }
        if self.image is not None:
            data["image"] = self.image
        return data


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def coordinates_from_geocode(result: Optional[Mapping[str, Any]]) -> Optional[Coordinates]:
    """Turn a geocoder response into coordinates, or ``None`` for any failure.

    Network errors and not-found answers are treated the same way.
    """
    if not isinstance(result, Mapping) or "error" in result:
        return None
    coords = Coordinates(_to_float(result.get("latitude")), _to_float(result.get("longitude")))
    return coords if coords.is_finite else None


def _coordinates_from_dict(raw: Any) -> Optional[Coordinates]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise StopDataError(f"coordinates must be an object or null, got {type(raw).__name__}")
    return Coordinates(_to_float(raw.get("lat")), _to_float(raw.get("lng")))


def stop_from_dict(raw: Mapping[str, Any]) -> Stop:
    """Parse one stop in the persisted ``{id, location, date, ...}`` shape."""
    if not isinstance(raw, Mapping):
        raise StopDataError(f"stop must be an object, got {type(raw).__name__}")
    stop_id = raw.get("id")
    if stop_id is None or str(stop_id) == "":
        raise StopDataError("stop is missing an id")
    image = raw.get("image")
    return Stop(
        id=str(stop_id),
        location=str(raw.get("location") or ""),
        date=str(raw.get("date") or ""),
        transport=Transport.parse(raw.get("transport")),
        coordinates=_coordinates_from_dict(raw.get("coordinates")),
        image=str(image) if image else None,
    )


def stops_from_list(items: Iterable[Mapping[str, Any]]) -> List[Stop]:
    if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
        raise StopDataError("stops must be a list")
    return [stop_from_dict(item) for item in items]


def _cell(row: pd.Series, column: str) -> str:
    if column not in row or pd.isna(row[column]):
        return ""
    return str(row[column]).strip()


def load_stops_csv(csv_path: Path) -> List[Stop]:
    df = pd.read_csv(csv_path, dtype=str)
    missing = REQUIRED_COLUMNS.difference(df.columns)
    if missing:
        missing_list = ", ".join(sorted(missing))
        raise StopDataError(f"Missing required columns: {missing_list}")

    for col in ("latitude", "longitude"):
        df[col] = pd.to_numeric(df[col], errors="coerce")

    df = df.reset_index(drop=True)
    stops: List[Stop] = []
    for idx, row in df.iterrows():
        lat, lng = row["latitude"], row["longitude"]
        coords = None if pd.isna(lat) or pd.isna(lng) else Coordinates(float(lat), float(lng))
        stops.append(
            Stop(
                id=_cell(row, "id") or str(idx + 1),
                location=_cell(row, "location"),
                date=_cell(row, "date"),
                transport=Transport.parse(_cell(row, "transport")),
                coordinates=coords,
                image=_cell(row, "image") or None,
            )
        )
    return stops


def load_stops(path: Path) -> List[Stop]:
    """Load stops from a ``.csv`` table or a ``.json`` list of persisted stops."""
    if path.suffix.lower() == ".csv":
        return load_stops_csv(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise StopDataError(f"{path} is not valid JSON: {exc}") from exc
    if isinstance(payload, Mapping):
        payload = payload.get("stops", [])
    return stops_from_list(payload)


class ResolvedStopSequence(Sequence[Stop]):
    """Stops with usable coordinates, in their original list order.

    Segment ``i`` runs from resolved stop ``i`` to resolved stop ``i + 1``.
    """

    def __init__(self, stops: Iterable[Stop]):
        kept: List[Stop] = []
        for stop in stops:
            if stop.is_resolved:
                kept.append(stop)
            else:
                logger.debug("Skipping unresolved stop %s (%r)", stop.id, stop.location)
        self._stops: Tuple[Stop, ...] = tuple(kept)

    def __len__(self) -> int:
        return len(self._stops)

    def __getitem__(self, index):  # type: ignore[override]
        return self._stops[index]

    def __iter__(self) -> Iterator[Stop]:
        return iter(self._stops)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResolvedStopSequence):
            return NotImplemented
        return self._stops == other._stops

    def __hash__(self) -> int:
        return hash(self._stops)

    def __repr__(self) -> str:
        return f"ResolvedStopSequence({[s.id for s in self._stops]!r})"

    @property
    def segment_count(self) -> int:
        return max(0, len(self._stops) - 1)

    def segment(self, index: int) -> Tuple[Stop, Stop]:
        return self._stops[index], self._stops[index + 1]

    def arrives_at_start(self, index: int) -> bool:
        """True when segment ``index`` ends on the stop the journey started from."""
        return self._stops[index + 1].id == self._stops[0].id

    @property
    def loop_segments(self) -> FrozenSet[int]:
        return frozenset(i for i in range(self.segment_count) if self.arrives_at_start(i))

    def projected(self, index: int, width: float, height: float) -> Tuple[float, float]:
        # Only resolved stops are kept, so coordinates are always present.
        coords = self._stops[index].coordinates
        return project(coords.lat, coords.lng, width, height)  # type: ignore[union-attr]
