"""Summary statistics shown on the quest-complete screen."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

import pandas as pd

from .geo import haversine_miles
from .stops import Stop

RPG_QUOTES = (
    "The journey changes you. Return with stories worth telling.",
    "Every step was a quest. You are the hero of this tale.",
    "Adventure awaits those who dare. You dared.",
    "From distant lands to memories made, quest complete!",
    "Your map is full of marks. The next chapter awaits.",
)

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class QuestSummary:
    total_miles: float
    days_elapsed: int
    quote: str


def total_distance(stops: Iterable[Stop]) -> float:
    """Sum of great-circle miles between consecutive resolved stops."""
    points = [(s.coordinates.lat, s.coordinates.lng) for s in stops if s.coordinates is not None]
    if len(points) < 2:
        return 0.0
    return sum(haversine_miles(a, b) for a, b in zip(points, points[1:]))


def _parse_date(text: str) -> Optional[pd.Timestamp]:
    stamp = pd.to_datetime(text, errors="coerce")
    if pd.isna(stamp):
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    return stamp.normalize()


def days_between(stops: Iterable[Stop]) -> int:
    """Days from the first dated stop to the last dated stop, by list position.

    The stops are not sorted by date, so an itinerary entered out of order
    gives a list-order difference (clamped at 0) rather than elapsed time.
    """
    dated: List[str] = [s.date.strip() for s in stops if s.date and s.date.strip()]
    if len(dated) < 2:
        return 0
    first = _parse_date(dated[0])
    last = _parse_date(dated[-1])
    if first is None or last is None:
        return 0
    seconds = (last - first).total_seconds()
    return max(0, int(round(seconds / SECONDS_PER_DAY)))


def pick_quote(total_miles: float, days_elapsed: int) -> str:
    return RPG_QUOTES[(int(math.floor(total_miles)) + days_elapsed) % len(RPG_QUOTES)]


def summarize(stops: Iterable[Stop]) -> QuestSummary:
    stops = list(stops)
    miles = total_distance(stops)
    days = days_between(stops)
    return QuestSummary(total_miles=miles, days_elapsed=days, quote=pick_quote(miles, days))
