"""Shared stop fixtures. All fixtures are explicit, no random generation."""

import math

import pytest

from travel_quest.config import TimelineConfig
from travel_quest.stops import Coordinates, Stop, Transport


def make_stop(stop_id, location="", lat=None, lng=None, date="", transport=Transport.PLANE, image=None):
    coords = None if lat is None else Coordinates(lat, lng)
    return Stop(id=stop_id, location=location, date=date, transport=transport, coordinates=coords, image=image)


PARIS = make_stop("1", "Paris", 48.8566, 2.3522, "2024-05-01")
ROME = make_stop("2", "Rome", 41.9028, 12.4964, "2024-05-04", Transport.TRAIN)
TOKYO = make_stop("3", "Tokyo", 35.6762, 139.6503, "2024-05-10", Transport.PLANE, image="data:image/png;base64,AAAA")
UNRESOLVED = make_stop("x", "Atlantis")
NON_FINITE = make_stop("y", "Nowhere", math.nan, 10.0)


@pytest.fixture
def config():
    return TimelineConfig()


@pytest.fixture
def trip():
    return [PARIS, ROME, TOKYO]


@pytest.fixture
def trip_with_gaps():
    return [PARIS, UNRESOLVED, ROME, NON_FINITE, TOKYO]
