"""Equirectangular projection, screen bearings and great-circle distance."""
from __future__ import annotations

import math
from typing import Tuple

EARTH_RADIUS_MILES = 3958.8


def project(lat: float, lng: float, width: float, height: float) -> Tuple[float, float]:
    x = (lng + 180.0) / 360.0 * width
    y = (1.0 - (lat + 90.0) / 180.0) * height
    return x, y


def unproject(x: float, y: float, width: float, height: float) -> Tuple[float, float]:
    """Inverse of :func:`project`; returns ``(lat, lng)``."""
    lng = x / width * 360.0 - 180.0
    lat = (1.0 - y / height) * 180.0 - 90.0
    return lat, lng


def bearing(x1: float, y1: float, x2: float, y2: float) -> float:
    """Screen bearing in degrees: 0 points right, 90 points down."""
    return math.degrees(math.atan2(y2 - y1, x2 - x1))


def haversine_miles(start: Tuple[float, float], end: Tuple[float, float]) -> float:
    lat1, lon1 = math.radians(start[0]), math.radians(start[1])
    lat2, lon2 = math.radians(end[0]), math.radians(end[1])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_MILES * c


def hero_heading(bearing_deg: float) -> Tuple[float, float]:
    """Return ``(rotation_deg, scale_x)`` for the transport icon.

    Icons face right. Headings into the left half-plane are mirrored and the
    rotation is taken from the opposite direction so the art stays upright.
    """
    left = (90.0 < bearing_deg <= 180.0) or (-180.0 <= bearing_deg < -90.0)
    if left:
        return bearing_deg - 180.0, -1.0
    return bearing_deg, 1.0
