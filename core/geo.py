#!/usr/bin/env python3
"""
Geo Distance - great-circle distance between two coordinates.

Missing or malformed coordinates resolve to an infinite distance so the
location dimension degrades to zero instead of matching by accident.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional
import json
import logging
import math

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return (
            _is_number(self.latitude)
            and _is_number(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )


def _is_number(value: Any) -> bool:
    # bool is an int subclass; True/False are not coordinates
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_coordinate(value: Any) -> Optional[Coordinate]:
    """Parse a coordinate from the shapes stored by the profile layer.

    Accepts a Coordinate, a (lat, lng) pair, a mapping with lat/lng or
    latitude/longitude keys, or a JSON string holding such a mapping.

    Returns:
        A valid Coordinate, or None when the value cannot be interpreted.
    """
    if value is None:
        return None

    if isinstance(value, Coordinate):
        return value if value.is_valid() else None

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.debug(f"Unparseable location string: {value!r}")
            return None

    lat = lng = None
    if isinstance(value, Mapping):
        lat = value.get('lat', value.get('latitude'))
        lng = value.get('lng', value.get('longitude'))
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        lat, lng = value

    if not (_is_number(lat) and _is_number(lng)):
        return None

    coordinate = Coordinate(float(lat), float(lng))
    return coordinate if coordinate.is_valid() else None


def distance_km(a: Any, b: Any) -> float:
    """Haversine distance in kilometres.

    Returns math.inf when either side is missing or malformed. Never raises.
    """
    point1 = parse_coordinate(a)
    point2 = parse_coordinate(b)
    if point1 is None or point2 is None:
        logger.debug(f"Invalid location data: {a!r}, {b!r}")
        return math.inf

    lat1 = math.radians(point1.latitude)
    lat2 = math.radians(point2.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(point2.longitude - point1.longitude)

    h = (math.sin(d_lat / 2) ** 2
         + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2)
    # rounding can push h a hair past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))
