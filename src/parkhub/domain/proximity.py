# File: src/parkhub/domain/proximity.py
"""
Distance Ranking

Pure functions used by the proximity search over partner cars:
- haversine_km: great-circle distance between two points on a sphere
  with the mean Earth radius
- rank_by_distance: full ascending sort of a collection by distance to a
  caller position (closest first)

Ranking is a stable sort, so items at the same distance keep the order in
which the partner returned them.
"""

import math
from typing import Callable, Iterable, List, Tuple, TypeVar

T = TypeVar('T')

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance in kilometres between (lat1, lon1) and (lat2, lon2)

    a = sin^2(dlat/2) + cos(lat1) * cos(lat2) * sin^2(dlon/2)
    d = 2 * R * atan2(sqrt(a), sqrt(1 - a))
    """
    lat1, lon1, lat2, lon2 = map(math.radians, (lat1, lon1, lat2, lon2))

    d_lat = lat2 - lat1
    d_lon = lon2 - lon1

    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2)
    # Rounding can push a just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def rank_by_distance(
    items: Iterable[T],
    longitude: float,
    latitude: float,
    position_of: Callable[[T], Tuple[float, float]]
) -> List[T]:
    """
    Sort items ascending by distance to (latitude, longitude).

    position_of maps an item to its own (latitude, longitude).
    Every item is ranked; this is not a top-k selection.
    """
    def distance(item: T) -> float:
        item_lat, item_lon = position_of(item)
        return haversine_km(item_lat, item_lon, latitude, longitude)

    return sorted(items, key=distance)
