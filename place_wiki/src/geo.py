"""
Great-circle distance helpers.
"""
import logging
import math
from typing import Optional

from .models import ArticleSummary, LatLng

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0088


def distance_km(a: Optional[LatLng], b: Optional[LatLng]) -> float:
    """Haversine distance in kilometers; inf when either point is missing."""
    if a is None or b is None:
        return math.inf
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lng - a.lng)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # clamp: rounding can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


async def resolve_distance(summary: Optional[ArticleSummary], origin: Optional[LatLng], provider) -> float:
    """Distance from origin to the article, looking up its coordinate by
    title when the summary carries none. inf when nothing is resolvable."""
    if summary is None or origin is None:
        return math.inf
    coords = summary.coordinates
    if coords is None and summary.title:
        coords = await provider.fetch_coordinates(summary.title)
        if coords is not None:
            summary.coordinates = coords
        else:
            logger.debug("No coordinates for %r", summary.title)
    return distance_km(origin, coords)
