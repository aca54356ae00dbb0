"""
Relevance scoring for nearby points of interest.

score = base(badge) + max(0, proximity_cap - distance_km)

The base table ranks badge types by general interest; the proximity bonus
decays linearly to zero at proximity_cap kilometers.
"""
import math
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from .models import BadgeTag

DEFAULT_PROXIMITY_CAP_KM = 6.0

BASE_SCORES: Dict[BadgeTag, float] = {
    BadgeTag.HISTORIC_DISTRICT: 7,
    BadgeTag.NRHP_SITE: 7,
    BadgeTag.MUSEUM: 6,
    BadgeTag.PARK: 6,
    BadgeTag.UNIVERSITY: 6,
    BadgeTag.STADIUM: 5,
    BadgeTag.AIRPORT: 5,
    BadgeTag.FORT_CASTLE: 5,
    BadgeTag.HISTORIC_HOUSE: 5,
    BadgeTag.ZOO_AQUARIUM: 5,
    BadgeTag.MONUMENT: 5,
    BadgeTag.THEATER: 4,
    BadgeTag.BRIDGE: 4,
    BadgeTag.WATERFALL: 4,
    BadgeTag.DAM: 4,
    BadgeTag.LAKE: 4,
    BadgeTag.RELIGIOUS_SITE: 4,
    BadgeTag.LIBRARY: 4,
    BadgeTag.RIVER: 3,
    BadgeTag.MILL: 3,
    BadgeTag.MARKET: 3,
    BadgeTag.TRAIL_GREENWAY: 3,
    BadgeTag.FACTORY: 2,
    BadgeTag.NEIGHBORHOOD: 2,
    BadgeTag.COUNTY: 1,
    BadgeTag.STATE_PROVINCE: 1,
    BadgeTag.COUNTRY: 1,
    BadgeTag.PLACE: 1,
}


def base_score(badge: Optional[BadgeTag]) -> float:
    return BASE_SCORES.get(badge, BASE_SCORES[BadgeTag.PLACE])


def score_item(badge: Optional[BadgeTag], distance_km: Optional[float],
               proximity_cap: float = DEFAULT_PROXIMITY_CAP_KM) -> float:
    """Badge interest plus a proximity bonus; an unknown distance earns no bonus."""
    if distance_km is None or math.isnan(distance_km):
        distance_km = math.inf
    return base_score(badge) + max(0.0, proximity_cap - max(0.0, distance_km))


T = TypeVar("T")


def rank_by_score(items: Sequence[T], key: Callable[[T], float]) -> List[T]:
    """Highest score first; ties keep discovery order (sorted() is stable)."""
    return sorted(items, key=key, reverse=True)
