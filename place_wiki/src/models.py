"""
Data model for place resolution.

SelectedPlace is what the autocomplete widget hands us; ArticleSummary is a
page summary from the encyclopedia, augmented with the badge, distance and
primary flag the pipeline derives for it.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class BadgeTag(Enum):
    """Classification label for an article summary."""
    HISTORIC_DISTRICT = "Historic district"
    MUSEUM = "Museum"
    PARK = "Park"
    UNIVERSITY = "University"
    AIRPORT = "Airport"
    STADIUM = "Stadium"
    BRIDGE = "Bridge"
    WATERFALL = "Waterfall"
    DAM = "Dam"
    LAKE = "Lake"
    RIVER = "River"
    MILL = "Mill"
    THEATER = "Theater"
    ZOO_AQUARIUM = "Zoo/Aquarium"
    RELIGIOUS_SITE = "Religious site"
    LIBRARY = "Library"
    FORT_CASTLE = "Fort/Castle"
    MONUMENT = "Monument"
    MARKET = "Market"
    TRAIL_GREENWAY = "Trail/Greenway"
    NEIGHBORHOOD = "Neighborhood"
    HISTORIC_HOUSE = "Historic house"
    FACTORY = "Factory/Mfg"
    NRHP_SITE = "NRHP site"
    COUNTY = "County"
    STATE_PROVINCE = "State/Province"
    COUNTRY = "Country"
    PLACE = "Place"

    @property
    def label(self) -> str:
        return self.value


ADMIN_BADGES = frozenset({BadgeTag.COUNTY, BadgeTag.STATE_PROVINCE, BadgeTag.COUNTRY})


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    @classmethod
    def from_any(cls, value: Any) -> Optional["LatLng"]:
        """Build from {lat, lng} / {lat, lon} mappings; None when unusable."""
        if not isinstance(value, dict):
            return None
        lat = value.get('lat')
        lng = value.get('lng', value.get('lon'))
        try:
            lat_f = float(lat)
            lng_f = float(lng)
        except (TypeError, ValueError):
            return None
        if math.isnan(lat_f) or math.isnan(lng_f):
            return None
        return cls(lat_f, lng_f)

    def to_dict(self) -> Dict[str, float]:
        return {'lat': self.lat, 'lng': self.lng}


@dataclass(frozen=True)
class AdminAreas:
    city: str = ""
    county: str = ""
    state: str = ""
    state_code: str = ""
    country: str = ""
    country_code: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AdminAreas":
        data = data or {}

        def _s(*keys: str) -> str:
            for k in keys:
                v = data.get(k)
                if v:
                    return str(v).strip()
            return ""

        return cls(
            city=_s('city'),
            county=_s('county'),
            state=_s('state'),
            state_code=_s('stateCode', 'state_code'),
            country=_s('country'),
            country_code=_s('countryCode', 'country_code'),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            'city': self.city,
            'county': self.county,
            'state': self.state,
            'stateCode': self.state_code,
            'country': self.country,
            'countryCode': self.country_code,
        }


@dataclass(frozen=True)
class SelectedPlace:
    """A place picked in the autocomplete widget. One per selection."""
    name: str = ""
    formatted_address: str = ""
    location: Optional[LatLng] = None
    admin: AdminAreas = field(default_factory=AdminAreas)
    types: tuple = ()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SelectedPlace":
        """Build from the widget's JSON, tolerating missing keys."""
        data = data or {}
        return cls(
            name=str(data.get('name') or '').strip(),
            formatted_address=str(data.get('formattedAddress') or data.get('address') or '').strip(),
            location=LatLng.from_any(data.get('location')),
            admin=AdminAreas.from_dict(data.get('admin')),
            types=tuple(data.get('types') or ()),
        )

    @property
    def city_or_name(self) -> str:
        return self.admin.city or self.name

    @property
    def composite_query(self) -> str:
        """City, state and country joined by spaces, blanks dropped."""
        parts = [self.city_or_name, self.admin.state, self.admin.country]
        return " ".join(p for p in parts if p).strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'formattedAddress': self.formatted_address,
            'location': self.location.to_dict() if self.location else None,
            'admin': self.admin.to_dict(),
            'types': list(self.types),
        }


@dataclass
class ArticleSummary:
    title: str
    description: str = ""
    extract: str = ""
    type: str = "standard"
    thumbnail_url: Optional[str] = None
    coordinates: Optional[LatLng] = None
    page_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    badge: Optional[BadgeTag] = None
    distance_km: Optional[float] = None
    is_primary: bool = False

    @classmethod
    def from_rest(cls, data: Dict[str, Any]) -> "ArticleSummary":
        """Build from a REST page/summary payload."""
        thumb = (data.get('thumbnail') or {}).get('source')
        urls = data.get('content_urls') or {}
        page_url = (urls.get('desktop') or {}).get('page') or data.get('url')
        return cls(
            title=data.get('title') or '',
            description=data.get('description') or '',
            extract=data.get('extract') or '',
            type=data.get('type') or 'standard',
            thumbnail_url=thumb,
            coordinates=LatLng.from_any(data.get('coordinates')),
            page_url=page_url,
            raw=data,
        )

    @property
    def is_disambiguation(self) -> bool:
        return self.type == 'disambiguation'

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape consumed by the result list."""
        badge = self.badge.label if self.badge else None
        dist = None
        if self.distance_km is not None and math.isfinite(self.distance_km):
            dist = round(self.distance_km, 1)
        return {
            'title': self.title,
            'description': self.description,
            'extract': self.extract or self.description or 'No summary available.',
            'thumbnail': self.thumbnail_url,
            'link': self.page_url,
            'coordinates': self.coordinates.to_dict() if self.coordinates else None,
            'badge': badge,
            'tag': badge or self.description or None,
            'distance_km': dist,
            'is_primary': self.is_primary,
        }


@dataclass(frozen=True)
class GeoHit:
    """One row of a proximity search."""
    title: str
    dist_m: float


Pool = List[ArticleSummary]
