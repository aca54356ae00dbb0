"""
Turn autocomplete payloads into SelectedPlace objects.

Handles both Places API (New) address components (`longText`/`shortText`)
and the legacy shape (`long_name`/`short_name`).
"""
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, Optional

from .models import AdminAreas, LatLng, SelectedPlace

logger = logging.getLogger(__name__)


def _component_texts(component: Dict[str, Any]):
    long_text = component.get('longText') or component.get('long_name') or ''
    short_text = component.get('shortText') or component.get('short_name') or ''
    return str(long_text).strip(), str(short_text).strip()


def admin_from_address_components(components: Optional[Iterable[Dict[str, Any]]]) -> AdminAreas:
    """Key each component by its first type and pick the admin fields.

    city: locality, then postal_town, then sublocality.
    """
    by_type: Dict[str, tuple] = {}
    for component in components or []:
        if not isinstance(component, dict):
            continue
        types = component.get('types') or []
        if not types:
            continue
        by_type[types[0]] = _component_texts(component)

    def long_of(*keys: str) -> str:
        for k in keys:
            if k in by_type and by_type[k][0]:
                return by_type[k][0]
        return ''

    def short_of(key: str) -> str:
        return by_type.get(key, ('', ''))[1]

    return AdminAreas(
        city=long_of('locality', 'postal_town', 'sublocality'),
        county=long_of('administrative_area_level_2'),
        state=long_of('administrative_area_level_1'),
        state_code=short_of('administrative_area_level_1'),
        country=long_of('country'),
        country_code=short_of('country'),
    )


def _display_name(payload: Dict[str, Any]) -> str:
    name = payload.get('displayName') or payload.get('name') or ''
    if isinstance(name, dict):
        name = name.get('text') or ''
    return str(name).strip()


def place_from_autocomplete(payload: Optional[Dict[str, Any]]) -> Optional[SelectedPlace]:
    """SelectedPlace from a Places-style payload; None without a usable location."""
    payload = payload or {}
    location = LatLng.from_any(payload.get('location'))
    if location is None:
        logger.debug("Place %r has no valid location", _display_name(payload))
        return None
    return SelectedPlace(
        name=_display_name(payload),
        formatted_address=str(payload.get('formattedAddress') or '').strip(),
        location=location,
        admin=admin_from_address_components(payload.get('addressComponents')),
        types=tuple(payload.get('types') or ()),
    )


def parse_country_like(formatted_address: Optional[str]) -> str:
    """Last comma-separated segment of an address, taken as country/region."""
    if not formatted_address:
        return ''
    parts = [p.strip() for p in formatted_address.split(',')]
    return parts[-1] if parts else ''


def place_from_request(payload: Optional[Dict[str, Any]]) -> SelectedPlace:
    """Accept either the widget's normalized shape or a raw Places payload.

    A missing country is taken from the tail of the formatted address.
    """
    payload = payload or {}
    place = None
    if 'addressComponents' in payload:
        place = place_from_autocomplete(payload)
    if place is None:
        place = SelectedPlace.from_dict(payload)
    if not place.admin.country and ',' in place.formatted_address:
        place = replace(place, admin=replace(place.admin, country=parse_country_like(place.formatted_address)))
    return place
