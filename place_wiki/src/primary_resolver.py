"""
Primary article resolution.

Finds the one article that *is* the selected place: not an administrative
container, not a point of interest. Candidate titles come from an ordered
list of lazy strategies; the first candidate that passes the acceptance
check wins and nothing after it is fetched.

Strategy order:
  1. bare admin-city and place names (and their pre-comma prefixes)
  2. one near-match search on "city state country"
  3. formatted titles: "City, State", "City (State)", "City, ST",
     "City, Country", "City of City", the raw place name
  4. text search: "{name} city", "{name} municipality", "city state country"
  5. geosearch around the place's coordinate
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional, Tuple

from place_wiki.config import Config, get_config
from place_wiki.providers.wikipedia_provider import lookup_summary

from . import tracing
from .classifier import detect_badge, looks_like_place_name
from .geo import resolve_distance
from .models import ADMIN_BADGES, ArticleSummary, BadgeTag, SelectedPlace

logger = logging.getLogger(__name__)

GOVERNMENT_BODY_RX = re.compile(
    r'\S\s+(?:council|legislature|parliament|board|commission|authority|department)\b',
    re.IGNORECASE,
)
MAYOR_OF_RX = re.compile(r'\bmayor of\b', re.IGNORECASE)

ACCEPTED_BADGES = frozenset({BadgeTag.PLACE, BadgeTag.COUNTRY, BadgeTag.STATE_PROVINCE})


@dataclass
class Verdict:
    accepted: bool
    reason: str = ""
    badge: Optional[BadgeTag] = None
    distance_km: float = math.inf


def _dedupe(values) -> List[str]:
    out: List[str] = []
    for v in values:
        v = (v or "").strip()
        if v and v not in out:
            out.append(v)
    return out


def is_government_body_title(title: str) -> bool:
    return bool(GOVERNMENT_BODY_RX.search(title or "") or MAYOR_OF_RX.search(title or ""))


def is_sub_place_title(title: str, place: SelectedPlace) -> bool:
    """True for titles like "New City, Chicago" when resolving Chicago: the
    suffix names the queried place but the prefix names something inside it."""
    if ',' not in (title or ""):
        return False
    prefix, suffix = (p.strip().casefold() for p in title.split(',', 1))
    names = {n.casefold() for n in _dedupe([place.name, place.admin.city, place.name.split(',')[0]])}
    return suffix in names and prefix not in names


class PrimaryAcceptance:
    """Acceptance check for primary candidates."""

    def __init__(self, place: SelectedPlace, provider, max_distance_km: float = 150.0,
                 allow_place_shaped: bool = False):
        self.place = place
        self.provider = provider
        self.max_distance_km = max_distance_km
        self.allow_place_shaped = allow_place_shaped

    async def evaluate(self, summary: Optional[ArticleSummary]) -> Verdict:
        if summary is None:
            return Verdict(False, "not_found")
        if summary.is_disambiguation:
            return Verdict(False, "disambiguation")
        badge = detect_badge(summary)
        if badge in ADMIN_BADGES:
            return Verdict(False, "admin", badge)
        if is_government_body_title(summary.title):
            return Verdict(False, "government_body", badge)
        if is_sub_place_title(summary.title, self.place):
            return Verdict(False, "sub_place", badge)

        if self.place.admin.city and summary.title.strip() == self.place.admin.city:
            return Verdict(True, "city_name_match", badge)

        if badge not in ACCEPTED_BADGES:
            if not (self.allow_place_shaped and badge is None and looks_like_place_name(summary.title)):
                return Verdict(False, "badge", badge)

        dist = await resolve_distance(summary, self.place.location, self.provider)
        if math.isfinite(dist) and dist > self.max_distance_km:
            return Verdict(False, "too_far", badge, dist)
        return Verdict(True, "badge_match", badge, dist)


# -- candidate strategies ---------------------------------------------------

CandidateStrategy = Callable[[SelectedPlace, object, Config], AsyncIterator[str]]


async def bare_names(place: SelectedPlace, provider, config: Config) -> AsyncIterator[str]:
    names = [place.admin.city, place.name]
    prefixes = [n.split(',')[0] for n in names if n and ',' in n]
    for title in _dedupe(names + prefixes):
        yield title


async def near_match(place: SelectedPlace, provider, config: Config) -> AsyncIterator[str]:
    query = place.composite_query
    if not query:
        return
    title = await provider.search_near_match(query)
    if title:
        yield title


def formatted_titles(place: SelectedPlace) -> List[str]:
    city = place.city_or_name
    admin = place.admin
    if not city:
        return _dedupe([place.name])
    titles = []
    if admin.state:
        titles += [f"{city}, {admin.state}", f"{city} ({admin.state})"]
    if admin.state_code:
        titles.append(f"{city}, {admin.state_code}")
    if admin.country:
        titles.append(f"{city}, {admin.country}")
    titles += [f"City of {city}", place.name]
    return _dedupe(titles)


async def formatted(place: SelectedPlace, provider, config: Config) -> AsyncIterator[str]:
    for title in formatted_titles(place):
        yield title


async def text_search(place: SelectedPlace, provider, config: Config) -> AsyncIterator[str]:
    queries = []
    if place.name:
        queries += [f"{place.name} city", f"{place.name} municipality"]
    queries.append(place.composite_query)
    for query in _dedupe(queries):
        for title in await provider.search_titles(query, config.resolver_config.search_limit):
            yield title


async def nearby(place: SelectedPlace, provider, config: Config) -> AsyncIterator[str]:
    if place.location is None:
        return
    rc = config.resolver_config
    for hit in await provider.geo_search(place.location.lat, place.location.lng, rc.geo_radius_m, rc.geo_limit):
        yield hit.title


STRATEGIES: List[Tuple[str, CandidateStrategy]] = [
    ("bare_name", bare_names),
    ("near_match", near_match),
    ("formatted", formatted),
    ("text_search", text_search),
    ("geosearch", nearby),
]


async def resolve_primary(place: SelectedPlace, provider, config: Optional[Config] = None,
                          tracer: Optional[tracing.Tracer] = None,
                          strategies: Optional[List[Tuple[str, CandidateStrategy]]] = None
                          ) -> Optional[ArticleSummary]:
    """The first accepted candidate, or None when every strategy is exhausted."""
    config = config or get_config()
    trace = tracing.safe_tracer(tracer)
    acceptance = PrimaryAcceptance(
        place,
        provider,
        max_distance_km=config.resolver_config.max_distance_km,
        allow_place_shaped=config.classifier_config.accept_place_shaped_titles,
    )
    tried = set()
    evaluated = set()

    for name, strategy in (strategies or STRATEGIES):
        async for title in strategy(place, provider, config):
            if title in tried:
                continue
            tried.add(title)
            trace(tracing.CANDIDATE_TRIED, strategy=name, title=title)

            summary = await lookup_summary(provider, title)
            if summary is not None and summary.title in evaluated:
                continue
            if summary is not None:
                evaluated.add(summary.title)

            verdict = await acceptance.evaluate(summary)
            if verdict.accepted:
                trace(tracing.CANDIDATE_ACCEPTED, strategy=name, title=summary.title, reason=verdict.reason)
                trace(tracing.PRIMARY_RESOLVED, title=summary.title, strategy=name)
                logger.debug("Primary for %r resolved to %r via %s", place.name, summary.title, name)
                return summary
            trace(tracing.CANDIDATE_REJECTED, strategy=name, title=title, reason=verdict.reason)

    trace(tracing.PRIMARY_RESOLVED, title=None, strategy=None)
    return None
