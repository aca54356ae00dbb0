"""
Candidate pool assembly.

An ordered cascade of increasingly permissive sources, deduplicated by
title and capped:

  1. primary article (see primary_resolver)
  2. nearby POIs from geosearch, scored and sorted (35 km geofence)
  3. keyword searches per topic, while the pool is short (60 km geofence)
  4. county / state / country articles, only when the pool is nearly empty

All state lives in a per-call accumulator; nothing is shared between runs.
"""
import logging
import math
import time
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from place_wiki.config import Config, get_config
from place_wiki.providers.wikipedia_provider import lookup_summary
from place_wiki.utils.async_utils import map_in_order

from . import tracing
from .classifier import detect_badge, is_admin, is_place_or_poi
from .geo import resolve_distance
from .models import ArticleSummary, GeoHit, LatLng, Pool, SelectedPlace
from .primary_resolver import resolve_primary
from .scoring import rank_by_score, score_item

logger = logging.getLogger(__name__)

KEYWORD_TOPICS = [
    "museum", "park", "historic district", "university", "airport", "stadium",
    "lake", "dam", "waterfall", "bridge", "mill", "theater", "zoo", "trail",
]


@dataclass
class PoolState:
    """Running accumulator for one build_pool call."""
    max_items: int
    items: List[ArticleSummary] = field(default_factory=list)
    seen: Set[str] = field(default_factory=set)

    @property
    def full(self) -> bool:
        return len(self.items) >= self.max_items

    def add(self, summary: ArticleSummary) -> bool:
        if self.full or summary.title in self.seen:
            return False
        self.seen.add(summary.title)
        self.items.append(summary)
        return True


@dataclass
class Candidate:
    summary: Optional[ArticleSummary]
    reason: str = ""
    title: str = ""


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


class _Classifier:
    """Fetch, filter and tag one POI candidate title."""

    def __init__(self, provider, origin: Optional[LatLng], geofence_km: float, allow_place_shaped: bool):
        self.provider = provider
        self.origin = origin
        self.geofence_km = geofence_km
        self.allow_place_shaped = allow_place_shaped

    async def __call__(self, item) -> Candidate:
        if isinstance(item, GeoHit):
            title, reported_km = item.title, item.dist_m / 1000.0
        else:
            title, reported_km = item, None

        summary = await lookup_summary(self.provider, title)
        if summary is None:
            return Candidate(None, "not_found", title)
        if not is_place_or_poi(summary, allow_place_shaped=self.allow_place_shaped):
            return Candidate(None, "not_place", title)
        if is_admin(summary):
            return Candidate(None, "admin", title)

        dist = await resolve_distance(summary, self.origin, self.provider)
        if not math.isfinite(dist) and reported_km is not None:
            dist = reported_km
        if self.origin is not None:
            if not math.isfinite(dist):
                return Candidate(None, "no_distance", title)
            if dist > self.geofence_km:
                return Candidate(None, "outside_geofence", title)

        summary.badge = detect_badge(summary)
        summary.distance_km = _finite_or_none(dist)
        return Candidate(summary, "", title)


async def _tag_primary(primary: ArticleSummary, origin: Optional[LatLng], provider) -> ArticleSummary:
    primary.is_primary = True
    primary.badge = detect_badge(primary)
    primary.distance_km = _finite_or_none(await resolve_distance(primary, origin, provider))
    return primary


async def _ranked_nearby(place: SelectedPlace, provider, config: Config, state: PoolState,
                         trace) -> List[ArticleSummary]:
    pc = config.pool_config
    origin = place.location
    hits = await provider.geo_search(origin.lat, origin.lng, pc.geo_radius_m, pc.geo_limit)
    hits = [h for h in hits if h.title not in state.seen]

    classify = _Classifier(provider, origin, pc.geofence_km,
                           config.classifier_config.accept_place_shaped_titles)
    scored: List[Tuple[ArticleSummary, float]] = []
    results = map_in_order(classify, hits, pc.lookup_concurrency)
    try:
        async for cand in results:
            if cand.summary is None:
                trace(tracing.POI_DISCARDED, stage="nearby", title=cand.title, reason=cand.reason)
                continue
            score = score_item(cand.summary.badge, cand.summary.distance_km, pc.proximity_cap_km)
            scored.append((cand.summary, score))
            if len(scored) >= pc.max_scored:
                break
    finally:
        await results.aclose()

    return [s for s, _ in rank_by_score(scored, key=lambda pair: pair[1])]


async def _keyword_fallback(place: SelectedPlace, provider, config: Config, state: PoolState, trace) -> None:
    pc = config.pool_config
    base = place.composite_query
    if not base:
        return
    classify = _Classifier(provider, place.location, pc.keyword_geofence_km,
                           config.classifier_config.accept_place_shaped_titles)
    for topic in KEYWORD_TOPICS:
        if state.full:
            return
        titles = await provider.search_titles(f"{base} {topic}", pc.keyword_limit)
        titles = [t for t in titles if t not in state.seen]
        results = map_in_order(classify, titles, pc.lookup_concurrency)
        try:
            async for cand in results:
                if cand.summary is None:
                    trace(tracing.POI_DISCARDED, stage="keyword", title=cand.title, reason=cand.reason)
                    continue
                state.add(cand.summary)
                if state.full:
                    break
        finally:
            await results.aclose()


def admin_titles(place: SelectedPlace) -> List[str]:
    admin = place.admin
    titles = []
    if admin.county and admin.state:
        titles.append(f"{admin.county}, {admin.state}")
    titles += [admin.state, admin.country]
    return [t for t in titles if t]


async def _admin_fallback(place: SelectedPlace, provider, state: PoolState, trace) -> None:
    for title in admin_titles(place):
        if state.full or title in state.seen:
            continue
        summary = await lookup_summary(provider, title)
        if summary is None or not is_admin(summary):
            trace(tracing.POI_DISCARDED, stage="admin", title=title,
                  reason="not_found" if summary is None else "not_admin")
            continue
        summary.badge = detect_badge(summary)
        summary.distance_km = _finite_or_none(await resolve_distance(summary, place.location, provider))
        state.add(summary)


async def build_pool(place: SelectedPlace, provider, config: Optional[Config] = None,
                     tracer: Optional[tracing.Tracer] = None) -> Pool:
    """Primary first, then ranked POIs, keyword finds and admin areas.

    "Not found" anywhere is absorbed; ProviderError from a transport
    failure propagates to the caller.
    """
    config = config or get_config()
    pc = config.pool_config
    trace = tracing.safe_tracer(tracer)
    started = time.monotonic()
    state = PoolState(max_items=pc.max_items)

    primary = await resolve_primary(place, provider, config, tracer)
    if primary is not None:
        state.add(await _tag_primary(primary, place.location, provider))
    trace(tracing.POOL_STAGE, stage="primary", size=len(state.items))

    if place.location is not None and not state.full:
        for summary in await _ranked_nearby(place, provider, config, state, trace):
            if state.full:
                break
            state.add(summary)
    trace(tracing.POOL_STAGE, stage="nearby", size=len(state.items))

    if not state.full:
        await _keyword_fallback(place, provider, config, state, trace)
    trace(tracing.POOL_STAGE, stage="keyword", size=len(state.items))

    if len(state.items) < pc.min_before_admin_fallback:
        await _admin_fallback(place, provider, state, trace)
        trace(tracing.POOL_STAGE, stage="admin", size=len(state.items))

    pool = state.items[:pc.max_items]
    elapsed_ms = (time.monotonic() - started) * 1000
    trace(tracing.POOL_BUILT, size=len(pool), primary=pool[0].title if pool and pool[0].is_primary else None,
          elapsed_ms=elapsed_ms)
    logger.info("Built pool of %d for %r in %.0f ms", len(pool), place.name, elapsed_ms)
    return pool
